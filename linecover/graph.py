"""Graphs of required and non-required edges used for line coverage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .edge_costs import CircularTurn, EdgeCostCircularTurns
from .elements import Edge, Vertex
from .geometry import DOUBLE_MAX, Vec2d


@dataclass
class GraphEdge:
    """Reference to an edge of a graph with its traversal mode."""

    edge_index: int
    req: bool = True
    rev: bool = False
    serv: bool = True


class Graph:
    """A graph holding vertices, required edges and non-required edges.

    Vertices are addressed either by their ID or by their index in the graph.
    """

    def __init__(self, vertices: Iterable[Vertex] = (), edges: Iterable[Edge] = ()) -> None:
        self.vertices: list[Vertex] = []
        self.required_edges: list[Edge] = []
        self.non_required_edges: list[Edge] = []
        self._vertex_map: dict[int, int] = {}
        self._depot = 0
        self._depot_id = 0
        self._is_depot_set = False
        self._depot_xy = Vec2d()
        self.depot_list: list[int] = []
        self.has_multiple_depots = False
        self.capacity = 0.0
        self.turns_cost_fn: Optional[EdgeCostCircularTurns] = None
        for vertex in vertices:
            self.add_vertex(vertex.copy())
        self.add_edges(edges)

    # Sizes -------------------------------------------------------------

    @property
    def n(self) -> int:
        """Number of vertices."""
        return len(self.vertices)

    @property
    def m(self) -> int:
        """Number of required edges."""
        return len(self.required_edges)

    @property
    def m_nr(self) -> int:
        """Number of non-required edges."""
        return len(self.non_required_edges)

    # Vertices ----------------------------------------------------------

    def vertex_index(self, vertex_id: int) -> int:
        """Return the index of the vertex with ``vertex_id``; KeyError if absent."""
        try:
            return self._vertex_map[vertex_id]
        except KeyError:
            raise KeyError(f"vertex {vertex_id} is not in the graph") from None

    def vertex_id(self, index: int) -> int:
        """Return the ID of the vertex at ``index``."""
        return self.vertices[index].id

    def vertex(self, index: int) -> Optional[Vertex]:
        """Return the vertex at ``index``, or None if out of range."""
        if 0 <= index < len(self.vertices):
            return self.vertices[index]
        return None

    def has_vertex(self, vertex_id: int) -> bool:
        """Return True if a vertex with ``vertex_id`` exists."""
        return vertex_id in self._vertex_map

    def add_vertex(self, vertex: Vertex) -> None:
        """Add ``vertex`` to the graph; its ID must be new."""
        if vertex.id in self._vertex_map:
            raise ValueError(f"vertex {vertex.id} is already in the graph")
        self._vertex_map[vertex.id] = len(self.vertices)
        self.vertices.append(vertex)

    def _vertex_by_id(self, vertex_id: Optional[int]) -> Vertex:
        if vertex_id is None:
            raise ValueError("edge has no endpoint")
        return self.vertices[self.vertex_index(vertex_id)]

    # Edges -------------------------------------------------------------

    def _insert(self, edge: Edge) -> None:
        (self.required_edges if edge.required else self.non_required_edges).append(edge)
        tail, head = edge.tail_vertex, edge.head_vertex
        if tail is not None:
            tail.add_edge(edge)
        if head is not None and head is not tail:
            head.add_edge(edge)

    def add_edge(self, tail_id: int, head_id: int, required: bool = True) -> Edge:
        """Add a new edge between two existing vertices and return it."""
        edge = Edge(self._vertex_by_id(tail_id), self._vertex_by_id(head_id), required)
        self._insert(edge)
        return edge

    def add_edges(self, edges: Iterable[Edge]) -> None:
        """Add copies of ``edges``, attached to this graph's vertices, keeping their costs."""
        for source in edges:
            edge = source.copy()
            edge.set_vertices(
                self._vertex_by_id(source.tail_id), self._vertex_by_id(source.head_id)
            )
            self._insert(edge)

    def edge(self, index: int, required: bool = True) -> Edge:
        """Return the required or non-required edge at ``index``."""
        return (self.required_edges if required else self.non_required_edges)[index]

    def vertex_ids_of_edge(self, index: int, required: bool = True) -> tuple[int, int]:
        """Return the tail and head IDs of an edge."""
        edge = self.edge(index, required)
        return edge.tail_id, edge.head_id

    def vertex_indices_of_edge(self, index: int, required: bool = True) -> tuple[int, int]:
        """Return the tail and head indices of an edge."""
        t, h = self.vertex_ids_of_edge(index, required)
        return self.vertex_index(t), self.vertex_index(h)

    def vertex_xy_of_edge(self, index: int, required: bool = True) -> tuple[Vec2d, Vec2d]:
        """Return the tail and head positions of an edge."""
        edge = self.edge(index, required)
        return edge.tail_xy(), edge.head_xy()

    def vertex_lla_of_edge(
        self, index: int, required: bool = True
    ) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Return the tail and head latitude/longitude/altitude of an edge."""
        edge = self.edge(index, required)
        if edge.tail_vertex is None or edge.head_vertex is None:
            raise ValueError("edge has no attached vertices")
        return edge.tail_vertex.lla, edge.head_vertex.lla

    def graph_edge_vertex_ids(self, graph_edge: GraphEdge) -> tuple[int, int]:
        """Return tail and head IDs in the direction of travel."""
        t, h = self.vertex_ids_of_edge(graph_edge.edge_index, graph_edge.req)
        return (h, t) if graph_edge.rev else (t, h)

    def graph_edge_xy(self, graph_edge: GraphEdge) -> tuple[Vec2d, Vec2d]:
        """Return tail and head positions in the direction of travel."""
        t, h = self.vertex_xy_of_edge(graph_edge.edge_index, graph_edge.req)
        return (h, t) if graph_edge.rev else (t, h)

    def graph_edge_cost(self, graph_edge: GraphEdge) -> float:
        """Return the service or deadhead cost of a traversal."""
        if graph_edge.serv:
            return self.service_cost(graph_edge.edge_index, graph_edge.rev)
        return self.deadhead_cost(graph_edge.edge_index, graph_edge.req, graph_edge.rev)

    def clear_all_edges(self) -> None:
        """Remove every edge from the graph."""
        for vertex in self.vertices:
            vertex.clear_adjacency()
        self.required_edges.clear()
        self.non_required_edges.clear()

    # Depots ------------------------------------------------------------

    @property
    def depot(self) -> int:
        """Depot index; the tail of the first required edge if no depot is set."""
        if not self._is_depot_set:
            return self.vertex_indices_of_edge(0, True)[0]
        return self._depot

    @property
    def depot_id(self) -> int:
        """ID of the depot vertex."""
        return self._depot_id

    @property
    def depot_xy(self) -> Vec2d:
        """Position of the depot vertex."""
        return self._depot_xy.copy()

    @property
    def is_depot_set(self) -> bool:
        """True once a depot has been chosen."""
        return self._is_depot_set

    def set_depot(self, vertex_id: int) -> None:
        """Use the vertex with ``vertex_id`` as depot; KeyError if absent."""
        self.set_depot_index(self.vertex_index(vertex_id))

    def set_depot_index(self, index: int) -> None:
        """Use the vertex at ``index`` as depot."""
        vertex = self.vertices[index]
        self._depot = index
        self._depot_id = vertex.id
        self._is_depot_set = True
        self._depot_xy = vertex.xy.copy()

    def set_mean_depot(self) -> None:
        """Use as depot the required-edge endpoint nearest the mean of all vertices."""
        if not self.vertices:
            raise ValueError("graph has no vertices")
        mean = Vec2d()
        for vertex in self.vertices:
            mean.add(vertex.xy)
        mean = mean / len(self.vertices)
        best_dist = DOUBLE_MAX
        depot_id = self.vertex_id(0)
        for edge in self.required_edges:
            for vid, xy in ((edge.tail_id, edge.tail_xy()), (edge.head_id, edge.head_xy())):
                d = mean.dist_sqr(xy)
                if d < best_dist:
                    depot_id = vid
                    best_dist = d
        self.set_depot(depot_id)

    def add_depots(self, depot_ids: Iterable[int]) -> None:
        """Register several depots by ID; KeyError if any is absent."""
        ids = list(depot_ids)
        for vid in ids:
            if not self.has_vertex(vid):
                raise KeyError(f"depot {vid} is not in the graph")
        self.depot_list = ids
        self.has_multiple_depots = True

    def depots_xy(self) -> list[Vec2d]:
        """Return positions of the registered depots."""
        return [self.vertices[self.vertex_index(vid)].xy.copy() for vid in self.depot_list]

    def depot_indices(self) -> list[int]:
        """Return indices of the registered depots."""
        return [self.vertex_index(vid) for vid in self.depot_list]

    def add_all_depots(self) -> None:
        """Register every vertex as a depot."""
        self.depot_list = [vertex.id for vertex in self.vertices]

    def is_required_vertex(self, vertex_id: int) -> bool:
        """Return True if the vertex is an endpoint of some required edge."""
        return any(vertex_id in (e.tail_id, e.head_id) for e in self.required_edges)

    def check_depot_required_vertex(self) -> bool:
        """Return True if the depot lies on a required edge."""
        return self.is_required_vertex(self._depot_id)

    def add_depot_as_required_edge(self) -> Edge:
        """Add a zero-length required loop at the depot."""
        return self.add_edge(self._depot_id, self._depot_id, True)

    # Costs -------------------------------------------------------------

    def service_cost(self, index: int, reverse: bool = False) -> float:
        """Return the service cost of a required edge."""
        edge = self.required_edges[index]
        return edge.service_cost_rev if reverse else edge.service_cost

    def deadhead_cost(self, index: int, required: bool = True, reverse: bool = False) -> float:
        """Return the deadhead cost of an edge."""
        edge = self.edge(index, required)
        return edge.deadhead_cost_rev if reverse else edge.deadhead_cost

    def set_turns_cost_function(self, cost_fn: Optional[EdgeCostCircularTurns]) -> None:
        """Set the model used for turn costs."""
        self.turns_cost_fn = cost_fn

    def turn_cost(
        self,
        edge1: int,
        edge2: int,
        req1: bool,
        req2: bool,
        serv1: bool,
        serv2: bool,
        rev1: bool,
        rev2: bool,
    ) -> tuple[float, CircularTurn]:
        """Return the cost and geometry of turning from one edge onto another."""
        if self.turns_cost_fn is None:
            raise RuntimeError("no turn cost function is set")
        return self.turns_cost_fn.compute_turn_cost(
            self.edge(edge1, req1), self.edge(edge2, req2), serv1, serv2, rev1, rev2
        )

    def total_cost(self) -> float:
        """Return the sum of plain costs over all edges."""
        return sum(e.cost for e in self.required_edges) + sum(
            e.cost for e in self.non_required_edges
        )

    def length(self) -> float:
        """Return the total Euclidean length of the required edges."""
        return sum(e.tail_xy().dist(e.head_xy()) for e in self.required_edges)

    def _all_edges(self) -> list[Edge]:
        return self.required_edges + self.non_required_edges

    def set_default_edge_costs(self) -> None:
        """Set every edge's costs to its Euclidean length."""
        for edge in self._all_edges():
            edge.compute_cost()

    def set_ramp_edge_costs(self, acc: float, vel: float) -> None:
        """Set every edge's costs to its ramp-profile travel time."""
        for edge in self._all_edges():
            edge.compute_travel_time_ramp(acc, vel)

    def set_demands_to_costs(self) -> None:
        """Copy costs into demands on every edge."""
        for edge in self._all_edges():
            edge.set_demands_to_costs()

    def __str__(self) -> str:
        return (
            f"Number of nodes = {self.n}\n"
            f"Number of required edges = {self.m}\n"
            f"Number of non-required edges = {self.m_nr}"
        )