"""Closed coverage routes, shortest-path connection and 2-opt improvement."""

from __future__ import annotations

import heapq
import math
import os
from typing import Iterable, Iterator, Optional, Union

from .edge_costs import EdgeCost
from .elements import Edge, Vertex
from .graph import Graph

PathLike = Union[str, "os.PathLike[str]"]

_KML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    ' <kml xmlns="http://www.opengis.net/kml/2.2">\n'
    " <Document>\n"
)
_KML_FOOTER = "</Document>\n </kml>"


def _fmt(value: float) -> str:
    return f"{value:.16g}"


class ShortestPaths:
    """Deadheading shortest paths between vertex indices of a graph.

    Every edge, required or not, can be traversed in both directions at its
    forward or reverse deadhead cost.
    """

    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self._adjacency: list[list[tuple[int, float, Edge, bool]]] = [
            [] for _ in range(graph.n)
        ]
        for edge in graph.required_edges + graph.non_required_edges:
            t = graph.vertex_index(edge.tail_id)
            h = graph.vertex_index(edge.head_id)
            if t == h:
                continue
            self._adjacency[t].append((h, edge.deadhead_cost, edge, False))
            self._adjacency[h].append((t, edge.deadhead_cost_rev, edge, True))
        self._trees: dict[int, tuple[dict[int, float], dict[int, tuple[int, Edge, bool]]]] = {}

    def _tree(self, source: int):
        if not 0 <= source < len(self._adjacency):
            raise IndexError(f"vertex index {source} is out of range")
        tree = self._trees.get(source)
        if tree is not None:
            return tree
        dist: dict[int, float] = {source: 0.0}
        pred: dict[int, tuple[int, Edge, bool]] = {}
        done: set[int] = set()
        heap = [(0.0, source)]
        while heap:
            d, u = heapq.heappop(heap)
            if u in done:
                continue
            done.add(u)
            for v, weight, edge, rev in self._adjacency[u]:
                nd = d + weight
                if nd < dist.get(v, math.inf):
                    dist[v] = nd
                    pred[v] = (u, edge, rev)
                    heapq.heappush(heap, (nd, v))
        tree = (dist, pred)
        self._trees[source] = tree
        return tree

    def cost(self, source: int, target: int) -> float:
        """Return the shortest deadhead cost; infinity if unreachable."""
        if not 0 <= target < len(self._adjacency):
            raise IndexError(f"vertex index {target} is out of range")
        dist, _ = self._tree(source)
        return dist.get(target, math.inf)

    def path(self, source: int, target: int) -> list[Edge]:
        """Return the deadheading edges of a shortest path, in travel order."""
        if not 0 <= target < len(self._adjacency):
            raise IndexError(f"vertex index {target} is out of range")
        dist, pred = self._tree(source)
        if target not in dist:
            raise ValueError(f"vertex index {target} is unreachable from {source}")
        steps: list[Edge] = []
        node = target
        while node != source:
            prev, edge, rev = pred[node]
            step = edge.copy()
            if rev:
                step.reverse()
            step.required = False
            step.cost = step.deadhead_cost
            steps.append(step)
            node = prev
        steps.reverse()
        return steps


class Route:
    """An ordered sequence of serviced and deadheaded edges forming a tour."""

    def __init__(
        self,
        edges: Iterable[Edge] = (),
        graph: Optional[Graph] = None,
        shortest_paths: Optional[ShortestPaths] = None,
    ) -> None:
        self.edges: list[Edge] = list(edges)
        self.graph = graph
        if shortest_paths is None and graph is not None:
            shortest_paths = ShortestPaths(graph)
        self.shortest_paths = shortest_paths
        self.cumulative_costs: list[float] = []
        self.rev_cumulative_costs: list[float] = []
        self.local_moves_count = 0
        self._route_vector: list[Edge] = []
        self._m = 0

    def __len__(self) -> int:
        return len(self.edges)

    def __iter__(self) -> Iterator[Edge]:
        return iter(self.edges)

    def __str__(self) -> str:
        lines = []
        cost = 0.0
        for i, edge in enumerate(self.edges):
            cost += edge.cost
            c, c_rev = self.edge_costs(edge)
            lines.append(
                f"{i} {edge.tail_id} {edge.head_id} {int(edge.required)} "
                f"{cost:g} {c:g} {c_rev:g}"
            )
        return "\n".join(lines)

    # Helpers -----------------------------------------------------------

    def _require_graph(self) -> tuple[Graph, ShortestPaths]:
        if self.graph is None or self.shortest_paths is None:
            raise RuntimeError("route has no graph or shortest paths attached")
        return self.graph, self.shortest_paths

    def _index(self, vertex_id: Optional[int]) -> int:
        graph, _ = self._require_graph()
        return graph.vertex_index(vertex_id)

    def _sp_cost(self, source: int, target: int) -> float:
        return self._require_graph()[1].cost(source, target)

    def _sp_path(self, source: int, target: int) -> list[Edge]:
        return self._require_graph()[1].path(source, target)

    # Basic operations --------------------------------------------------

    def add_edge(self, edge: Edge) -> None:
        """Append ``edge`` to the route."""
        self.edges.append(edge)

    def insert_edge(self, index: int, edge: Edge) -> int:
        """Insert ``edge`` before position ``index`` and return its position."""
        self.edges.insert(index, edge)
        return index

    def check_route(self) -> bool:
        """Return True if each edge starts where the previous one ends."""
        return all(
            prev.head_id == nxt.tail_id for prev, nxt in zip(self.edges, self.edges[1:])
        )

    def cost(self) -> float:
        """Return the sum of the edges' plain costs."""
        return sum(edge.cost for edge in self.edges)

    @staticmethod
    def edge_costs(edge: Edge) -> tuple[float, float]:
        """Return forward and reverse cost: service for required, else deadhead."""
        if edge.required:
            return edge.service_cost, edge.service_cost_rev
        return edge.deadhead_cost, edge.deadhead_cost_rev

    def compute_cumulative_costs(self) -> None:
        """Compute prefix sums of forward costs and suffix sums of reverse costs."""
        self._route_vector = list(self.edges)
        self._m = len(self._route_vector)
        forward = []
        backward = []
        for edge in self._route_vector:
            c, c_rev = self.edge_costs(edge)
            forward.append(c)
            backward.append(c_rev)
        for i in range(1, len(forward)):
            forward[i] += forward[i - 1]
        for i in range(len(backward) - 2, -1, -1):
            backward[i] += backward[i + 1]
        backward.append(0.0)
        self.cumulative_costs = forward
        self.rev_cumulative_costs = backward

    # 2-opt -------------------------------------------------------------

    def two_opt_swap(self, i: int, k: int, has_depot: bool = False) -> float:
        """Return the estimated cost of the route with edges ``i..k`` reversed."""
        rv = self._route_vector
        m = self._m
        cum = self.cumulative_costs
        rev = self.rev_cumulative_costs
        idx = self._index

        if i == k and not rv[k].required:
            return cum[m - 1]
        if i == 0 and k == m - 1:
            return rev[0]
        if not has_depot and i == 1 and not rv[0].required and k == m - 1:
            u = idx(rv[0].head_id)
            v = idx(rv[0].tail_id)
            return rev[i] + self._sp_cost(u, v)

        start_vertex = idx(rv[0].tail_id)
        cost = 0.0
        link_ab_u = start_vertex
        if i != 0:
            if rv[i - 1].required:
                cost = cum[i - 1]
                link_ab_u = idx(rv[i - 1].head_id)
            elif i > 1:
                cost = cum[i - 2]
                link_ab_u = idx(rv[i - 2].head_id)
        if i == 0 and has_depot:
            link_ab_u = idx(rv[0].tail_id)

        partb = rev[i] - rev[k + 1]
        if not rv[k].required:
            partb -= rv[k].deadhead_cost_rev
            link_ab_v = idx(rv[k].tail_id)
        else:
            link_ab_v = idx(rv[k].head_id)

        if (i == 0 or (i == 1 and not rv[0].required)) and not has_depot:
            start_vertex = link_ab_v
            cost = partb
        else:
            cost += partb + self._sp_cost(link_ab_u, link_ab_v)

        if rv[i].required or (i <= 1 and has_depot):
            link_bc_u = idx(rv[i].tail_id)
        else:
            cost -= rv[i].deadhead_cost_rev
            link_bc_u = idx(rv[i].head_id)

        if k == m - 1 or (k == m - 2 and not rv[k + 1].required):
            return cost + self._sp_cost(link_bc_u, start_vertex)

        partc = cum[m - 1] - cum[k]
        if not rv[k + 1].required:
            partc -= rv[k + 1].deadhead_cost
            link_bc_v = idx(rv[k + 2].tail_id)
        else:
            link_bc_v = idx(rv[k + 1].tail_id)
        cost += partc + self._sp_cost(link_bc_u, link_bc_v)

        if not rv[m - 1].required:
            cost -= rv[m - 1].deadhead_cost
            end_vertex = idx(rv[m - 1].tail_id)
        else:
            end_vertex = idx(rv[m - 1].head_id)
        return cost + self._sp_cost(end_vertex, start_vertex)

    def two_opt(self, has_depot: bool = False) -> None:
        """Apply improving segment reversals until none is found or moves run out."""
        graph, _ = self._require_graph()
        best_cost = self.cost()
        self.local_moves_count = 0
        max_moves = graph.n ** 3
        improved = True
        while improved and self.local_moves_count <= max_moves:
            self.compute_cumulative_costs()
            m = self._m
            improved = False
            for i in range(m - 1):
                for k in range(i, m):
                    self.local_moves_count += 1
                    new_cost = self.two_opt_swap(i, k, has_depot)
                    if new_cost < best_cost:
                        best_cost = new_cost
                        improved = True
                        self.two_opt_aux(i, k)
                        self.route_improvement()
                        break
                if improved:
                    break

    def two_opt_aux(self, i: int, k: int) -> None:
        """Reverse the edges ``i..k`` in place and reconnect the route."""
        segment = []
        for edge in self.edges[i : k + 1]:
            flipped = edge.copy()
            flipped.reverse()
            flipped.cost = flipped.service_cost if flipped.required else flipped.deadhead_cost
            segment.append(flipped)
        segment.reverse()
        self.edges = self.edges[:i] + segment + self.edges[k + 1 :]
        self.connect_route()

    def connect_route(self) -> None:
        """Insert shortest deadhead paths wherever consecutive edges do not meet."""
        if not self.edges:
            return
        if len(self.edges) == 1:
            edge = self.edges[0]
            for step in self._sp_path(self._index(edge.tail_id), self._index(edge.head_id)):
                self.add_edge(step)
        i = 0
        while i + 1 < len(self.edges):
            u = self.edges[i].head_id
            v = self.edges[i + 1].tail_id
            inserted = 0
            if u != v:
                steps = self._sp_path(self._index(u), self._index(v))
                self.edges[i + 1 : i + 1] = steps
                inserted = len(steps)
            i += 1 + inserted
        u = self.edges[-1].head_id
        v = self.edges[0].tail_id
        if u != v:
            self.edges.extend(self._sp_path(self._index(u), self._index(v)))

    # Improvement -------------------------------------------------------

    def _shortcut(self, start: int, end: int, stop: int, cost: float) -> int:
        """Replace edges ``start..stop-1`` by a shortest path if it is cheaper.

        Returns the new position of the edge that was at ``stop``.
        """
        t = self._index(self.edges[start].tail_id)
        h = self._index(self.edges[end].head_id)
        if self._sp_cost(t, h) < cost:
            steps = self._sp_path(t, h)
            self.edges[start:stop] = steps
            return start + len(steps)
        return stop

    def route_improvement(self) -> None:
        """Shorten runs of deadheading edges and rejoin deadheading at both ends."""
        start = end = 0
        in_run = False
        cost = 0.0
        i = 0
        while i < len(self.edges):
            edge = self.edges[i]
            if edge.required:
                if in_run:
                    i = self._shortcut(start, end, i, cost)
                in_run = False
                cost = 0.0
            else:
                if not in_run:
                    in_run = True
                    start = i
                end = i
                cost += edge.cost
                if i + 1 == len(self.edges):
                    self._shortcut(start, end, len(self.edges), cost)
                    break
            i += 1

        edges = self.edges
        if len(edges) > 1 and not edges[0].required and not edges[-1].required:
            required_positions = [pos for pos, e in enumerate(edges) if e.required]
            if not required_positions:
                return
            front = required_positions[0]
            back = required_positions[-1] + 1
            t = self._index(edges[back - 1].head_id)
            h = self._index(edges[front].tail_id)
            self.edges = edges[front:back]
            self.edges.extend(self._sp_path(t, h))

    def rotate_to_depot(self, depot_id: int) -> None:
        """Rotate the route to start with the first edge leaving ``depot_id``."""
        for pos, edge in enumerate(self.edges):
            if edge.tail_id == depot_id:
                self.edges = self.edges[pos:] + self.edges[:pos]
                return

    # Output ------------------------------------------------------------

    def write_route_data(self, path: PathLike) -> None:
        """Write ``tail head required cumulative_cost`` per edge."""
        cost = 0.0
        with open(path, "w", encoding="utf-8") as out:
            for edge in self.edges:
                cost += edge.cost
                out.write(
                    f"{edge.tail_id} {edge.head_id} {int(edge.required)} {_fmt(cost)}\n"
                )

    def write_route_edge_data(self, path: PathLike) -> None:
        """Write ``tx ty hx hy required cumulative_cost`` per edge."""
        cost = 0.0
        with open(path, "w", encoding="utf-8") as out:
            for edge in self.edges:
                cost += edge.cost
                t, h = edge.tail_xy(), edge.head_xy()
                out.write(
                    f"{_fmt(t.x)} {_fmt(t.y)} {_fmt(h.x)} {_fmt(h.y)} "
                    f"{int(edge.required)} {_fmt(cost)}\n"
                )

    def write_waypoints(self, path: PathLike) -> None:
        """Write each edge's tail position, then the last edge's head position."""
        if not self.edges:
            raise ValueError("route is empty")
        with open(path, "w", encoding="utf-8") as out:
            for edge in self.edges:
                xy = edge.tail_xy()
                out.write(f"{_fmt(xy.x)} {_fmt(xy.y)} {int(edge.required)}\n")
            last = self.edges[-1]
            xy = last.head_xy()
            out.write(f"{_fmt(xy.x)} {_fmt(xy.y)} {int(last.required)}")

    @staticmethod
    def _placemark(count: int, vertex: Vertex) -> str:
        lat, lon, _ = vertex.lla
        return (
            "<Placemark>\n"
            f"<name>{count}</name>\n"
            f"<description>{count}</description>\n"
            "<Point>\n"
            f"<coordinates>{_fmt(lon)},{_fmt(lat)}</coordinates>\n"
            "</Point>\n"
            "</Placemark>\n"
        )

    def _write_kml(self, path: PathLike, reverse: bool) -> None:
        if not self.edges or self.edges[0].tail_vertex is None:
            raise ValueError("route is empty or has no vertices")
        parts = [_KML_HEADER, self._placemark(1, self.edges[0].tail_vertex)]
        count = 2
        sequence = reversed(self.edges) if reverse else self.edges
        for edge in sequence:
            if edge.tail_vertex is not None and edge.head_vertex is not None:
                vertex = edge.tail_vertex if reverse else edge.head_vertex
                parts.append(self._placemark(count, vertex))
                count += 1
        parts.append(_KML_FOOTER)
        with open(path, "w", encoding="utf-8") as out:
            out.write("".join(parts))

    def write_kml(self, path: PathLike) -> None:
        """Write the route's waypoints as KML placemarks."""
        self._write_kml(path, reverse=False)

    def write_kml_reverse(self, path: PathLike) -> None:
        """Write the route's waypoints in reverse order as KML placemarks."""
        self._write_kml(path, reverse=True)

    def cost_compare(self, edge_cost: EdgeCost) -> float:
        """Return the route cost evaluated with another edge cost model."""
        total = 0.0
        for edge in self.edges:
            if edge.required:
                total += edge_cost.compute_service_cost(edge)[0]
            else:
                total += edge_cost.compute_deadhead_cost(edge)[0]
        return total

    def num_turns(self) -> int:
        """Return the number of transitions between consecutive edges."""
        return len(self.edges) - 1