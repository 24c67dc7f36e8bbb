"""Vertices and edges of a line-coverage graph."""

from __future__ import annotations

import copy as _copy
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from .geometry import Vec2d


@dataclass(eq=False)
class Vertex:
    """A graph vertex with an ID, latitude/longitude/altitude and planar position."""

    id: int = 0
    lla: tuple[float, float, float] = (0.0, 0.0, 0.0)
    xy: Vec2d = field(default_factory=Vec2d)
    adjacent_edges: list = field(default_factory=list, repr=False)

    def set_lla(self, lat: float, lon: float, alt: float) -> None:
        """Set latitude, longitude and altitude."""
        self.lla = (lat, lon, alt)

    def set_xy(self, x: float, y: float) -> None:
        """Set the planar position."""
        self.xy = Vec2d(x, y)

    def add_edge(self, edge: Edge) -> None:
        """Record an edge adjacent to this vertex."""
        self.adjacent_edges.append(edge)

    def clear_adjacency(self) -> None:
        """Forget all adjacent edges."""
        self.adjacent_edges.clear()

    def copy(self) -> Vertex:
        """Return a copy of the vertex data without the adjacency list."""
        return Vertex(self.id, self.lla, self.xy.copy())


_Endpoint = Union[Vertex, int, None]


class Edge:
    """A directed edge with separate service and deadhead costs and demands.

    The endpoints may be given as vertices or as bare vertex IDs.
    """

    def __init__(
        self,
        tail: _Endpoint = None,
        head: _Endpoint = None,
        required: bool = True,
        service_cost: float = 0.0,
        service_cost_rev: float = 0.0,
        deadhead_cost: float = 0.0,
        deadhead_cost_rev: float = 0.0,
    ) -> None:
        self.tail_vertex: Optional[Vertex] = None
        self.head_vertex: Optional[Vertex] = None
        self.tail_id: Optional[int] = None
        self.head_id: Optional[int] = None
        if isinstance(tail, Vertex) or isinstance(head, Vertex):
            self.set_vertices(
                tail if isinstance(tail, Vertex) else None,
                head if isinstance(head, Vertex) else None,
            )
        else:
            self.tail_id = tail
            self.head_id = head
        self.required = required
        self.cost = 0.0
        self.service_cost = service_cost
        self.service_cost_rev = service_cost_rev
        self.deadhead_cost = deadhead_cost
        self.deadhead_cost_rev = deadhead_cost_rev
        self.demand = 0.0
        self.service_demand = 0.0
        self.service_demand_rev = 0.0
        self.deadhead_demand = 0.0
        self.deadhead_demand_rev = 0.0

    def __repr__(self) -> str:
        return (
            f"Edge(tail={self.tail_id!r}, head={self.head_id!r}, "
            f"required={self.required!r}, cost={self.cost!r})"
        )

    def set_vertices(self, tail: Optional[Vertex], head: Optional[Vertex]) -> None:
        """Attach endpoint vertices; the IDs follow the vertices."""
        self.tail_vertex = tail
        self.head_vertex = head
        self.tail_id = tail.id if tail is not None else None
        self.head_id = head.id if head is not None else None

    def set_required_data(
        self,
        tail: Optional[Vertex],
        head: Optional[Vertex],
        service_cost: float,
        service_cost_rev: float,
        deadhead_cost: float,
        deadhead_cost_rev: float,
    ) -> None:
        """Make this a required edge with the given endpoints and costs."""
        self.set_vertices(tail, head)
        self.required = True
        self.service_cost = service_cost
        self.service_cost_rev = service_cost_rev
        self.deadhead_cost = deadhead_cost
        self.deadhead_cost_rev = deadhead_cost_rev

    def set_non_required_data(
        self,
        tail: Optional[Vertex],
        head: Optional[Vertex],
        deadhead_cost: float,
        deadhead_cost_rev: float,
    ) -> None:
        """Make this a non-required edge with the given endpoints and costs."""
        self.set_vertices(tail, head)
        self.required = False
        self.deadhead_cost = deadhead_cost
        self.deadhead_cost_rev = deadhead_cost_rev

    def tail_xy(self) -> Vec2d:
        """Return the position of the tail vertex."""
        if self.tail_vertex is None:
            raise ValueError("edge has no tail vertex")
        return self.tail_vertex.xy.copy()

    def head_xy(self) -> Vec2d:
        """Return the position of the head vertex."""
        if self.head_vertex is None:
            raise ValueError("edge has no head vertex")
        return self.head_vertex.xy.copy()

    def set_costs(self, cost: float) -> None:
        """Set the plain, service and deadhead costs, both directions, to ``cost``."""
        self.cost = cost
        self.service_cost = self.service_cost_rev = cost
        self.deadhead_cost = self.deadhead_cost_rev = cost

    def set_service_cost(self, cost: float, cost_rev: Optional[float] = None) -> None:
        """Set the service cost; the reverse cost defaults to the forward one."""
        self.service_cost = cost
        self.service_cost_rev = cost if cost_rev is None else cost_rev

    def set_deadhead_cost(self, cost: float, cost_rev: Optional[float] = None) -> None:
        """Set the deadhead cost; the reverse cost defaults to the forward one."""
        self.deadhead_cost = cost
        self.deadhead_cost_rev = cost if cost_rev is None else cost_rev

    def set_service_demands(self, demand: float, demand_rev: float) -> None:
        """Set forward and reverse service demands."""
        self.service_demand = demand
        self.service_demand_rev = demand_rev

    def set_deadhead_demands(self, demand: float, demand_rev: float) -> None:
        """Set forward and reverse deadhead demands."""
        self.deadhead_demand = demand
        self.deadhead_demand_rev = demand_rev

    def set_demands_to_costs(self) -> None:
        """Copy service and deadhead costs into the matching demands."""
        self.service_demand = self.service_cost
        self.service_demand_rev = self.service_cost_rev
        self.deadhead_demand = self.deadhead_cost
        self.deadhead_demand_rev = self.deadhead_cost_rev

    def _length(self) -> float:
        return self.tail_xy().dist(self.head_xy())

    def compute_cost(self) -> None:
        """Set all costs to the Euclidean length of the edge."""
        dist = self._length()
        self.set_service_cost(dist, dist)
        self.set_deadhead_cost(dist, dist)
        self.cost = dist

    def compute_travel_time_ramp(self, acc: float, vel: float) -> None:
        """Set all costs to the travel time under a trapezoidal velocity profile."""
        dist = self._length()
        t_ramp = vel / acc
        dist_ramp = vel * t_ramp / 2.0
        if dist < 2 * dist_ramp:
            total_time = math.sqrt(4 * dist / acc)
        else:
            total_time = 2 * t_ramp + (dist - 2 * dist_ramp) / vel
        self.set_service_cost(total_time, total_time)
        self.set_deadhead_cost(total_time, total_time)
        self.cost = total_time

    def reverse(self) -> None:
        """Swap direction: endpoints, costs and demands exchange with their reverses."""
        self.tail_vertex, self.head_vertex = self.head_vertex, self.tail_vertex
        self.tail_id, self.head_id = self.head_id, self.tail_id
        self.service_cost, self.service_cost_rev = self.service_cost_rev, self.service_cost
        self.deadhead_cost, self.deadhead_cost_rev = self.deadhead_cost_rev, self.deadhead_cost
        self.service_demand, self.service_demand_rev = (
            self.service_demand_rev,
            self.service_demand,
        )
        self.deadhead_demand, self.deadhead_demand_rev = (
            self.deadhead_demand_rev,
            self.deadhead_demand,
        )

    def copy(self) -> Edge:
        """Return a copy sharing the same endpoint vertices."""
        return _copy.copy(self)