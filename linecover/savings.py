"""Generic savings-based route merging."""

from __future__ import annotations

import heapq
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .elements import Edge
from .geometry import DOUBLE_MAX


@dataclass
class RouteSavings:
    """Savings obtained by merging routes ``p`` and ``q``."""

    p: Optional[int] = None
    q: Optional[int] = None
    savings: float = -DOUBLE_MAX
    savings_perm: Optional[int] = None
    demands: float = 0.0
    depot: Optional[int] = None

    def __lt__(self, other: RouteSavings) -> bool:
        return self.savings < other.savings


@dataclass
class MEMRoute:
    """A route built by merging two routes, or a leaf holding one edge."""

    route1: Optional[MEMRoute] = None
    route2: Optional[MEMRoute] = None
    edge: tuple[Optional[Edge], bool] = (None, False)
    vertex_idx_start: Optional[int] = None
    vertex_idx_end: Optional[int] = None
    edge_idx_start: Optional[int] = None
    edge_idx_end: Optional[int] = None
    start_reversed: bool = False
    end_reversed: bool = False
    reversed: bool = False
    cost: float = 0.0
    demand: float = 0.0
    req_cost: float = 0.0
    req_cost_rev: float = 0.0
    req_demand: float = 0.0
    req_demand_rev: float = 0.0
    depot: Optional[int] = None

    def xor(self, reverse: bool) -> None:
        """Flip the direction flag if ``reverse`` is True."""
        self.reversed = self.reversed ^ reverse

    def vertices(self) -> tuple[Optional[int], Optional[int]]:
        """Return the start and end vertex indices in the direction of travel."""
        if self.reversed:
            return self.vertex_idx_end, self.vertex_idx_start
        return self.vertex_idx_start, self.vertex_idx_end

    def edges(self) -> tuple[Optional[int], Optional[int]]:
        """Return the first and last edge indices."""
        return self.edge_idx_start, self.edge_idx_end


class SavingsMerger(ABC):
    """Merges routes greedily, largest savings first.

    Subclasses keep the routes; a merge appends the merged route as the last
    one and empties the routes it was built from.
    """

    @abstractmethod
    def compute_savings(self, savings: RouteSavings) -> bool:
        """Fill in ``savings`` for routes ``p`` and ``q``; return False if they cannot merge."""

    @abstractmethod
    def merge(self, savings: RouteSavings) -> None:
        """Merge routes ``p`` and ``q`` as described by ``savings``."""

    @abstractmethod
    def is_tour_empty(self, index: int) -> bool:
        """Return True if route ``index`` has been merged away."""

    @abstractmethod
    def num_routes(self) -> int:
        """Return the number of routes, empty ones included."""

    def run(self) -> None:
        """Merge routes until no feasible pair is left."""
        counter = itertools.count()
        heap: list[tuple[float, int, RouteSavings]] = []

        def push(rs: RouteSavings) -> None:
            heap.append((-rs.savings, next(counter), rs))

        m = self.num_routes()
        for i, j in itertools.combinations(range(m), 2):
            rs = RouteSavings(i, j)
            if self.compute_savings(rs):
                push(rs)
        heapq.heapify(heap)

        while heap:
            _, _, best = heapq.heappop(heap)
            if self.is_tour_empty(best.p) or self.is_tour_empty(best.q):
                continue
            self.merge(best)
            r = self.num_routes() - 1
            for i in range(r):
                if self.is_tour_empty(i):
                    continue
                rs = RouteSavings(r, i)
                if self.compute_savings(rs):
                    heapq.heappush(heap, (-rs.savings, next(counter), rs))