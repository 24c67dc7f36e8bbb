"""Edge cost models: wind-aware travel time and circular-arc turns."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .elements import Edge, Vertex
from .geometry import EPS, Vec2d, is_near_zero

# Distances below this are treated as zero length.
_DIST_EPS = 1e-10


def _endpoints_xy(edge: Edge) -> tuple[Vec2d, Vec2d]:
    tail: Vertex | None = edge.tail_vertex
    head: Vertex | None = edge.head_vertex
    if tail is None or head is None:
        raise ValueError("edge has no attached vertices")
    return tail.xy.copy(), head.xy.copy()


def _wind_travel_time(
    tail_xy: Vec2d, head_xy: Vec2d, vel: float, wind_speed: float, wind_direction: float
) -> float:
    """Time to travel from tail to head at airspeed ``vel`` in a steady wind."""
    d, _ = tail_xy.dist_tht(head_xy)
    if abs(d) < _DIST_EPS:
        return 0.0
    wind_vec = Vec2d(wind_speed * math.cos(wind_direction), wind_speed * math.sin(wind_direction))
    travel_vec = tail_xy.travel_vec(head_xy)
    try:
        cos_phi = wind_vec.cos_angle(travel_vec)
    except ValueError:
        cos_phi = 0.0
    b_by_2 = -wind_speed * cos_phi
    c = wind_speed * wind_speed - vel * vel
    ground_speed = -b_by_2 + math.sqrt(b_by_2 * b_by_2 - c)
    return d / ground_speed


class EdgeCost(ABC):
    """Computes forward and reverse costs for servicing and deadheading an edge."""

    @abstractmethod
    def compute_service_cost(self, edge: Edge) -> tuple[float, float]:
        """Return the forward and reverse service costs of ``edge``."""

    @abstractmethod
    def compute_deadhead_cost(self, edge: Edge) -> tuple[float, float]:
        """Return the forward and reverse deadhead costs of ``edge``."""


class EdgeCostTravelTime(EdgeCost):
    """Travel time as cost, with asymmetric costs caused by wind."""

    def __init__(
        self,
        service_speed: float,
        deadhead_speed: float,
        wind_speed: float,
        wind_direction: float,
    ) -> None:
        self.service_speed = service_speed
        self.deadhead_speed = deadhead_speed
        self.wind_speed = wind_speed
        self.wind_direction = wind_direction

    def compute_service_cost(self, edge: Edge) -> tuple[float, float]:
        t_xy, h_xy = _endpoints_xy(edge)
        return (
            self.compute_travel_time(t_xy, h_xy, self.service_speed),
            self.compute_travel_time(h_xy, t_xy, self.service_speed),
        )

    def compute_deadhead_cost(self, edge: Edge) -> tuple[float, float]:
        t_xy, h_xy = _endpoints_xy(edge)
        return (
            self.compute_travel_time(t_xy, h_xy, self.deadhead_speed),
            self.compute_travel_time(h_xy, t_xy, self.deadhead_speed),
        )

    def compute_travel_time(self, tail_xy: Vec2d, head_xy: Vec2d, vel: float) -> float:
        """Return the time to go from ``tail_xy`` to ``head_xy`` at airspeed ``vel``."""
        return _wind_travel_time(tail_xy, head_xy, vel, self.wind_speed, self.wind_direction)


@dataclass
class CircularTurn:
    """Geometry and kinematics of a circular-arc turn between two edges.

    ``status`` is 0 when no turn is needed, and 1 to 4 according to which
    constraint fixed the turning speed.
    """

    e1_acceleration_start_point: Vec2d = field(default_factory=Vec2d)
    e1_arc_start_point: Vec2d = field(default_factory=Vec2d)
    e2_acceleration_end_point: Vec2d = field(default_factory=Vec2d)
    e2_arc_end_point: Vec2d = field(default_factory=Vec2d)
    center_circular_arc: Vec2d = field(default_factory=Vec2d)
    vel: float = 0.0
    angular_vel: float = 0.0
    radius: float = 0.0
    arc_ang1: float = 0.0
    arc_ang2: float = 0.0
    dist_from_pivot: float = 0.0
    acc: float = 0.0
    status: int = 0

    def __str__(self) -> str:
        return (
            f"{self.e1_acceleration_start_point} {self.e1_arc_start_point}\n"
            f"{self.e2_arc_end_point} {self.e2_acceleration_end_point}\n"
            f"{self.vel:g} {self.angular_vel:g}\n"
            f"{self.arc_ang1:g} {self.arc_ang2:g} {self.status}\n"
        )


class EdgeCostCircularTurns(EdgeCost):
    """Wind-aware travel time plus turn costs along circular arcs."""

    def __init__(
        self,
        service_speed: float,
        deadhead_speed: float,
        wind_speed: float,
        wind_direction: float,
        angular_velocity: float,
        acc: float,
        delta: float,
    ) -> None:
        self.service_speed = service_speed
        self.deadhead_speed = deadhead_speed
        self.wind_speed = wind_speed
        self.wind_direction = wind_direction
        self.angular_velocity = angular_velocity
        self.acc = acc
        self.delta = delta

    def get_speed(self, serv: bool) -> float:
        """Return the service speed if ``serv`` else the deadhead speed."""
        return self.service_speed if serv else self.deadhead_speed

    def _oriented(self, edge: Edge, rev: bool) -> tuple[Vec2d, Vec2d]:
        t_xy, h_xy = edge.tail_xy(), edge.head_xy()
        return (h_xy, t_xy) if rev else (t_xy, h_xy)

    def verify_edge_pair(
        self, e1: Edge, e2: Edge, serv1: bool, serv2: bool, rev1: bool, rev2: bool
    ) -> bool:
        """Return True if the edges join and each is long enough to reach full speed."""
        e1_t, e1_h = self._oriented(e1, rev1)
        e2_t, e2_h = self._oriented(e2, rev2)
        vel1 = self.get_speed(serv1)
        vel2 = self.get_speed(serv2)
        if abs(e1_h.x - e2_t.x) > EPS or abs(e1_h.y - e2_t.y) > EPS:
            return False
        norm21 = (e1_h - e1_t).norm()
        norm32 = (e2_h - e2_t).norm()
        if norm21 < EPS or norm32 < EPS:
            return False
        if norm21 / 2.0 < vel1 * vel1 / (2.0 * self.acc):
            return False
        if norm32 / 2.0 < vel2 * vel2 / (2.0 * self.acc):
            return False
        return True

    def compute_service_cost(self, edge: Edge) -> tuple[float, float]:
        t_xy, h_xy = _endpoints_xy(edge)
        return (
            self.compute_travel_time(t_xy, h_xy, self.service_speed),
            self.compute_travel_time(h_xy, t_xy, self.service_speed),
        )

    def compute_deadhead_cost(self, edge: Edge) -> tuple[float, float]:
        t_xy, h_xy = _endpoints_xy(edge)
        return (
            self.compute_travel_time(t_xy, h_xy, self.deadhead_speed),
            self.compute_travel_time(h_xy, t_xy, self.deadhead_speed),
        )

    def compute_travel_time(self, tail_xy: Vec2d, head_xy: Vec2d, vel: float) -> float:
        """Return the time to go from ``tail_xy`` to ``head_xy`` at airspeed ``vel``."""
        return _wind_travel_time(tail_xy, head_xy, vel, self.wind_speed, self.wind_direction)

    def _limit_speed(
        self, l_lambda: float, init_vel: float, vel: float, max_l: float, cot_omega: float,
        cos_theta: float, sin_theta: float,
    ) -> float | None:
        """Return a reduced turning speed if the edge is too short, else None."""
        omega = self.angular_velocity
        acc = self.acc
        if l_lambda + (init_vel * init_vel - vel * vel) / (2 * acc) <= max_l:
            return None
        det = (
            cos_theta * cos_theta / (sin_theta * sin_theta * omega * omega)
            + init_vel * init_vel / (acc * acc)
            - 2.0 * max_l / acc
        )
        if det < 0:
            return None
        sqrt_det = math.sqrt(det)
        vl1 = acc * (cot_omega + sqrt_det)
        vl2 = acc * (cot_omega - sqrt_det)
        if vl1 > vel:
            return min(max(0.0, vl2), vel)
        return None

    def compute_turn_cost(
        self, e1: Edge, e2: Edge, serv1: bool, serv2: bool, rev1: bool, rev2: bool
    ) -> tuple[float, CircularTurn]:
        """Return the time cost of turning from ``e1`` onto ``e2`` and the turn geometry.

        Raises ValueError if the edges do not join or either has zero length.
        """
        e1_t, e1_h = self._oriented(e1, rev1)
        e2_t, e2_h = self._oriented(e2, rev2)
        init_vel1 = self.get_speed(serv1)
        init_vel2 = self.get_speed(serv2)
        vel = min(init_vel1, init_vel2)
        omega = self.angular_velocity
        acc = self.acc
        turn = CircularTurn()

        if abs(e1_h.x - e2_t.x) > EPS or abs(e1_h.y - e2_t.y) > EPS:
            raise ValueError("edges are not connected")

        norm21 = (e1_h - e1_t).norm()
        norm32 = (e2_h - e2_t).norm()
        if norm21 < EPS or norm32 < EPS:
            raise ValueError("edge has zero length")

        vec21 = (e2_t - e1_t) / norm21
        vec32 = (e2_h - e2_t) / norm32

        bisector = -vec21 + vec32
        try:
            bisector.normalize()
        except ZeroDivisionError:
            pass
        sin_theta = abs(vec21.x * bisector.y - vec21.y * bisector.x)
        cos_theta = abs(vec21.dot(bisector))
        if is_near_zero(sin_theta) or is_near_zero(sin_theta - 1):
            turn.status = 0
            return 0.0, turn

        rad_optimal = vel / omega
        lambda_ = rad_optimal / sin_theta
        turn.status = 1

        if lambda_ - rad_optimal > self.delta:
            lambda_ = self.delta / (1 - sin_theta)
            vel = omega * lambda_ * sin_theta
            turn.status = 2

        max_l1 = norm21 / 2.0
        max_l2 = norm32 / 2.0
        l_lambda = lambda_ * cos_theta
        cot_omega = cos_theta / (sin_theta * omega)

        reduced = self._limit_speed(
            l_lambda, init_vel1, vel, max_l1, cot_omega, cos_theta, sin_theta
        )
        if reduced is not None:
            vel = reduced
            rad_optimal = vel / omega
            lambda_ = rad_optimal / sin_theta
            l_lambda = lambda_ * cos_theta
            turn.status = 3

        reduced = self._limit_speed(
            l_lambda, init_vel2, vel, max_l2, cot_omega, cos_theta, sin_theta
        )
        if reduced is not None:
            vel = reduced
            turn.status = 4

        rad_optimal = vel / omega
        lambda_ = rad_optimal / sin_theta

        p1_vec = vec21 * bisector.dot(vec21) - bisector
        p2_vec = vec32 * bisector.dot(vec32) - bisector
        arc_ang1 = math.atan2(p1_vec.y, p1_vec.x)
        arc_ang2 = math.atan2(p2_vec.y, p2_vec.x)
        if abs(arc_ang1 - arc_ang2) > math.pi:
            if abs(arc_ang1) > abs(arc_ang2):
                arc_ang1 += 2.0 * math.pi if arc_ang1 < 0 else -2.0 * math.pi
            else:
                arc_ang2 += 2.0 * math.pi if arc_ang2 < 0 else -2.0 * math.pi

        p1 = e1_h - vec21 * lambda_ * cos_theta
        p2 = e2_t + vec32 * lambda_ * cos_theta
        cost = abs(arc_ang1 - arc_ang2) / omega
        cost += abs(init_vel1 - vel) / acc
        cost += abs(init_vel2 - vel) / acc

        turn.e1_acceleration_start_point = (
            p1 - vec21 * abs(init_vel1 * init_vel1 - vel * vel) / (2.0 * acc)
        )
        turn.e1_arc_start_point = p1
        turn.e2_arc_end_point = p2
        turn.e2_acceleration_end_point = (
            p2 + vec32 * abs(init_vel2 * init_vel2 - vel * vel) / (2.0 * acc)
        )
        turn.vel = vel
        turn.angular_vel = omega
        turn.acc = acc
        turn.radius = rad_optimal
        turn.arc_ang1 = arc_ang1
        turn.arc_ang2 = arc_ang2
        turn.center_circular_arc = e2_t + bisector * lambda_
        turn.dist_from_pivot = lambda_ - rad_optimal
        return cost, turn