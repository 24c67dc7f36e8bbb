"""Numeric constants and two-dimensional vector arithmetic."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass

EPS = 1e-12
DOUBLE_MAX = sys.float_info.max
DOUBLE_MIN = sys.float_info.min
INT_MAX = 2**31 - 1
NAN = math.nan

# Norms below this are treated as zero when computing angles.
_ANGLE_EPS = 1e-10


def is_near_zero(x: float, eps: float = EPS) -> bool:
    """Return True if ``|x|`` is strictly smaller than ``eps``."""
    return abs(x) < eps


@dataclass
class Vec2d:
    """A mutable two-dimensional vector."""

    x: float = 0.0
    y: float = 0.0

    def perpendicular(self) -> Vec2d:
        """Return the vector rotated by +90 degrees."""
        return Vec2d(-self.y, self.x)

    def add(self, other: Vec2d) -> None:
        """Add ``other`` to this vector in place."""
        self.x += other.x
        self.y += other.y

    def divide(self, scalar: float) -> None:
        """Divide this vector by ``scalar`` in place."""
        if abs(scalar) < EPS:
            raise ZeroDivisionError("cannot divide a vector by a near-zero scalar")
        self.x /= scalar
        self.y /= scalar

    def dot(self, other: Vec2d) -> float:
        """Return the dot product with ``other``."""
        return other.x * self.x + other.y * self.y

    def norm_sqr(self) -> float:
        """Return the squared Euclidean length."""
        return self.x * self.x + self.y * self.y

    def norm(self) -> float:
        """Return the Euclidean length."""
        return math.sqrt(self.norm_sqr())

    def cos_angle(self, other: Vec2d) -> float:
        """Return the cosine of the angle between this vector and ``other``."""
        self_norm = self.norm()
        other_norm = other.norm()
        if self_norm < _ANGLE_EPS or other_norm < _ANGLE_EPS:
            raise ValueError("angle is undefined for a zero-length vector")
        return self.dot(other) / (self_norm * other_norm)

    def dist_sqr(self, other: Vec2d) -> float:
        """Return the squared distance to ``other``."""
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def dist(self, other: Vec2d) -> float:
        """Return the distance to ``other``."""
        return math.sqrt(self.dist_sqr(other))

    def dist_tht(self, other: Vec2d) -> tuple[float, float]:
        """Return the distance to ``other`` and the direction angle folded into [0, pi)."""
        d = self.dist(other)
        tht = math.atan2(other.y - self.y, other.x - self.x)
        if tht < 0:
            tht += math.pi
        return d, tht

    def is_zero(self) -> bool:
        """Return True if both components are near zero."""
        return is_near_zero(self.x) and is_near_zero(self.y)

    def travel_vec(self, other: Vec2d) -> Vec2d:
        """Return the vector pointing from this point to ``other``."""
        return Vec2d(other.x - self.x, other.y - self.y)

    def normalize(self) -> None:
        """Scale this vector to unit length in place."""
        norm = self.norm()
        if norm < EPS:
            raise ZeroDivisionError("cannot normalize a zero-length vector")
        self.x /= norm
        self.y /= norm

    def copy(self) -> Vec2d:
        """Return an independent copy."""
        return Vec2d(self.x, self.y)

    def __add__(self, other: Vec2d) -> Vec2d:
        return Vec2d(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2d) -> Vec2d:
        return Vec2d(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vec2d:
        return Vec2d(-self.x, -self.y)

    def __mul__(self, scalar: float) -> Vec2d:
        return Vec2d(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2d:
        return Vec2d(self.x / scalar, self.y / scalar)

    def __str__(self) -> str:
        return f"{self.x:g} {self.y:g}"