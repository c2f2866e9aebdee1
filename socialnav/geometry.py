"""Planar vectors, angle helpers and line segments used by the planners."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional


@dataclass(frozen=True, slots=True)
class Vec2:
    """An immutable two-dimensional vector."""

    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)

    def norm(self) -> float:
        """Euclidean length."""
        return math.hypot(self.x, self.y)

    def squared_norm(self) -> float:
        """Squared Euclidean length."""
        return self.x * self.x + self.y * self.y

    def dot(self, other: "Vec2") -> float:
        """Scalar product with another vector."""
        return self.x * other.x + self.y * other.y

    def normalized(self) -> "Vec2":
        """Unit vector in the same direction; raises ValueError for a zero vector."""
        length = self.norm()
        if length == 0.0:
            raise ValueError("cannot normalize a zero-length vector")
        return self / length

    def rotated(self, angle: float) -> "Vec2":
        """This vector rotated counter-clockwise by ``angle`` radians."""
        c, s = math.cos(angle), math.sin(angle)
        return Vec2(c * self.x - s * self.y, s * self.x + c * self.y)

    def cwise_abs(self) -> "Vec2":
        """Component-wise absolute value."""
        return Vec2(abs(self.x), abs(self.y))


def _cross(a: Vec2, b: Vec2) -> float:
    return a.x * b.y - a.y * b.x


def angle_diff(a: float, b: float) -> float:
    """Signed difference ``a - b`` wrapped into [-pi, pi]."""
    return math.remainder(a - b, 2.0 * math.pi)


def sign(x: float) -> float:
    """1 for non-negative values (zero included), -1 for negative ones and NaN."""
    if math.isnan(x):
        return -1.0
    if x == 0:
        return 1.0
    return math.copysign(1.0, x)


def is_between(p0: Vec2, p1: Vec2, p2: Vec2, p: Vec2) -> bool:
    """Whether ``p`` lies inside the cone at ``p0`` swept from ``p1`` to ``p2``."""
    angle_p1 = math.atan2(p1.y - p0.y, p1.x - p0.x)
    angle_p2 = math.atan2(p2.y - p0.y, p2.x - p0.x)
    angle_p = math.atan2(p.y - p0.y, p.x - p0.x)
    if angle_p1 > 0 and angle_p2 < 0:
        return angle_p > angle_p1 or angle_p < angle_p2
    return angle_p1 < angle_p < angle_p2


def angle_between(point_a: Vec2, point_b: Vec2, point_c: Vec2) -> float:
    """Unsigned angle at ``point_c`` between the rays towards ``point_b`` and ``point_a``."""
    vec1 = (point_b - point_c).normalized()
    vec2 = (point_a - point_c).normalized()
    cosine = max(-1.0, min(1.0, vec1.dot(vec2)))
    return math.acos(cosine)


def _on_segment(p: Vec2, q: Vec2, r: Vec2) -> bool:
    return min(p.x, r.x) <= q.x <= max(p.x, r.x) and min(p.y, r.y) <= q.y <= max(p.y, r.y)


@dataclass(frozen=True, slots=True)
class Segment:
    """A line segment from ``p0`` to ``p1``."""

    p0: Vec2
    p1: Vec2

    def unit_normal(self) -> Vec2:
        """Unit vector perpendicular to the segment, to its left."""
        d = self.p1 - self.p0
        return Vec2(-d.y, d.x).normalized()

    def intersects(self, other: "Segment") -> bool:
        """Whether the two segments share at least one point."""
        d1 = _cross(self.p1 - self.p0, other.p0 - self.p0)
        d2 = _cross(self.p1 - self.p0, other.p1 - self.p0)
        d3 = _cross(other.p1 - other.p0, self.p0 - other.p0)
        d4 = _cross(other.p1 - other.p0, self.p1 - other.p0)
        if ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4)):
            return True
        return (
            (d1 == 0 and _on_segment(self.p0, other.p0, self.p1))
            or (d2 == 0 and _on_segment(self.p0, other.p1, self.p1))
            or (d3 == 0 and _on_segment(other.p0, self.p0, other.p1))
            or (d4 == 0 and _on_segment(other.p0, self.p1, other.p1))
        )

    def intersection(self, other: "Segment") -> Optional[Vec2]:
        """The crossing point of two non-parallel segments, or None."""
        r = self.p1 - self.p0
        s = other.p1 - other.p0
        denom = _cross(r, s)
        if denom == 0:
            return None
        qp = other.p0 - self.p0
        t = _cross(qp, s) / denom
        u = _cross(qp, r) / denom
        if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
            return self.p0 + r * t
        return None


class SegmentMap:
    """A collection of wall segments describing the environment."""

    def __init__(self, lines: Iterable[Segment] = ()) -> None:
        self.lines: list[Segment] = list(lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.lines)

    def intersects(self, p0: Vec2, p1: Vec2) -> bool:
        """Whether the segment from ``p0`` to ``p1`` touches any wall."""
        probe = Segment(p0, p1)
        return any(line.intersects(probe) for line in self.lines)