"""
2D vector helpers for the roulette wheel plane.

The wheel lives in the x-y plane with the wheel centre at the origin.
Angles are measured counter-clockwise from +x.
"""

import math
import numpy as np
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2D:
    """Immutable point / vector in the wheel plane."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, k: float) -> "Vector2D":
        return Vector2D(self.x * k, self.y * k)

    __rmul__ = __mul__

    def dot(self, other: "Vector2D") -> float:
        return self.x * other.x + self.y * other.y

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalize(self) -> "Vector2D":
        """Unit vector in the same direction; the zero vector maps to itself."""
        n = self.length()
        if n < 1e-12:
            return Vector2D(0.0, 0.0)
        return Vector2D(self.x / n, self.y / n)

    def perpendicular(self) -> "Vector2D":
        """Left-hand perpendicular (-y, x)."""
        return Vector2D(-self.y, self.x)

    def angle_deg(self) -> float:
        """Direction in degrees, (-180, 180], as ``atan2``."""
        return math.degrees(math.atan2(self.y, self.x))

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    @classmethod
    def from_polar(cls, radius: float, angle_deg: float) -> "Vector2D":
        a = math.radians(angle_deg)
        return cls(radius * math.cos(a), radius * math.sin(a))

    @staticmethod
    def distance_point_to_segment(point: "Vector2D", seg_start: "Vector2D",
                                  seg_end: "Vector2D") -> float:
        """
        Shortest distance from ``point`` to the closed segment [seg_start, seg_end].

        The projection parameter is clamped to [0, 1], so a point beyond an
        endpoint measures to that endpoint rather than to the infinite line.
        """
        p = point.to_array()
        a = seg_start.to_array()
        ab = seg_end.to_array() - a
        len_sq = float(np.dot(ab, ab))
        if len_sq < 1e-24:
            # Degenerate segment
            return float(np.linalg.norm(p - a))
        t = float(np.clip(np.dot(p - a, ab) / len_sq, 0.0, 1.0))
        closest = a + t * ab
        return float(np.linalg.norm(p - closest))


def distance_point_to_segment(point: Vector2D, seg_start: Vector2D,
                              seg_end: Vector2D) -> float:
    return Vector2D.distance_point_to_segment(point, seg_start, seg_end)


def wrap_degrees(angle: float) -> float:
    """Normalize an angle into [0, 360)."""
    wrapped = angle % 360.0
    # -1e-17 % 360.0 rounds to 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped
