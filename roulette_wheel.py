"""
Roulette wheel geometry: pocket layout and frets.

The wheel is the read-only geometry provider for the ball engine: it exposes
its current ``rotation_angle`` (degrees) and an ordered list of ``frets``.
Each fret is a radial segment anchored to the wheel at a fixed angle; its
absolute position rotates with the wheel.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Tuple

from vector import Vector2D, wrap_degrees

# ──────────────────────────────────────────────
# Layout constants
# ──────────────────────────────────────────────
# European single-zero wheel, clockwise from zero as printed on the wheel head.
EUROPEAN_POCKETS: Tuple[int, ...] = (
    0, 32, 15, 19, 4, 21, 2, 25, 17, 34, 6, 27, 13, 36, 11, 30, 8, 23, 10,
    5, 24, 16, 33, 1, 20, 14, 31, 9, 22, 18, 29, 7, 28, 12, 35, 3, 26,
)
RED_NUMBERS = frozenset({
    1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36,
})

FRET_INNER_RADIUS: float = 0.8   # normalized units (ball path sits at 0.9)
FRET_OUTER_RADIUS: float = 1.0

# Wheel head spin-down (deg/s^2), read by name every call
WHEEL_FRICTION: float = 2.0


def pocket_color(number: int) -> str:
    if number == 0:
        return "green"
    return "red" if number in RED_NUMBERS else "black"


@dataclass(frozen=True)
class Fret:
    """Radial divider between two pockets."""
    angle: float                         # degrees, relative to the wheel
    inner_radius: float = FRET_INNER_RADIUS
    outer_radius: float = FRET_OUTER_RADIUS

    def line_endpoints(self, wheel_rotation: float) -> Tuple[Vector2D, Vector2D]:
        """Absolute (inner, outer) endpoints for the given wheel rotation."""
        absolute = self.angle + wheel_rotation
        return (Vector2D.from_polar(self.inner_radius, absolute),
                Vector2D.from_polar(self.outer_radius, absolute))


@dataclass
class RouletteWheel:
    """Wheel head with its pocket ring and frets."""
    pockets: Tuple[int, ...] = EUROPEAN_POCKETS
    rotation_angle: float = 0.0
    angular_velocity: float = 0.0         # deg/s
    fret_inner_radius: float = FRET_INNER_RADIUS
    fret_outer_radius: float = FRET_OUTER_RADIUS
    frets: List[Fret] = field(init=False)

    def __post_init__(self):
        self.pockets = tuple(int(n) for n in self.pockets)
        if not self.pockets:
            raise ValueError("wheel needs at least one pocket")
        self.rotation_angle = wrap_degrees(float(self.rotation_angle))
        angles = np.arange(len(self.pockets)) * self.pocket_width
        self.frets = [Fret(float(a), self.fret_inner_radius, self.fret_outer_radius)
                      for a in angles]

    @property
    def pocket_width(self) -> float:
        return 360.0 / len(self.pockets)

    def is_moving(self) -> bool:
        return self.angular_velocity > 0.0

    def update(self, dt: float) -> None:
        """Rotate the wheel head, decelerating linearly to rest."""
        if self.angular_velocity <= 0.0:
            self.angular_velocity = 0.0
            return
        new_velocity = max(0.0, self.angular_velocity - WHEEL_FRICTION * dt)
        # Average velocity over the step
        self.rotation_angle = wrap_degrees(
            self.rotation_angle + 0.5 * (self.angular_velocity + new_velocity) * dt)
        self.angular_velocity = new_velocity

    def pocket_index_at(self, ball_position: float) -> int:
        """Index into ``pockets`` of the pocket under an absolute ball angle.

        Pocket i spans [i * width, (i + 1) * width) relative to the wheel,
        bounded by frets i and i + 1.
        """
        relative = wrap_degrees(ball_position - self.rotation_angle)
        return min(int(relative // self.pocket_width), len(self.pockets) - 1)

    def pocket_at(self, ball_position: float) -> Tuple[int, str]:
        number = self.pockets[self.pocket_index_at(ball_position)]
        return number, pocket_color(number)
