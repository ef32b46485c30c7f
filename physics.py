"""
Roulette Ball Physics Engine
Exponential spin decay, drop into the pocket ring, fret collision, rolling resistance.
"""

import enum
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from vector import Vector2D, wrap_degrees

# ──────────────────────────────────────────────
# Constants (normalized wheel units, degrees)
# ──────────────────────────────────────────────
BALL_MASS: float = 0.05  # kg
BALL_RADIUS: float = 0.02  # ball's own radius
PATH_RADIUS: float = 0.9  # radius of the ball's circular path
DECAY_COEFFICIENT: float = 0.3  # 1/s
STOPPING_THRESHOLD: float = 5.0  # deg/s
DROP_THRESHOLD: float = 100.0  # deg/s
GRAVITY: float = 9.81  # m/s^2

# ── Runtime-editable behavior constants ───────────────────────────────────────
# These are read by name every call, so a controller can mutate them live via:
#   import physics as _phys;  _phys.FRET_RESTITUTION = 0.4
FRET_RESTITUTION: float = 0.3       # normal-direction bounce off a fret
FRET_FRICTION: float = 0.1          # tangential speed lost per fret contact
ROLLING_RESISTANCE: float = 0.01    # rolling resistance coefficient


class ConfigurationError(ValueError):
    """Raised for physically meaningless ball parameters or time steps."""


class BallPhase(enum.Enum):
    SPINNING = 0
    DROPPING = 1
    STOPPED = 2


class FretLike(Protocol):
    angle: float

    def line_endpoints(self, wheel_rotation: float) -> Tuple[Vector2D, Vector2D]: ...


class WheelProvider(Protocol):
    """Read-only wheel geometry consumed by the ball."""
    rotation_angle: float
    frets: Sequence[FretLike]


def tangential_velocity(position: float, angular_velocity: float,
                        path_radius: float) -> Vector2D:
    """Linear velocity of a ball at ``position`` (deg) moving at ``angular_velocity`` (deg/s)."""
    speed = math.radians(angular_velocity) * path_radius
    theta = math.radians(position)
    return Vector2D(-math.sin(theta), math.cos(theta)) * speed


def fret_collision_response(velocity: Vector2D, fret_start: Vector2D,
                            fret_end: Vector2D) -> Vector2D:
    """
    Outgoing velocity after hitting the fret segment [fret_start, fret_end].

    The normal component is reversed and scaled by FRET_RESTITUTION, the
    tangential component loses FRET_FRICTION of its magnitude. A degenerate
    fret has a zero normal, so only the tangential attenuation applies.
    """
    normal = (fret_end - fret_start).perpendicular().normalize()

    v_normal = normal * velocity.dot(normal)
    v_tangent = velocity - v_normal

    v_normal = v_normal * (-FRET_RESTITUTION)
    v_tangent = v_tangent * (1.0 - FRET_FRICTION)
    return v_normal + v_tangent


@dataclass
class Ball:
    """Roulette ball bound to one wheel."""
    wheel: WheelProvider
    position: float = 0.0  # deg
    angular_velocity: float = 0.0  # deg/s
    initial_angular_velocity: float = 0.0  # deg/s
    decay_coefficient: float = DECAY_COEFFICIENT
    stopping_threshold: float = STOPPING_THRESHOLD
    drop_threshold: float = DROP_THRESHOLD
    mass: float = BALL_MASS
    radius: float = BALL_RADIUS
    path_radius: float = PATH_RADIUS
    phase: BallPhase = BallPhase.SPINNING
    elapsed_time: float = 0.0
    dropped_at: Optional[float] = None  # elapsed time of the drop
    collision_count: int = 0
    events: list = field(default_factory=list, init=False, repr=False)
    _listeners: List[Callable[[dict], None]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        for name in ("mass", "radius", "path_radius"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("decay_coefficient", "stopping_threshold", "drop_threshold"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative, got {getattr(self, name)}")
        self.position = wrap_degrees(float(self.position))

    # ──────────────────────────────────────────
    # Derived state
    # ──────────────────────────────────────────
    @property
    def moment_of_inertia(self) -> float:
        return 0.4 * self.mass * self.radius ** 2  # solid sphere

    @property
    def is_stopped(self) -> bool:
        return self.phase == BallPhase.STOPPED

    @property
    def has_dropped(self) -> bool:
        return self.dropped_at is not None

    def cartesian_position(self) -> Vector2D:
        return Vector2D.from_polar(self.path_radius, self.position)

    # ──────────────────────────────────────────
    # Launch / events
    # ──────────────────────────────────────────
    def launch(self, initial_angular_velocity: float, position: Optional[float] = None) -> None:
        """Start a new spin from the current (or given) position."""
        if initial_angular_velocity < 0:
            raise ConfigurationError(
                f"initial angular velocity must not be negative, got {initial_angular_velocity}")
        self.initial_angular_velocity = float(initial_angular_velocity)
        self.angular_velocity = float(initial_angular_velocity)
        if position is not None:
            self.position = wrap_degrees(float(position))
        self.elapsed_time = 0.0
        self.dropped_at = None
        self.collision_count = 0
        self.phase = BallPhase.SPINNING
        self.events.clear()

    def subscribe(self, callback: Callable[[dict], None]) -> None:
        """Register ``callback(event)`` for drop_started / collision / stopped."""
        self._listeners.append(callback)

    def _emit(self, event: dict) -> None:
        event["t"] = self.elapsed_time
        self.events.append(event)
        for callback in self._listeners:
            callback(event)

    # ──────────────────────────────────────────
    # Main Update Loop
    # ──────────────────────────────────────────
    def update(self, dt: float) -> None:
        """Advance the ball by dt seconds."""
        if dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {dt}")
        if self.phase == BallPhase.STOPPED:
            return
        self.events.clear()

        self.elapsed_time += dt

        # Velocity follows the decay curve, ignoring last tick's collision
        self.angular_velocity = self.initial_angular_velocity * math.exp(
            -self.decay_coefficient * self.elapsed_time)

        if self.phase == BallPhase.SPINNING and self.angular_velocity <= self.drop_threshold:
            self.phase = BallPhase.DROPPING
            self.dropped_at = self.elapsed_time
            self._emit({"type": "drop_started"})

        self.position = wrap_degrees(self.position + self.angular_velocity * dt)

        if self.phase == BallPhase.DROPPING:
            self._check_fret_collisions()
            self._apply_rolling_resistance(dt)

        if self.angular_velocity <= self.stopping_threshold:
            self.angular_velocity = 0.0
            self.phase = BallPhase.STOPPED
            self._emit({"type": "stopped", "position": self.position})

    # ──────────────────────────────────────────
    # Fret Collision
    # ──────────────────────────────────────────
    def _check_fret_collisions(self) -> bool:
        """Resolve the first fret (in wheel order) touching the ball. At most one per tick."""
        rotation = self.wheel.rotation_angle
        ball_pos = self.cartesian_position()
        for fret in self.wheel.frets:
            fret_start, fret_end = fret.line_endpoints(rotation)
            distance = Vector2D.distance_point_to_segment(ball_pos, fret_start, fret_end)
            if distance <= self.radius:
                self._resolve_fret_collision(fret_start, fret_end)
                self.collision_count += 1
                self._emit({"type": "collision", "fret_angle": float(fret.angle)})
                return True
        return False

    def _resolve_fret_collision(self, fret_start: Vector2D, fret_end: Vector2D) -> None:
        velocity = tangential_velocity(self.position, self.angular_velocity, self.path_radius)
        new_velocity = fret_collision_response(velocity, fret_start, fret_end)

        # Speed only; direction is carried by the new position
        self.angular_velocity = math.degrees(new_velocity.length() / self.path_radius)
        self.position = wrap_degrees(new_velocity.angle_deg() + 360.0)

    # ──────────────────────────────────────────
    # Rolling Resistance
    # ──────────────────────────────────────────
    def rolling_deceleration(self) -> float:
        torque = ROLLING_RESISTANCE * self.path_radius * self.mass * GRAVITY
        return torque / self.moment_of_inertia

    def _apply_rolling_resistance(self, dt: float) -> None:
        self.angular_velocity = max(0.0, self.angular_velocity - self.rolling_deceleration() * dt)

    def simulate(self, dt: float = 0.01, max_time: float = 60.0) -> float:
        """
        Run updates until the ball stops or max_time is reached.

        Returns:
            Elapsed time in seconds.
        """
        t = 0.0
        while t < max_time:
            self.update(dt)
            t += dt
            if self.is_stopped:
                break
        return t
