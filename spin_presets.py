"""
Spin Preset System
Canned wheel + ball setups used by the console driver and the tests.
"""

from physics import Ball
from roulette_wheel import Fret, RouletteWheel

# Simulation timestep
_DT = 0.01


class _FixedWheel:
    """Stationary wheel exposing an arbitrary fret list."""

    def __init__(self, frets, rotation_angle=0.0):
        self.rotation_angle = rotation_angle
        self.frets = list(frets)


class SpinPreset:
    """Each preset builds the wheel and ball → launches → simulate → returns a result dict."""

    @staticmethod
    def scenario_1_plain_decay(run=True, dt=0.1) -> dict:
        """Plain decay: 720°/s on a wheel with no frets, decay 0.3, drop 100, stop 5."""
        wheel = _FixedWheel(frets=[])
        ball = Ball(wheel, decay_coefficient=0.3, drop_threshold=100.0,
                    stopping_threshold=5.0)
        ball.launch(720.0, position=0.0)

        events = []
        ball.subscribe(events.append)
        elapsed = 0.0
        drop_time = None
        if run:
            while not ball.is_stopped:
                ball.update(dt)
                if drop_time is None and ball.has_dropped:
                    drop_time = ball.elapsed_time
            elapsed = ball.elapsed_time
        return {"ball": ball, "wheel": wheel, "events": events,
                "elapsed": elapsed, "drop_time": drop_time}

    @staticmethod
    def scenario_2_standard_wheel(run=True, velocity=720.0, wheel_velocity=30.0) -> dict:
        """Full European wheel with a turning head."""
        wheel = RouletteWheel(angular_velocity=wheel_velocity)
        ball = Ball(wheel)
        ball.launch(velocity, position=0.0)

        events = []
        ball.subscribe(events.append)
        elapsed = 0.0
        if run:
            t = 0.0
            while t < 60.0 and not ball.is_stopped:
                wheel.update(_DT)
                ball.update(_DT)
                t += _DT
            elapsed = ball.elapsed_time
        pocket = wheel.pocket_at(ball.position) if run else None
        return {"ball": ball, "wheel": wheel, "events": events,
                "elapsed": elapsed, "pocket": pocket}

    @staticmethod
    def scenario_3_head_on_fret(run=True) -> dict:
        """Single fret at 90°; the ball is already dropped and meets it square on."""
        wheel = _FixedWheel(frets=[Fret(90.0, inner_radius=0.5, outer_radius=1.0)])
        ball = Ball(wheel, decay_coefficient=0.0, drop_threshold=1000.0,
                    stopping_threshold=0.0)
        ball.launch(100.0, position=80.0)

        events = []
        ball.subscribe(events.append)
        if run:
            ball.update(0.1)
        return {"ball": ball, "wheel": wheel, "events": events}
