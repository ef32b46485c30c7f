"""
Wheel tests — fret geometry, pocket lookup, wheel head spin-down.
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import roulette_wheel as _wheel
from roulette_wheel import Fret, RouletteWheel, EUROPEAN_POCKETS, pocket_color


class TestLayout:

    def test_european_has_37_distinct_pockets(self):
        assert len(EUROPEAN_POCKETS) == 37
        assert sorted(EUROPEAN_POCKETS) == list(range(37))

    def test_one_fret_per_pocket_boundary(self):
        w = RouletteWheel()
        assert len(w.frets) == 37
        assert w.frets[0].angle == pytest.approx(0.0)
        assert w.frets[1].angle == pytest.approx(360.0 / 37)
        assert w.frets[-1].angle == pytest.approx(36 * 360.0 / 37)

    def test_colors(self):
        assert pocket_color(0) == "green"
        assert pocket_color(32) == "red"
        assert pocket_color(15) == "black"

    def test_empty_wheel_rejected(self):
        with pytest.raises(ValueError):
            RouletteWheel(pockets=())


class TestFret:

    def test_endpoints_follow_wheel_rotation(self):
        f = Fret(30.0, inner_radius=0.8, outer_radius=1.0)
        start, end = f.line_endpoints(60.0)
        assert start.x == pytest.approx(0.0, abs=1e-12)
        assert start.y == pytest.approx(0.8)
        assert end.y == pytest.approx(1.0)

    def test_endpoints_span_ball_path(self):
        start, end = Fret(0.0).line_endpoints(0.0)
        assert start.length() < 0.9 < end.length()


class TestPocketLookup:

    def test_pocket_between_frets(self):
        w = RouletteWheel()
        width = w.pocket_width
        assert w.pocket_at(0.5 * width) == (0, "green")
        assert w.pocket_at(1.5 * width) == (32, "red")

    def test_lookup_accounts_for_rotation(self):
        w = RouletteWheel(rotation_angle=10 * 360.0 / 37)
        # Ball at 10.5 pocket widths sits in the first pocket of the rotated wheel
        assert w.pocket_at(10.5 * w.pocket_width)[0] == 0

    def test_ball_behind_zero_lands_in_last_pocket(self):
        w = RouletteWheel()
        assert w.pocket_at(359.9)[0] == EUROPEAN_POCKETS[-1]


class TestWheelSpin:

    def test_rotation_advances_and_decelerates(self, monkeypatch):
        monkeypatch.setattr(_wheel, "WHEEL_FRICTION", 2.0)
        w = RouletteWheel(angular_velocity=30.0)
        w.update(1.0)
        assert w.angular_velocity == pytest.approx(28.0)
        assert w.rotation_angle == pytest.approx(29.0)

    def test_comes_to_rest_and_stays(self):
        w = RouletteWheel(angular_velocity=1.0)
        for _ in range(10):
            w.update(1.0)
        assert w.angular_velocity == 0.0
        assert not w.is_moving()
        rest = w.rotation_angle
        w.update(1.0)
        assert w.rotation_angle == rest

    def test_rotation_wraps(self):
        w = RouletteWheel(rotation_angle=355.0, angular_velocity=20.0)
        w.update(0.5)
        assert 0.0 <= w.rotation_angle < 360.0
        assert w.rotation_angle == pytest.approx(4.75)
