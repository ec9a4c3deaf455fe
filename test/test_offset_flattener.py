"""Tests for flattening curves with a lateral offset."""

from __future__ import annotations

import math

import numpy as np
import pytest

from models.offsets import PiecewiseLinearOffset
from models.points import Point3d, DirectedPoint2d
from curves.arc import Arc2d
from curves.bezier import BezierCubic
from curves.clothoid import Clothoid2d
from curves.straight import Straight2d
from solver.flattener import NumSegments, MaxDeviation, MaxAngle
from solver.offset_flattener import OffsetSampler, flatten_offset


def constant(offset: float) -> PiecewiseLinearOffset:
    return PiecewiseLinearOffset(0.0, offset, 1.0, offset)


def straight() -> Straight2d:
    return Straight2d(DirectedPoint2d(0.0, 0.0, 0.0), 10.0)


# ---------------------------------------------------------------------------
# Offset geometry
# ---------------------------------------------------------------------------

class TestOffsetGeometry:
    def test_constant_offset_of_straight(self):
        line = straight().to_polyline_offset(MaxDeviation(0.01), constant(1.0))
        assert line.size == 2
        assert np.allclose(line.y, [1.0, 1.0])
        assert np.allclose(line.x, [0.0, 10.0])

    def test_negative_offset_is_right(self):
        line = straight().to_polyline_offset(MaxDeviation(0.01), constant(-1.5))
        assert np.allclose(line.y, [-1.5, -1.5])

    def test_tent_offset_samples_breakpoint(self):
        offsets = PiecewiseLinearOffset(0.0, 0.0, 0.5, 1.0, 1.0, 0.0)
        line = straight().to_polyline_offset(MaxDeviation(0.01), offsets)
        assert line.size == 3
        assert line.get(1).x == pytest.approx(5.0)
        assert line.get(1).y == pytest.approx(1.0)

    def test_offset_inside_arc(self):
        curve = Arc2d(DirectedPoint2d(0.0, 0.0, 0.0), 10.0, True, math.pi / 2)
        line = curve.to_polyline_offset(MaxDeviation(0.001), constant(2.0))
        radii = np.hypot(line.x - 0.0, line.y - 10.0)
        assert np.allclose(radii, 8.0)
        assert line.first.y == pytest.approx(2.0)

    def test_offset_outside_arc_needs_more_points(self):
        curve = Arc2d(DirectedPoint2d(0.0, 0.0, 0.0), 10.0, True, math.pi / 2)
        inside = curve.to_polyline_offset(MaxDeviation(0.001), constant(5.0)).size
        outside = curve.to_polyline_offset(MaxDeviation(0.001), constant(-5.0)).size
        assert outside >= inside

    def test_direction_includes_offset_slope(self):
        sampler = OffsetSampler(straight(), PiecewiseLinearOffset(0.0, 0.0, 1.0, 2.0))
        assert sampler.direction(0.5) == pytest.approx(math.atan2(2.0, 10.0))

    def test_zero_offset_matches_plain_flattening(self):
        curve = BezierCubic.from_rays(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(40.0, 20.0, math.pi / 4))
        plain = curve.to_polyline(MaxDeviation(0.01))
        offset = curve.to_polyline_offset(MaxDeviation(0.01), constant(0.0))
        assert offset.size == plain.size
        assert np.allclose(offset.points, plain.points)

    def test_zero_offset_straight_clothoid_stays_two_points(self):
        clothoid = Clothoid2d(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(10.0, 0.0, 0.0))
        assert clothoid.to_polyline_offset(NumSegments(16), constant(0.0)).size == 2

    def test_max_angle_on_offset_line(self):
        curve = Arc2d(DirectedPoint2d(0.0, 0.0, 0.0), 10.0, True, math.pi / 2)
        line = curve.to_polyline_offset(MaxAngle(0.1), constant(3.0))
        assert line.size == 17


# ---------------------------------------------------------------------------
# Argument checks
# ---------------------------------------------------------------------------

class TestArguments:
    def test_rejects_missing_arguments(self):
        with pytest.raises(TypeError):
            flatten_offset(None, MaxDeviation(0.1), constant(1.0))
        with pytest.raises(TypeError):
            flatten_offset(straight(), MaxDeviation(0.1), None)
        with pytest.raises(TypeError):
            flatten_offset(straight(), None, constant(1.0))

    def test_rejects_3d_curve(self):
        curve = BezierCubic(Point3d(0.0, 0.0, 0.0), Point3d(1.0, 0.0, 0.0),
                            Point3d(2.0, 1.0, 1.0), Point3d(3.0, 1.0, 1.0))
        with pytest.raises(TypeError):
            curve.to_polyline_offset(MaxDeviation(0.1), constant(1.0))


# ---------------------------------------------------------------------------
# Clothoid offsets
# ---------------------------------------------------------------------------

class TestClothoidOffset:
    def test_offset_side_for_reflected_and_opposite_clothoids(self):
        flattener = NumSegments(32)
        for y_a in (-30.0, -10.0, 10.0, 30.0):
            for x_b in (-20.0, -20.0 / 3.0, 20.0 / 3.0, 20.0):
                # A on the y-axis pointing towards B, B on the x-axis pointing away from A
                a = DirectedPoint2d(0.0, y_a, math.pi if x_b < 0.0 else 0.0)
                b = DirectedPoint2d(x_b, 0.0, math.pi / 2 if y_a < 0.0 else -math.pi / 2)
                clothoid = Clothoid2d(a, b)
                line = clothoid.to_polyline(flattener)
                assert line.first.x == pytest.approx(a.x, abs=1e-4)
                assert line.first.y == pytest.approx(a.y, abs=1e-4)
                assert line.last.x == pytest.approx(b.x, abs=1e-4)
                assert line.last.y == pytest.approx(b.y, abs=1e-4)
                for offset in (-2.0, 2.0):
                    line = clothoid.to_polyline_offset(flattener, constant(offset))
                    assert line.first.x == pytest.approx(0.0, abs=1e-5)
                    assert line.first.y == pytest.approx(y_a + (offset if x_b > 0.0 else -offset), abs=1e-5)
                    assert line.last.x == pytest.approx(x_b + (offset if y_a > 0.0 else -offset), abs=1e-5)
                    assert line.last.y == pytest.approx(0.0, abs=1e-5)
