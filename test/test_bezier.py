"""Tests for Bezier curves of any degree and the cubic specialisation."""

from __future__ import annotations

import math

import numpy as np
import pytest

from models.points import Point2d, Point3d, DirectedPoint2d, DirectedPoint3d, Direction3d
from curves.bezier import Bezier, BezierCubic, factorial, binomial, bernstein
from solver.flattener import NumSegments, MaxDeviation


def quarter_turn() -> BezierCubic:
    """Return the cubic used in the documented flattening example."""
    return BezierCubic(Point2d(10.0, 0.0), Point2d(20.0, 0.0), Point2d(0.0, 20.0), Point2d(0.0, 10.0))


def s_curve_points() -> list[Point2d]:
    """Return control points of a point symmetric S-curve with its inflection at t = 0.5."""
    return [Point2d(0.0, 0.0), Point2d(1.0, 1.0), Point2d(2.0, -1.0), Point2d(3.0, 0.0)]


# ---------------------------------------------------------------------------
# Basis functions
# ---------------------------------------------------------------------------

class TestBasis:
    def test_factorial(self):
        assert factorial(0) == 1.0
        assert factorial(5) == 120.0
        assert factorial(20) == float(math.factorial(20))
        assert factorial(25) == pytest.approx(float(math.factorial(25)), rel=1e-12)
        assert factorial(100) == pytest.approx(float(math.factorial(100)), rel=1e-12)
        with pytest.raises(ValueError):
            factorial(-1)

    def test_binomial(self):
        assert binomial(5, 2) == 10.0
        assert binomial(100, 50) == pytest.approx(float(math.comb(100, 50)), rel=1e-9)
        assert binomial(4, 5) == 0.0

    def test_bernstein_partition_of_unity(self):
        for t in (0.0, 0.3, 0.8, 1.0):
            assert sum(bernstein(7, k, t) for k in range(8)) == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_needs_two_points(self):
        with pytest.raises(ValueError):
            Bezier(Point2d(0.0, 0.0))

    def test_cubic_needs_four_points(self):
        with pytest.raises(ValueError):
            BezierCubic.from_points([Point2d(0.0, 0.0), Point2d(1.0, 0.0), Point2d(2.0, 0.0)])

    def test_rejects_mixed_dimensions(self):
        with pytest.raises(ValueError):
            Bezier(Point2d(0.0, 0.0), Point3d(1.0, 0.0, 0.0))

    def test_from_rays_unweighted_distance(self):
        curve = BezierCubic.from_rays(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(9.0, 0.0, 0.0))
        cp = curve.control_points
        assert cp[0] == Point2d(0.0, 0.0)
        assert cp[1].x == pytest.approx(3.0)
        assert cp[2].x == pytest.approx(6.0)
        assert cp[3] == Point2d(9.0, 0.0)

    def test_from_rays_shape_scales_distance(self):
        curve = BezierCubic.from_rays(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(9.0, 0.0, 0.0), 2.0)
        assert curve.control_points[1].x == pytest.approx(6.0)

    def test_weighted_symmetric_equals_unweighted(self):
        start = DirectedPoint2d(10.0, 0.0, math.pi / 2)
        end = DirectedPoint2d(0.0, 10.0, math.pi)
        weighted = BezierCubic.from_rays(start, end, 1.0, True)
        plain = BezierCubic.from_rays(start, end, 1.0, False)
        for a, b in zip(weighted.control_points, plain.control_points):
            assert a.x == pytest.approx(b.x)
            assert a.y == pytest.approx(b.y)

    def test_weighted_on_chord_line_falls_back_to_unweighted(self):
        curve = BezierCubic.from_rays(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(9.0, 0.0, 0.0), 1.0, True)
        assert curve.control_points[1].x == pytest.approx(3.0)

    def test_weighted_asymmetric_biases_distances(self):
        start = DirectedPoint2d(0.0, 0.0, 0.0)
        end = DirectedPoint2d(10.0, 2.0, math.pi / 2)
        curve = BezierCubic.from_rays(start, end, 1.0, True)
        cp = curve.control_points
        d_start = cp[0].distance(cp[1])
        d_end = cp[3].distance(cp[2])
        # start is 10 m from the end's line, end is 2 m from the start's line
        assert d_start / d_end == pytest.approx(5.0)
        assert d_start + d_end == pytest.approx(2.0 / 3.0 * math.hypot(10.0, 2.0))

    @pytest.mark.parametrize("shape, error", [
        (0.0, ValueError),
        (-1.0, ValueError),
        (math.inf, ValueError),
        (math.nan, ArithmeticError),
    ])
    def test_from_rays_rejects_bad_shape(self, shape, error):
        with pytest.raises(error):
            BezierCubic.from_rays(DirectedPoint2d(0.0, 0.0, 0.0), DirectedPoint2d(5.0, 0.0, 0.0), shape)

    def test_from_rays_rejects_coinciding_points(self):
        with pytest.raises(ValueError):
            BezierCubic.from_rays(DirectedPoint2d(1.0, 1.0, 0.0), DirectedPoint2d(1.0, 1.0, 1.0))

    def test_from_rays_3d(self):
        start = DirectedPoint3d(0.0, 0.0, 0.0, math.pi / 2, 0.0)
        end = DirectedPoint3d(10.0, 10.0, 5.0, math.pi / 2, math.pi / 2)
        curve = BezierCubic.from_rays(start, end)
        assert curve.dimension == 3
        assert curve.get_point(1.0).z == pytest.approx(5.0)


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------

class TestEvaluation:
    def test_point_at_half(self):
        curve = BezierCubic(Point2d(0.0, 0.0), Point2d(0.0, 1.0), Point2d(1.0, 1.0), Point2d(1.0, 0.0))
        p = curve.get_point(0.5)
        assert p.x == pytest.approx(0.5)
        assert p.y == pytest.approx(0.75)

    def test_end_points_and_directions(self):
        curve = quarter_turn()
        assert curve.start_point.x == pytest.approx(10.0)
        assert curve.start_point.dir_z == pytest.approx(0.0)
        assert curve.end_point.y == pytest.approx(10.0)
        assert curve.end_point.dir_z == pytest.approx(-math.pi / 2)

    def test_collapsed_curve_has_infinite_curvature(self):
        p = Point2d(3.0, 4.0)
        curve = BezierCubic(p, p, p, p)
        for t in (0.25, 0.5, 0.75):
            assert curve.get_curvature(t) == math.inf
        assert curve.length == 0.0
        assert curve.to_polyline(MaxDeviation(0.1)).size == 2

    def test_curvature_sign_follows_turn(self):
        left = BezierCubic.from_rays(DirectedPoint2d(10.0, 0.0, math.pi / 2), DirectedPoint2d(0.0, 10.0, math.pi))
        right = BezierCubic.from_rays(DirectedPoint2d(0.0, 10.0, 0.0), DirectedPoint2d(10.0, 0.0, -math.pi / 2))
        assert left.get_curvature(0.5) > 0.0
        assert right.get_curvature(0.5) < 0.0
        assert left.start_curvature == pytest.approx(left.get_curvature(0.0))

    def test_straight_curve_has_zero_curvature_and_exact_length(self):
        curve = Bezier(Point2d(0.0, 0.0), Point2d(3.0, 4.0))
        assert curve.get_curvature(0.5) == 0.0
        assert curve.length == 5.0

    def test_length_of_quarter_circle_approximation(self):
        # control distance 4/3 * tan(pi/8) * r approximates a quarter circle closely
        k = 4.0 / 3.0 * math.tan(math.pi / 8) * 10.0
        curve = BezierCubic(Point2d(10.0, 0.0), Point2d(10.0, k), Point2d(k, 10.0), Point2d(0.0, 10.0))
        assert curve.length == pytest.approx(5.0 * math.pi, rel=1e-3)

    def test_direction_with_coinciding_control_point(self):
        curve = BezierCubic(Point2d(0.0, 0.0), Point2d(0.0, 0.0), Point2d(10.0, 10.0), Point2d(20.0, 10.0))
        assert curve.get_direction(0.0) == pytest.approx(math.pi / 4)

    def test_derivative_is_hodograph(self):
        curve = BezierCubic(Point2d(0.0, 0.0), Point2d(1.0, 0.0), Point2d(2.0, 0.0), Point2d(3.0, 0.0))
        d = curve.derivative()
        assert d.degree == 2
        assert all(p == Point2d(3.0, 0.0) for p in d.control_points)
        line = Bezier(Point2d(0.0, 0.0), Point2d(2.0, 1.0)).derivative()
        assert line.control_points == [Point2d(2.0, 1.0), Point2d(2.0, 1.0)]

    def test_3d_direction_and_curvature(self):
        curve = Bezier(Point3d(0.0, 0.0, 0.0), Point3d(0.0, 0.0, 5.0), Point3d(0.0, 0.0, 10.0))
        d = curve.get_direction(0.5)
        assert isinstance(d, Direction3d)
        assert d.dir_y == pytest.approx(0.0)
        assert curve.get_curvature(0.5) == pytest.approx(0.0)

    def test_high_degree_evaluation(self):
        points = [Point2d(float(i), math.sin(i)) for i in range(31)]
        curve = Bezier(*points)
        assert curve.get_point(0.0).y == pytest.approx(0.0)
        assert curve.get_point(1.0).x == pytest.approx(30.0)


# ---------------------------------------------------------------------------
# Split, parameter lookup and knots
# ---------------------------------------------------------------------------

class TestSplit:
    def test_split_halves_meet_and_follow_curve(self):
        curve = quarter_turn()
        first, second = curve.split(0.4)
        assert isinstance(first, BezierCubic)
        p = curve.get_point(0.4)
        assert first.get_point(1.0).x == pytest.approx(p.x)
        assert second.get_point(0.0).y == pytest.approx(p.y)
        q = curve.get_point(0.7)
        r = second.get_point(0.5)
        assert r.x == pytest.approx(q.x)
        assert r.y == pytest.approx(q.y)
        assert first.length + second.length == pytest.approx(curve.length, rel=1e-3)

    def test_split_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            quarter_turn().split(1.2)

    def test_get_t_on_uniform_line(self):
        curve = BezierCubic(Point2d(0.0, 0.0), Point2d(1.0, 0.0), Point2d(2.0, 0.0), Point2d(3.0, 0.0))
        assert curve.get_t(1.5) == pytest.approx(0.5, abs=1e-5)
        assert curve.get_t(0.0) == 0.0
        assert curve.get_t(3.0) == pytest.approx(1.0, abs=1e-5)

    def test_inflection_of_s_curve(self):
        curve = BezierCubic.from_points(s_curve_points())
        assert curve.inflections() == [pytest.approx(0.5)]
        assert 0.5 in [pytest.approx(k) for k in curve.knots()]

    def test_roots_of_quarter_turn(self):
        roots = quarter_turn().roots()
        assert len(roots) >= 1
        assert all(0.0 < t < 1.0 for t in roots)


# ---------------------------------------------------------------------------
# Flattening examples
# ---------------------------------------------------------------------------

class TestFlattening:
    def test_quarter_turn_with_three_segments(self):
        line = quarter_turn().to_polyline(NumSegments(3))
        assert line.size == 4
        assert line.first.x == pytest.approx(10.0)
        assert line.first.y == pytest.approx(0.0)
        assert line.last.x == pytest.approx(0.0)
        assert line.last.y == pytest.approx(10.0)
        for i in (1, 2):
            p = line.get(i)
            assert 0.0 < p.x < 15.0
            assert 0.0 < p.y < 15.0

    @pytest.mark.parametrize("shape", [0.5, 1.0, 2.0])
    @pytest.mark.parametrize("weighted", [False, True])
    def test_rays_stay_inside_box(self, shape, weighted):
        curve = BezierCubic.from_rays(DirectedPoint2d(10.0, 0.0, math.pi / 2),
                                      DirectedPoint2d(0.0, 10.0, math.pi), shape, weighted)
        line = curve.to_polyline(NumSegments(16))
        assert line.size == 17
        for p in list(line)[1:-1]:
            assert 0.0 < p.x < 15.0
            assert 0.0 < p.y < 15.0

    def test_3d_flattening_keeps_end_points(self):
        curve = BezierCubic(Point3d(0.0, 0.0, 0.0), Point3d(20.0, 0.0, 0.0),
                            Point3d(20.0, 20.0, 5.0), Point3d(40.0, 20.0, 5.0))
        line = curve.to_polyline(MaxDeviation(0.01))
        assert line.dimension == 3
        assert np.allclose(line.points[0], [0.0, 0.0, 0.0])
        assert np.allclose(line.points[-1], [40.0, 20.0, 5.0])
        assert line.size > 4
