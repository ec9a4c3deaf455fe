import logging
import math
from dataclasses import dataclass
import numpy as np
from models.points import Direction3d, closest_on_segment, make_point, normalize_angle
from models.polyline import PolyLine, from_array

_logger = logging.getLogger(__name__)

MAX_DEPTH = 40                  # bisection levels below each knot interval
COLLINEAR_TOLERANCE = 1e-9      # relative to the chord length
STATIONARY_STEP = 1e-9          # relative to the segment, where the curve stands still


class FlatteningError(RuntimeError):
    """Refinement reached the maximum depth without meeting the tolerance."""

    def __init__(self, fraction: float, depth: int):
        super().__init__(f"Flattening did not converge near fraction {fraction:.12g} "
                         f"after {depth} bisections")
        self.fraction = fraction
        self.depth = depth


def _check_tolerance(name: str, value: float):
    if math.isnan(value):
        raise ArithmeticError(f"{name} is NaN")
    if value <= 0.0:
        raise ValueError(f"{name} must be above 0, got {value}")


def _check_depth(max_depth: int):
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")


@dataclass(frozen=True)
class NumSegments:
    num_segments: int

    def __post_init__(self):
        if self.num_segments < 1:
            raise ValueError(f"Number of segments must be at least 1, got {self.num_segments}")


@dataclass(frozen=True)
class MaxDeviation:
    max_deviation: float        # [m]
    max_depth: int = MAX_DEPTH

    def __post_init__(self):
        _check_tolerance("max_deviation", self.max_deviation)
        _check_depth(self.max_depth)


@dataclass(frozen=True)
class MaxAngle:
    max_angle: float            # [rad]
    max_depth: int = MAX_DEPTH

    def __post_init__(self):
        _check_tolerance("max_angle", self.max_angle)
        _check_depth(self.max_depth)


@dataclass(frozen=True)
class MaxDeviationAndAngle:
    max_deviation: float        # [m]
    max_angle: float            # [rad]
    max_depth: int = MAX_DEPTH

    def __post_init__(self):
        _check_tolerance("max_deviation", self.max_deviation)
        _check_tolerance("max_angle", self.max_angle)
        _check_depth(self.max_depth)


FLATTENERS = (NumSegments, MaxDeviation, MaxAngle, MaxDeviationAndAngle)


# =============================================================================
# Sampling
# =============================================================================

class CurveSampler:
    """Point and direction of a curve by fraction, cached per fraction."""

    def __init__(self, curve):
        self.curve = curve
        self.dimension = curve.dimension
        self._points = {}
        self._directions = {}

    def _evaluate_point(self, fraction: float) -> np.ndarray:
        return self.curve.get_point(fraction).to_array()

    def _evaluate_direction(self, fraction: float):
        return self.curve.get_direction(fraction)

    def point(self, fraction: float) -> np.ndarray:
        if fraction not in self._points:
            self._points[fraction] = self._evaluate_point(fraction)
        return self._points[fraction]

    def direction(self, fraction: float):
        if fraction not in self._directions:
            self._directions[fraction] = self._evaluate_direction(fraction)
        return self._directions[fraction]

    def direction_towards(self, fraction: float, other: float):
        """
        Direction at ``fraction`` as seen from the segment reaching to ``other``.

        Where the curve stands still (a cusp or collapsed end) the direction is
        one-sided, so it is taken a small step inside the segment.
        """
        if self.curve.get_speed(fraction) > 0.0:
            return self.direction(fraction)
        return self.direction(fraction + STATIONARY_STEP * (other - fraction))


def angle_between(a, b) -> float:
    """Absolute angle [rad] between two headings or two Direction3d."""
    if isinstance(a, Direction3d):
        return a.difference(b)
    return abs(normalize_angle(a - b))


def _chord_direction(p0: np.ndarray, p1: np.ndarray):
    return make_point(p0).direction_to(make_point(p1))


def _has_inflection(p0: np.ndarray, p1: np.ndarray, q1: np.ndarray, q3: np.ndarray) -> bool:
    """Whether the quarter points q1 and q3 lie on different sides of the chord p0-p1."""
    chord = p1 - p0
    denom = float(np.dot(chord, chord))
    # offsets from the chord below this are rounding noise of collinear points
    noise = COLLINEAR_TOLERANCE * math.sqrt(denom)
    if len(chord) == 2:
        side1 = (chord[0] * (q1[1] - p0[1]) - chord[1] * (q1[0] - p0[0])) / math.sqrt(denom)
        side3 = (chord[0] * (q3[1] - p0[1]) - chord[1] * (q3[0] - p0[0])) / math.sqrt(denom)
        return side1 * side3 < 0.0 and min(abs(side1), abs(side3)) > noise
    v1 = q1 - p0 - chord * float(np.dot(q1 - p0, chord)) / denom
    v3 = q3 - p0 - chord * float(np.dot(q3 - p0, chord)) / denom
    return (float(np.dot(v1, v3)) < 0.0
            and min(np.linalg.norm(v1), np.linalg.norm(v3)) > noise)


def _deviation_exceeded(sampler: CurveSampler, f0: float, f1: float, tolerance: float) -> bool:
    p0 = sampler.point(f0)
    p1 = sampler.point(f1)
    pm = sampler.point(0.5 * (f0 + f1))
    if np.linalg.norm(pm - closest_on_segment(pm, p0, p1)) > tolerance:
        return True
    if np.linalg.norm(p1 - p0) <= tolerance:
        return False
    df = f1 - f0
    if _has_inflection(p0, p1, sampler.point(f0 + 0.25 * df), sampler.point(f0 + 0.75 * df)):
        return True
    # loop-back: the curve turns more than a right angle within the segment
    d0 = sampler.direction_towards(f0, f1)
    d1 = sampler.direction_towards(f1, f0)
    return angle_between(d0, d1) > math.pi / 2.0


def _angle_exceeded(sampler: CurveSampler, f0: float, f1: float, tolerance: float) -> bool:
    p0 = sampler.point(f0)
    p1 = sampler.point(f1)
    if not np.any(p1 - p0):
        # a closed loop returns to its start, a degenerate curve never leaves it
        return bool(np.any(sampler.point(0.5 * (f0 + f1)) - p0))
    d0 = sampler.direction_towards(f0, f1)
    d1 = sampler.direction_towards(f1, f0)
    if angle_between(d0, d1) > tolerance:
        return True
    chord = _chord_direction(p0, p1)
    if angle_between(chord, d0) > tolerance or angle_between(chord, d1) > tolerance:
        return True
    df = f1 - f0
    return _has_inflection(p0, p1, sampler.point(f0 + 0.25 * df), sampler.point(f0 + 0.75 * df))


def _needs_split(sampler: CurveSampler, flattener, f0: float, f1: float) -> bool:
    if isinstance(flattener, MaxDeviation):
        return _deviation_exceeded(sampler, f0, f1, flattener.max_deviation)
    elif isinstance(flattener, MaxAngle):
        return _angle_exceeded(sampler, f0, f1, flattener.max_angle)
    elif isinstance(flattener, MaxDeviationAndAngle):
        return (_deviation_exceeded(sampler, f0, f1, flattener.max_deviation)
                or _angle_exceeded(sampler, f0, f1, flattener.max_angle))
    else:
        raise ValueError(f"Unknown flattener type: {type(flattener).__name__}")


# =============================================================================
# Flattening
# =============================================================================

def sample_fractions(sampler: CurveSampler, flattener, knots=()) -> list[float]:
    """
    Fractions at which the curve is sampled for a polyline.

    NumSegments samples equally spaced fractions. The tolerance based flatteners
    start from 0, the knots and 1, and bisect each interval until it meets the
    tolerance.

    Args:
        sampler: CurveSampler of the curve (or offset curve)
        flattener: NumSegments, MaxDeviation, MaxAngle or MaxDeviationAndAngle
        knots: Fractions in (0, 1) that must be sampled

    Returns:
        Sorted list of fractions starting at 0.0 and ending at 1.0
    """
    if flattener is None:
        raise TypeError("flattener may not be None")
    if isinstance(flattener, NumSegments):
        n = flattener.num_segments
        return [i / n for i in range(n)] + [1.0]
    if not isinstance(flattener, FLATTENERS):
        raise ValueError(f"Unknown flattener type: {type(flattener).__name__}")

    bounds = sorted({0.0, 1.0} | {float(k) for k in knots if 0.0 < k < 1.0})
    # worklist of (f0, f1, depth), popped left to right
    stack = [(f0, f1, 0) for f0, f1 in zip(bounds[:-1], bounds[1:])][::-1]
    fractions = [0.0]
    while stack:
        f0, f1, depth = stack.pop()
        if _needs_split(sampler, flattener, f0, f1):
            if depth >= flattener.max_depth:
                raise FlatteningError(f0, depth)
            fm = 0.5 * (f0 + f1)
            stack.append((fm, f1, depth + 1))
            stack.append((f0, fm, depth + 1))
        else:
            fractions.append(f1)
    return fractions


def flatten(curve, flattener) -> PolyLine:
    """
    Polyline approximation of a curve.

    Args:
        curve: Any curve (Bezier, BezierCubic, Clothoid2d, Straight2d, Arc2d)
        flattener: NumSegments, MaxDeviation, MaxAngle or MaxDeviationAndAngle

    Returns:
        PolyLine whose first and last points are the curve's start and end points
    """
    if curve is None:
        raise TypeError("curve may not be None")
    sampler = CurveSampler(curve)
    fractions = sample_fractions(sampler, flattener, curve.knots())
    line = from_array([sampler.point(f) for f in fractions])
    _logger.debug("Flattened %s into %d points", type(curve).__name__, line.size)
    return line
