import logging
import math
import numpy as np
from models.offsets import PiecewiseLinearOffset
from models.polyline import PolyLine, from_array
from solver.flattener import CurveSampler, sample_fractions

_logger = logging.getLogger(__name__)


class OffsetSampler(CurveSampler):
    """Samples the curve displaced sideways by a fraction dependent offset (positive is left)."""

    def __init__(self, curve, offsets: PiecewiseLinearOffset):
        super().__init__(curve)
        self.offsets = offsets

    def _evaluate_point(self, fraction: float) -> np.ndarray:
        p = self.curve.get_point(fraction).to_array()
        h = self.curve.get_direction(fraction)
        o = self.offsets.get(fraction)
        return p + o * np.array([-math.sin(h), math.cos(h)])

    def _evaluate_direction(self, fraction: float) -> float:
        h = self.curve.get_direction(fraction)
        o = self.offsets.get(fraction)
        do = self.offsets.get_derivative(fraction)
        v = self.curve.get_speed(fraction)
        if o != 0.0:
            # the offset line moves slower on the inside of a bend
            v = v * (1.0 - o * self.curve.get_curvature(fraction))
        return h + math.atan2(do, v)


def flatten_offset(curve, flattener, offsets: PiecewiseLinearOffset) -> PolyLine:
    """
    Polyline approximation of a curve with a lateral offset.

    The tolerances of the flattener apply to the offset line. The offset
    breakpoints are always sampled.

    Args:
        curve: 2d curve
        flattener: NumSegments, MaxDeviation, MaxAngle or MaxDeviationAndAngle
        offsets: PiecewiseLinearOffset over the curve's fraction

    Returns:
        PolyLine of the offset line
    """
    if curve is None:
        raise TypeError("curve may not be None")
    if offsets is None:
        raise TypeError("offsets may not be None")
    if curve.dimension != 2:
        raise TypeError(f"Offsets apply to 2d curves only, got a {curve.dimension}d curve")
    if offsets.is_zero():
        return curve.to_polyline(flattener)

    sampler = OffsetSampler(curve, offsets)
    knots = set(curve.knots()) | {float(f) for f in offsets.fractions}
    fractions = sample_fractions(sampler, flattener, knots)
    line = from_array([sampler.point(f) for f in fractions])
    _logger.debug("Flattened %s with offsets into %d points", type(curve).__name__, line.size)
    return line
