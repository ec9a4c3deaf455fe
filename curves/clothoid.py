import math
import numpy as np
from models.points import DirectedPoint2d, Point2d, normalize_angle
from models.polyline import from_points
from curves.curve import Curve
from curves.fresnel import clothoid_offset
from curves.straight import Straight2d
from curves.arc import Arc2d
from solver.clothoid_fit import (ClothoidFitSettings, ClothoidFit, fit_clothoid,
                                 STRAIGHT, ARC, CLOTHOID)


def _check_value(name: str, value: float, positive: bool = False) -> float:
    if value is None:
        raise TypeError(f"{name} may not be None")
    value = float(value)
    if math.isnan(value):
        raise ArithmeticError(f"{name} is NaN")
    if math.isinf(value):
        raise ValueError(f"{name} must be finite, got {value}")
    if positive and value <= 0.0:
        raise ValueError(f"{name} must be above 0, got {value}")
    return value


class Clothoid2d(Curve):
    """
    Clothoid (Euler spiral): curvature changes linearly with distance.

    Built from two poses (the length and curvatures are fitted), or from a start
    pose with either the length or the A-value and the start and end curvature.
    Fitted curves that are straight or circular within the fit's angle tolerance
    report that as their applied shape.
    """

    def __init__(self, start: DirectedPoint2d, end: DirectedPoint2d,
                 settings: ClothoidFitSettings = None):
        fit = fit_clothoid(start, end, settings or ClothoidFitSettings())
        self._define(start, fit)
        raw_end = self._raw_point(1.0)
        self._correction = end.to_array() - raw_end
        self._end = end

    @classmethod
    def from_length(cls, start: DirectedPoint2d, length: float,
                    start_curvature: float, end_curvature: float) -> "Clothoid2d":
        """
        Clothoid with known length and curvatures.

        Equal curvatures give an arc (or a straight line for zero curvature).
        """
        if start is None:
            raise TypeError("start may not be None")
        length = _check_value("length", length, positive=True)
        k0 = _check_value("start_curvature", start_curvature)
        k1 = _check_value("end_curvature", end_curvature)
        if k0 == k1:
            if k0 == 0.0:
                fit = ClothoidFit(STRAIGHT, length, 0.0, 0.0)
            else:
                fit = ClothoidFit(ARC, length, k0, k0, arc_angle=length * abs(k0))
        else:
            fit = ClothoidFit(CLOTHOID, length, k0, k1)
        return cls._from_fit(start, fit)

    @classmethod
    def from_a(cls, start: DirectedPoint2d, a: float,
               start_curvature: float, end_curvature: float) -> "Clothoid2d":
        """Clothoid with known A-value, where A^2 = length / |end_curvature - start_curvature|."""
        if start is None:
            raise TypeError("start may not be None")
        a = _check_value("A", a, positive=True)
        k0 = _check_value("start_curvature", start_curvature)
        k1 = _check_value("end_curvature", end_curvature)
        if k0 == k1:
            raise ValueError("Start and end curvature must differ when defined by an A-value")
        return cls._from_fit(start, ClothoidFit(CLOTHOID, a * a * abs(k1 - k0), k0, k1))

    @classmethod
    def _from_fit(cls, start: DirectedPoint2d, fit: ClothoidFit) -> "Clothoid2d":
        clothoid = cls.__new__(cls)
        clothoid._define(start, fit)
        clothoid._correction = np.zeros(2)
        end = clothoid._raw_point(1.0)
        clothoid._end = DirectedPoint2d(float(end[0]), float(end[1]),
                                        normalize_angle(clothoid._heading(1.0)))
        return clothoid

    def _define(self, start: DirectedPoint2d, fit: ClothoidFit):
        self._start = start
        self.fit = fit
        self._k0 = fit.start_curvature
        self._k1 = fit.end_curvature
        self._length = fit.length
        self._c = (self._k1 - self._k0) / self._length
        if fit.shape == STRAIGHT:
            self._segment = Straight2d(start, self._length)
        elif fit.shape == ARC:
            self._segment = Arc2d(start, 1.0 / abs(self._k0), self._k0 > 0.0, fit.arc_angle)
        else:
            self._segment = None

    # =========================================================================
    # Evaluation
    # =========================================================================

    def _raw_point(self, fraction: float) -> np.ndarray:
        if self._segment is not None:
            return self._segment.get_point(fraction).to_array()
        dx, dy = clothoid_offset(fraction * self._length, self._k0, self._c, self._start.dir_z)
        return np.array([self._start.x + float(dx), self._start.y + float(dy)])

    def _heading(self, fraction: float) -> float:
        s = fraction * self._length
        return self._start.dir_z + self._k0 * s + 0.5 * self._c * s * s

    def get_point(self, fraction: float) -> Point2d:
        p = self._raw_point(fraction) + fraction * self._correction
        return Point2d(float(p[0]), float(p[1]))

    def get_direction(self, fraction: float) -> float:
        if self._segment is not None:
            return normalize_angle(self._segment.get_direction(fraction))
        return normalize_angle(self._heading(fraction))

    def get_curvature(self, fraction: float) -> float:
        return self._k0 + (self._k1 - self._k0) * fraction

    def get_speed(self, fraction: float) -> float:
        return self._length

    @property
    def length(self) -> float:
        return self._length

    @property
    def start_point(self) -> DirectedPoint2d:
        return self._start

    @property
    def end_point(self) -> DirectedPoint2d:
        return self._end

    @property
    def start_curvature(self) -> float:
        return self._k0

    @property
    def end_curvature(self) -> float:
        return self._k1

    @property
    def start_radius(self) -> float:
        return 1.0 / self._k0 if self._k0 != 0.0 else math.inf

    @property
    def end_radius(self) -> float:
        return 1.0 / self._k1 if self._k1 != 0.0 else math.inf

    def get_a(self) -> float:
        """A-value [m]; infinite when the curvature does not change."""
        if self._k0 == self._k1:
            return math.inf
        return math.sqrt(self._length / abs(self._k1 - self._k0))

    @property
    def applied_shape(self) -> str:
        return self.fit.shape

    def to_polyline(self, flattener):
        if flattener is None:
            raise TypeError("flattener may not be None")
        if self.fit.shape == STRAIGHT:
            return from_points([self.get_point(0.0), self.get_point(1.0)])
        return super().to_polyline(flattener)

    def __repr__(self) -> str:
        return (f"Clothoid2d [start={self._start}, end={self._end}, "
                f"start_curvature={self._k0}, end_curvature={self._k1}, length={self._length}]")
