import math
from models.points import DirectedPoint2d
from curves.curve import Curve


class Straight2d(Curve):
    """Straight line from a directed start point."""

    def __init__(self, start: DirectedPoint2d, length: float):
        if start is None:
            raise TypeError("start may not be None")
        if math.isnan(length):
            raise ArithmeticError("length is NaN")
        if length <= 0.0 or math.isinf(length):
            raise ValueError(f"length must be finite and positive, got {length}")
        self.start = start
        self._length = float(length)

    def get_point(self, fraction: float):
        return self.start.get_location(fraction * self._length)

    def get_direction(self, fraction: float) -> float:
        return self.start.dir_z

    def get_curvature(self, fraction: float) -> float:
        return 0.0

    def get_speed(self, fraction: float) -> float:
        return self._length

    @property
    def length(self) -> float:
        return self._length

    def __repr__(self) -> str:
        return f"Straight2d [start={self.start}, length={self._length}]"
