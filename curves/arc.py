import math
from models.points import DirectedPoint2d, Point2d
from curves.curve import Curve
from curves.fresnel import clothoid_offset


class Arc2d(Curve):
    """Circular arc from a directed start point."""

    def __init__(self, start: DirectedPoint2d, radius: float, left: bool, angle: float):
        """
        Args:
            start: Start point and heading
            radius: Radius [m], >= 0
            left: True for a counter-clockwise (left) turn
            angle: Swept angle [rad], >= 0
        """
        if start is None:
            raise TypeError("start may not be None")
        if math.isnan(radius) or math.isnan(angle):
            raise ArithmeticError("radius and angle may not be NaN")
        if radius < 0.0 or math.isinf(radius):
            raise ValueError(f"radius must be finite and >= 0, got {radius}")
        if angle < 0.0 or math.isinf(angle):
            raise ValueError(f"angle must be finite and >= 0, got {angle}")
        self.start = start
        self.radius = float(radius)
        self.left = bool(left)
        self.angle = float(angle)
        self._sign = 1.0 if self.left else -1.0

    @property
    def center(self) -> Point2d:
        h = self.start.dir_z
        return Point2d(self.start.x - self._sign * self.radius * math.sin(h),
                       self.start.y + self._sign * self.radius * math.cos(h))

    def get_point(self, fraction: float) -> Point2d:
        if self.radius == 0.0:
            return self.start.as_point()
        dx, dy = clothoid_offset(fraction * self.length, self._sign / self.radius, 0.0, self.start.dir_z)
        return Point2d(self.start.x + float(dx), self.start.y + float(dy))

    def get_direction(self, fraction: float) -> float:
        return self.start.dir_z + self._sign * self.angle * fraction

    def get_curvature(self, fraction: float) -> float:
        if self.radius == 0.0:
            return self._sign * math.inf
        return self._sign / self.radius

    def get_speed(self, fraction: float) -> float:
        return self.length

    @property
    def length(self) -> float:
        return self.angle * self.radius

    def __repr__(self) -> str:
        side = "left" if self.left else "right"
        return f"Arc2d [start={self.start}, radius={self.radius}, {side}, angle={self.angle}]"
