import math
import numpy as np
from models.points import Point2d, Point3d, DirectedPoint2d, DirectedPoint3d
from curves.curve import Curve, point_from_array, direction_from_vector

# Number of equal parameter steps for the chord-sum length estimate
LENGTH_STEPS = 256

_FACTORIALS = [math.factorial(n) for n in range(21)]


def factorial(n: int) -> float:
    """n! exactly up to 20, by floating point accumulation beyond."""
    if n < 0:
        raise ValueError(f"Factorial of negative number {n}")
    if n <= 20:
        return float(_FACTORIALS[n])
    result = float(_FACTORIALS[20])
    for i in range(21, n + 1):
        result *= i
    return result


def binomial(n: int, k: int) -> float:
    if k < 0 or k > n:
        return 0.0
    return factorial(n) / (factorial(k) * factorial(n - k))


def bernstein(n: int, k: int, t: float) -> float:
    """Bernstein basis polynomial b_{k,n}(t)."""
    return binomial(n, k) * t**k * (1.0 - t)**(n - k)


def _evaluate(cp: np.ndarray, t: float) -> np.ndarray:
    n = len(cp) - 1
    weights = np.array([bernstein(n, k, t) for k in range(n + 1)])
    return weights @ cp


def _hodograph(cp: np.ndarray) -> np.ndarray:
    """Control points of the derivative; a single point for a straight line."""
    n = len(cp) - 1
    if n == 0:
        return np.zeros_like(cp)
    return n * np.diff(cp, axis=0)


def _de_casteljau(cp: np.ndarray, t: float) -> tuple[np.ndarray, np.ndarray]:
    first = [cp[0]]
    last = [cp[-1]]
    level = cp
    while len(level) > 1:
        level = (1.0 - t) * level[:-1] + t * level[1:]
        first.append(level[0])
        last.append(level[-1])
    return np.array(first), np.array(last[::-1])


class Bezier(Curve):
    """Bezier curve of any degree through 2d or 3d control points."""

    def __init__(self, *points):
        if len(points) < 2:
            raise ValueError(f"A Bezier curve needs at least 2 control points, got {len(points)}")
        if all(isinstance(p, Point3d) for p in points):
            self.dimension = 3
        elif all(isinstance(p, Point2d) for p in points):
            self.dimension = 2
        else:
            raise ValueError("Control points must all be Point2d or all be Point3d")

        self._cp = np.array([p.to_array() for p in points], dtype=float)
        if not np.all(np.isfinite(self._cp)):
            raise ValueError("Control points must be finite")
        self._cp.setflags(write=False)
        self._d1 = _hodograph(self._cp)
        self._d2 = _hodograph(self._d1)
        self._length = None

    @classmethod
    def _from_array(cls, cp: np.ndarray):
        return cls(*[point_from_array(row) for row in cp])

    @property
    def control_points(self) -> list:
        return [point_from_array(row) for row in self._cp]

    @property
    def degree(self) -> int:
        return len(self._cp) - 1

    @property
    def size(self) -> int:
        return len(self._cp)

    def get_point(self, fraction: float):
        return point_from_array(_evaluate(self._cp, fraction))

    def derivative(self) -> "Bezier":
        """Hodograph as a Bezier curve (one degree lower, at least 2 control points)."""
        d = self._d1
        if len(d) == 1:
            d = np.vstack([d, d])
        return Bezier._from_array(d)

    def _first(self, fraction: float) -> np.ndarray:
        return _evaluate(self._d1, fraction)

    def _second(self, fraction: float) -> np.ndarray:
        return _evaluate(self._d2, fraction)

    def get_direction(self, fraction: float):
        d = self._first(fraction)
        if not np.any(d):
            # cusp or collapsed end: the tangent follows the second derivative
            d = self._second(fraction)
            if fraction >= 0.5:
                d = -d
        if not np.any(d):
            d = self._cp[-1] - self._cp[0]
        return direction_from_vector(d)

    def get_speed(self, fraction: float) -> float:
        return float(np.linalg.norm(self._first(fraction)))

    def get_curvature(self, fraction: float) -> float:
        """
        Curvature [1/m] at ``fraction``, signed (positive to the left) in 2d.

        Returns +inf where the first derivative vanishes.
        """
        d1 = self._first(fraction)
        d2 = self._second(fraction)
        speed = float(np.linalg.norm(d1))
        if speed == 0.0:
            return math.inf
        if self.dimension == 2:
            cross = d1[0] * d2[1] - d1[1] * d2[0]
        else:
            cross = float(np.linalg.norm(np.cross(d1, d2)))
        return float(cross / speed**3)

    @property
    def length(self) -> float:
        if self._length is None:
            if len(self._cp) == 2:
                self._length = float(np.linalg.norm(self._cp[1] - self._cp[0]))
            else:
                t = np.linspace(0.0, 1.0, LENGTH_STEPS + 1)
                pts = np.array([_evaluate(self._cp, ti) for ti in t])
                self._length = float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))
        return self._length

    def split(self, t: float) -> tuple["Bezier", "Bezier"]:
        """Split at parameter ``t`` into two curves of the same degree."""
        if not 0.0 <= t <= 1.0:
            raise ValueError(f"t value {t} should be in the range [0, 1]")
        first, last = _de_casteljau(self._cp, t)
        return type(self)._from_array(first), type(self)._from_array(last)

    def get_t(self, position: float) -> float:
        """Parameter at arc length ``position`` from the start, by bisection on split lengths."""
        if position <= 0.0:
            return 0.0
        if position >= self.length:
            return 1.0
        t0, t2 = 0.0, 1.0
        t1 = 0.5
        while t2 > t0 + 1e-6:
            t1 = 0.5 * (t0 + t2)
            if self.split(t1)[0].length < position:
                t0 = t1
            else:
                t2 = t1
        return t1

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bezier):
            return NotImplemented
        return type(self) is type(other) and np.array_equal(self._cp, other._cp)

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._cp.tobytes()))

    def __repr__(self) -> str:
        pts = ", ".join("(" + ", ".join(f"{v:g}" for v in row) + ")" for row in self._cp)
        return f"{type(self).__name__} [{pts}]"


class BezierCubic(Bezier):
    """Cubic Bezier curve: start, two control points, end."""

    def __init__(self, start, control1, control2, end):
        super().__init__(start, control1, control2, end)

    @classmethod
    def from_points(cls, points) -> "BezierCubic":
        points = list(points)
        if len(points) != 4:
            raise ValueError(f"A cubic Bezier needs exactly 4 control points, got {len(points)}")
        return cls(*points)

    @classmethod
    def from_rays(cls, start, end, shape: float = 1.0, weighted: bool = False) -> "BezierCubic":
        """
        Cubic Bezier leaving ``start`` along its heading and arriving at ``end`` along its heading.

        Args:
            start: DirectedPoint2d or DirectedPoint3d
            end: Directed point of the same dimension
            shape: Control point distance factor, finite and > 0
            weighted: Scale each control distance by how far the other ray's line is away

        Returns:
            BezierCubic
        """
        if start is None or end is None:
            raise TypeError("start and end may not be None")
        if math.isnan(shape):
            raise ArithmeticError("shape is NaN")
        if shape <= 0.0 or math.isinf(shape):
            raise ValueError(f"shape must be a finite, positive value, got {shape}")
        chord = start.distance(end)
        if chord == 0.0:
            raise ValueError("Cannot create control points if start and end points coincide")

        d_start = d_end = chord * shape / 3.0
        if weighted:
            ds = start.distance(end.projection_on_line(start))
            de = end.distance(start.projection_on_line(end))
            if ds + de > 0.0:
                distance = 2.0 * shape * chord / 3.0
                d_start = distance * ds / (ds + de)
                d_end = distance * de / (ds + de)

        control1 = start.get_location(d_start)
        control2 = end.get_location(-d_end)
        return cls(_plain(start), control1, control2, _plain(end))

    # =========================================================================
    # Flattening knots (2d)
    # =========================================================================

    def roots(self) -> list[float]:
        """Parameters in (0, 1) where the x or y derivative is zero."""
        found = set()
        for k in range(min(self.dimension, 2)):
            p = self._cp[:, k]
            a = 3.0 * (-p[0] + 3.0 * p[1] - 3.0 * p[2] + p[3])
            b = 6.0 * (p[0] - 2.0 * p[1] + p[2])
            c = 3.0 * (p[1] - p[0])
            disc = b * b - 4.0 * a * c
            if disc > 0.0 and a != 0.0:
                sq = math.sqrt(disc)
                found.update([(-b + sq) / (2.0 * a), (-b - sq) / (2.0 * a)])
        return sorted(t for t in found if 0.0 < t < 1.0)

    def inflections(self) -> list[float]:
        """Parameters in (0, 1) where the 2d curvature changes sign."""
        if self.dimension != 2:
            return []
        # align: first point at the origin, last point on the x-axis
        ang = -math.atan2(self._cp[3, 1] - self._cp[0, 1], self._cp[3, 0] - self._cp[0, 0])
        rot = np.array([[math.cos(ang), -math.sin(ang)], [math.sin(ang), math.cos(ang)]])
        p = (self._cp - self._cp[0]) @ rot.T
        a = p[2, 0] * p[1, 1]
        b = p[3, 0] * p[1, 1]
        c = p[1, 0] * p[2, 1]
        d = p[3, 0] * p[2, 1]
        x = -3.0 * a + 2.0 * b + 3.0 * c - d
        y = 3.0 * a - b - 3.0 * c
        z = c - a
        found = []
        if abs(x) < 1e-6:
            if abs(y) >= 1e-12:
                found.append(-z / y)
        else:
            det = y * y - 4.0 * x * z
            if det >= 0.0:
                sq = math.sqrt(det)
                found.extend([-(y + sq) / (2.0 * x), (sq - y) / (2.0 * x)])
        return sorted(t for t in set(found) if 0.0 < t < 1.0)

    def knots(self) -> list[float]:
        return sorted(set(self.roots()) | set(self.inflections()))

    @classmethod
    def _from_array(cls, cp: np.ndarray):
        return cls.from_points([point_from_array(row) for row in cp])


def _plain(p):
    if isinstance(p, (DirectedPoint2d, DirectedPoint3d)):
        return p.as_point()
    return p
