from dataclasses import dataclass
import math
import numpy as np


def normalize_angle(angle: float) -> float:
    """Normalise an angle to the range [-pi, pi]."""
    return math.atan2(math.sin(angle), math.cos(angle))


@dataclass(frozen=True)
class Point2d:
    x: float
    y: float

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def distance(self, other: "Point2d") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def direction_to(self, other: "Point2d") -> float:
        """Heading [rad] of the line from this point towards ``other``."""
        return math.atan2(other.y - self.y, other.x - self.x)

    def closest_point_on_segment(self, a: "Point2d", b: "Point2d") -> "Point2d":
        return Point2d(*closest_on_segment(self.to_array(), a.to_array(), b.to_array()))


@dataclass(frozen=True)
class Point3d:
    x: float
    y: float
    z: float

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def distance(self, other: "Point3d") -> float:
        return math.sqrt((other.x - self.x)**2 + (other.y - self.y)**2 + (other.z - self.z)**2)

    def direction_to(self, other: "Point3d") -> "Direction3d":
        return Direction3d.from_vector(other.to_array() - self.to_array())

    def closest_point_on_segment(self, a: "Point3d", b: "Point3d") -> "Point3d":
        return Point3d(*closest_on_segment(self.to_array(), a.to_array(), b.to_array()))


@dataclass(frozen=True)
class Direction3d:
    """
    Direction in 3d space.

    dir_y is the angle from the positive z-axis, dir_z the rotation around the
    z-axis measured from the positive x-axis.
    """
    dir_y: float    # [rad]
    dir_z: float    # [rad]

    @classmethod
    def from_vector(cls, v) -> "Direction3d":
        v = np.asarray(v, dtype=float)
        norm = np.linalg.norm(v)
        if norm == 0.0:
            return cls(0.0, 0.0)
        return cls(math.acos(max(-1.0, min(1.0, v[2] / norm))), math.atan2(v[1], v[0]))

    def to_vector(self) -> np.ndarray:
        """Unit vector."""
        return np.array([math.sin(self.dir_y) * math.cos(self.dir_z),
                         math.sin(self.dir_y) * math.sin(self.dir_z),
                         math.cos(self.dir_y)])

    def difference(self, other: "Direction3d") -> float:
        """Angle [rad] between this direction and ``other``, in [0, pi]."""
        c = float(np.dot(self.to_vector(), other.to_vector()))
        return math.acos(max(-1.0, min(1.0, c)))


@dataclass(frozen=True)
class DirectedPoint2d(Point2d):
    """Point with a heading; also serves as a ray."""
    dir_z: float = 0.0    # [rad] heading, counter-clockwise from the positive x-axis

    def get_location(self, distance: float) -> Point2d:
        """Point at ``distance`` along the heading (negative goes backwards)."""
        return Point2d(self.x + distance * math.cos(self.dir_z),
                       self.y + distance * math.sin(self.dir_z))

    def projection_on_line(self, point: Point2d) -> Point2d:
        """Orthogonal projection of ``point`` on the extended heading line."""
        u = np.array([math.cos(self.dir_z), math.sin(self.dir_z)])
        t = float(np.dot(point.to_array() - self.to_array(), u))
        return self.get_location(t)

    def as_point(self) -> Point2d:
        return Point2d(self.x, self.y)


@dataclass(frozen=True)
class DirectedPoint3d(Point3d):
    dir_y: float = 0.0    # [rad]
    dir_z: float = 0.0    # [rad]

    @property
    def direction(self) -> Direction3d:
        return Direction3d(self.dir_y, self.dir_z)

    def get_location(self, distance: float) -> Point3d:
        return Point3d(*(self.to_array() + distance * self.direction.to_vector()))

    def projection_on_line(self, point: Point3d) -> Point3d:
        t = float(np.dot(point.to_array() - self.to_array(), self.direction.to_vector()))
        return self.get_location(t)

    def as_point(self) -> Point3d:
        return Point3d(self.x, self.y, self.z)


def closest_on_segment(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        return a
    t = min(1.0, max(0.0, float(np.dot(p - a, ab)) / denom))
    return a + t * ab


def make_point(values):
    """Point2d or Point3d from a coordinate sequence of length 2 or 3."""
    values = [float(v) for v in values]
    if len(values) == 2:
        return Point2d(*values)
    if len(values) == 3:
        return Point3d(*values)
    raise ValueError(f"Points need 2 or 3 coordinates, got {len(values)}")
