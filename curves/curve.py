import numpy as np
from models.points import Point2d, Point3d, DirectedPoint2d, DirectedPoint3d, Direction3d


class Curve:
    """
    Continuous curve over a fraction in [0, 1].

    Subclasses implement get_point, get_direction, get_curvature, get_speed and
    length. The flattener only needs this interface.
    """
    dimension = 2

    def get_point(self, fraction: float):
        raise NotImplementedError

    def get_direction(self, fraction: float):
        raise NotImplementedError

    def get_curvature(self, fraction: float) -> float:
        raise NotImplementedError

    def get_speed(self, fraction: float) -> float:
        """Magnitude of dP/dfraction."""
        raise NotImplementedError

    @property
    def length(self) -> float:
        raise NotImplementedError

    def knots(self) -> list[float]:
        """Fractions in (0, 1) that the flattener always includes."""
        return []

    @property
    def start_point(self):
        return self._directed(0.0)

    @property
    def end_point(self):
        return self._directed(1.0)

    @property
    def start_curvature(self) -> float:
        return self.get_curvature(0.0)

    @property
    def end_curvature(self) -> float:
        return self.get_curvature(1.0)

    def _directed(self, fraction: float):
        p = self.get_point(fraction)
        d = self.get_direction(fraction)
        if self.dimension == 3:
            return DirectedPoint3d(p.x, p.y, p.z, d.dir_y, d.dir_z)
        return DirectedPoint2d(p.x, p.y, d)

    def to_polyline(self, flattener):
        from solver.flattener import flatten
        return flatten(self, flattener)

    def to_polyline_offset(self, flattener, offsets):
        from solver.offset_flattener import flatten_offset
        return flatten_offset(self, flattener, offsets)


def point_from_array(a: np.ndarray):
    if len(a) == 2:
        return Point2d(float(a[0]), float(a[1]))
    return Point3d(float(a[0]), float(a[1]), float(a[2]))


def direction_from_vector(v: np.ndarray):
    """Heading [rad] for a 2d vector, Direction3d for a 3d one."""
    if len(v) == 2:
        return float(np.arctan2(v[1], v[0]))
    return Direction3d.from_vector(v)
