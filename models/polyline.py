from dataclasses import dataclass
import numpy as np
from models.points import Point2d, Point3d


@dataclass(frozen=True)
class PolyLine:
    points: np.ndarray  # (N, dim)
    s: np.ndarray       # (N,) cumulative length
    ds: np.ndarray      # (N-1,)

    @property
    def size(self) -> int:
        return len(self.points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def dimension(self) -> int:
        return self.points.shape[1]

    @property
    def length(self) -> float:
        return float(self.s[-1])

    @property
    def x(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.points[:, 1]

    @property
    def z(self) -> np.ndarray:
        if self.dimension < 3:
            raise ValueError("2d polyline has no z coordinates")
        return self.points[:, 2]

    def get(self, i: int):
        return _to_point(self.points[i])

    @property
    def first(self):
        return self.get(0)

    @property
    def last(self):
        return self.get(-1)

    def __iter__(self):
        for row in self.points:
            yield _to_point(row)

    def location_fraction(self, fraction: float):
        """
        Point at a fraction of the total length.

        Args:
            fraction: Fraction of the length, in [0, 1]

        Returns:
            Point2d or Point3d, linearly interpolated on the segment
        """
        if not 0.0 <= fraction <= 1.0:
            raise ValueError(f"Fraction {fraction} outside [0, 1]")
        target = fraction * self.length
        coords = [np.interp(target, self.s, self.points[:, k]) for k in range(self.dimension)]
        return _to_point(coords)

    def segment_directions(self) -> np.ndarray:
        """Heading of each segment [rad], (N-1,). 2d only."""
        d = np.diff(self.points, axis=0)
        return np.arctan2(d[:, 1], d[:, 0])


def _to_point(row):
    if len(row) == 2:
        return Point2d(float(row[0]), float(row[1]))
    return Point3d(float(row[0]), float(row[1]), float(row[2]))


def from_array(array) -> PolyLine:
    points = np.array(array, dtype=float)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError(f"Expected an (N, 2) or (N, 3) array, got shape {points.shape}")
    if len(points) < 2:
        raise ValueError(f"A polyline needs at least 2 points, got {len(points)}")
    if not np.all(np.isfinite(points)):
        raise ValueError("Polyline coordinates must be finite")

    d = np.diff(points, axis=0)
    ds = np.sqrt(np.sum(d*d, axis=1))
    s = np.r_[0.0, np.cumsum(ds)]

    points.setflags(write=False)
    return PolyLine(points=points, s=s, ds=ds)


def from_points(points) -> PolyLine:
    return from_array([p.to_array() for p in points])
