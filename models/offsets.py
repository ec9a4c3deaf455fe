import math
import numpy as np


class PiecewiseLinearOffset:
    """
    Lateral offset profile along a curve.

    Breakpoints map a fraction of the curve in [0, 1] to a signed offset
    (positive to the left of the direction of travel). Between breakpoints the
    offset is interpolated linearly, outside them it is held at the boundary
    value.

    Example:
        PiecewiseLinearOffset(0.0, 1.5, 0.5, 2.0, 1.0, 1.5)
    """

    def __init__(self, *data: float):
        if len(data) < 2 or len(data) % 2 != 0:
            raise ValueError(f"Number of input values must be even and at least 2, got {len(data)}")
        self._set_breakpoints(list(zip(data[0::2], data[1::2])))

    @classmethod
    def of(cls, *data: float) -> "PiecewiseLinearOffset":
        return cls(*data)

    @classmethod
    def from_mapping(cls, mapping: dict) -> "PiecewiseLinearOffset":
        if mapping is None:
            raise TypeError("mapping may not be None")
        if len(mapping) == 0:
            raise ValueError("Input data is empty")
        offsets = cls.__new__(cls)
        offsets._set_breakpoints(list(mapping.items()))
        return offsets

    def _set_breakpoints(self, pairs: list):
        table = {}
        for fraction, value in pairs:
            if fraction is None or value is None:
                raise TypeError("Breakpoint fractions and values may not be None")
            fraction = float(fraction)
            value = float(value)
            if math.isnan(fraction) or fraction < 0.0 or fraction > 1.0:
                raise ValueError(f"Fraction {fraction} is outside of range [0, 1]")
            if fraction == 0.0 and math.copysign(1.0, fraction) < 0:
                raise ValueError("Fractions may not contain -0.0")
            if not math.isfinite(value):
                raise ValueError(f"Values must be finite (got {value})")
            if fraction in table:
                raise ValueError(f"Duplicate fraction {fraction} is not permitted")
            table[fraction] = value

        order = sorted(table)
        self._fractions = np.array(order, dtype=float)
        self._values = np.array([table[f] for f in order], dtype=float)
        self._fractions.setflags(write=False)
        self._values.setflags(write=False)

    # =========================================================================
    # Evaluation
    # =========================================================================

    def get(self, fraction: float) -> float:
        """Offset at ``fraction``; clamped to the boundary values outside the breakpoints."""
        return float(np.interp(fraction, self._fractions, self._values))

    def get_derivative(self, fraction: float) -> float:
        """
        Slope d(offset)/d(fraction) at ``fraction``.

        At a breakpoint the slope of the segment ending there is used, except at
        exactly 0 where the segment starting there is used. Outside the breakpoint
        range the slope is 0.
        """
        f = self._fractions
        if fraction == 0.0:
            i1 = int(np.searchsorted(f, fraction, side='right'))
            i0 = i1 - 1
        else:
            i1 = int(np.searchsorted(f, fraction, side='left'))
            i0 = i1 - 1
        if i0 < 0 or i1 >= len(f):
            return 0.0
        return float((self._values[i1] - self._values[i0]) / (f[i1] - f[i0]))

    # =========================================================================
    # Access
    # =========================================================================

    @property
    def size(self) -> int:
        return len(self._fractions)

    def __len__(self) -> int:
        return len(self._fractions)

    @property
    def fractions(self) -> np.ndarray:
        return self._fractions

    @property
    def values(self) -> np.ndarray:
        return self._values

    def fractions_full_range(self) -> np.ndarray:
        """Breakpoint fractions with 0 and 1 added where missing."""
        f = self._fractions
        if f[0] > 0.0:
            f = np.r_[0.0, f]
        if f[-1] < 1.0:
            f = np.r_[f, 1.0]
        return f

    def values_full_range(self) -> np.ndarray:
        """Values at ``fractions_full_range()``."""
        return np.array([self.get(f) for f in self.fractions_full_range()])

    def is_zero(self) -> bool:
        return bool(np.all(self._values == 0.0))

    def __iter__(self):
        for f, v in zip(self._fractions, self._values):
            yield float(f), float(v)

    def __eq__(self, other) -> bool:
        if not isinstance(other, PiecewiseLinearOffset):
            return NotImplemented
        return (np.array_equal(self._fractions, other._fractions)
                and np.array_equal(self._values, other._values))

    def __hash__(self) -> int:
        return hash((tuple(self._fractions), tuple(self._values)))

    def __repr__(self) -> str:
        pairs = ", ".join(f"{f:g}: {v:g}" for f, v in self)
        return f"PiecewiseLinearOffset [{pairs}]"
