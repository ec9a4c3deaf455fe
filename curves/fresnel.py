import math
import numpy as np
from scipy.special import fresnel as _fresnel


def fresnel(t):
    """
    Normalised Fresnel integrals.

    C(t) = integral_0^t cos(pi u^2 / 2) du
    S(t) = integral_0^t sin(pi u^2 / 2) du

    Args:
        t: Upper integration limit (scalar or array)

    Returns:
        C, S (same shape as t)
    """
    s, c = _fresnel(t)
    if np.ndim(s) == 0:
        return float(c), float(s)
    return c, s


def alpha_to_t(alpha: float) -> float:
    """Fresnel limit t for which the clothoid heading change pi t^2 / 2 equals |alpha|, signed as alpha."""
    return math.copysign(math.sqrt(2.0 * abs(alpha) / math.pi), alpha)


def clothoid_offset(s, k0: float, c: float, h0: float):
    """
    Displacement from the start of a clothoid after arc length ``s``.

    The heading follows h(s) = h0 + k0 s + c s^2 / 2, where c is the rate of
    curvature change [1/m^2]. Zero ``c`` gives an arc, zero ``c`` and ``k0`` a
    straight line.

    Args:
        s: Arc length(s) from the start [m]
        k0: Start curvature [1/m]
        c: Curvature change per metre [1/m^2]
        h0: Start heading [rad]

    Returns:
        dx, dy (same shape as s)
    """
    s = np.asarray(s, dtype=float)
    s_max = float(np.max(np.abs(s))) if s.size else 0.0
    # heading contribution of c below 1e-12 rad is dropped
    if abs(c) * s_max * s_max < 1e-12:
        if abs(k0) * s_max < 1e-12:
            return s * math.cos(h0), s * math.sin(h0)
        half = 0.5 * k0 * s
        chord = 2.0 * np.sin(half) / k0
        return chord * np.cos(h0 + half), chord * np.sin(h0 + half)

    sigma = math.copysign(1.0, c)
    scale = math.sqrt(math.pi / abs(c))
    # heading written as phi + sigma * (pi / 2) * tau^2
    phi = h0 - k0 * k0 / (2.0 * c)
    tau0 = (k0 / c) / scale
    tau1 = (s + k0 / c) / scale
    c0, s0 = fresnel(tau0)
    c1, s1 = fresnel(tau1)
    dc = c1 - c0
    ds = sigma * (s1 - s0)
    return (scale * (math.cos(phi) * dc - math.sin(phi) * ds),
            scale * (math.sin(phi) * dc + math.cos(phi) * ds))
