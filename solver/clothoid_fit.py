import logging
import math
from dataclasses import dataclass
from scipy.optimize import brentq
from models.points import DirectedPoint2d, normalize_angle
from curves.fresnel import fresnel, alpha_to_t

_logger = logging.getLogger(__name__)

# Headings within this angle of the chord (or of each other) are treated as equal
ANGLE_TOLERANCE = 2.0 * math.pi / 3600.0     # [rad], a tenth of a degree

STRAIGHT = "Straight"
ARC = "Arc"
CLOTHOID = "Clothoid"


@dataclass(frozen=True)
class ClothoidFitSettings:
    max_iter: int = 100
    tol: float = 1e-8                       # theta tolerance [rad]
    angle_tol: float = ANGLE_TOLERANCE      # [rad]


@dataclass(frozen=True)
class ClothoidFit:
    shape: str                  # STRAIGHT, ARC or CLOTHOID
    length: float               # [m]
    start_curvature: float      # [1/m]
    end_curvature: float        # [1/m]
    arc_angle: float = 0.0      # [rad] swept angle, arcs only
    converged: bool = True


def _f_theta(theta: float, phi1: float, phi2: float, sign: float) -> float:
    theta_phi1 = theta + phi1
    c0, s0 = fresnel(alpha_to_t(theta))
    c1, s1 = fresnel(alpha_to_t(theta_phi1 + phi2))
    return (s1 + sign * s0) * math.cos(theta_phi1) - (c1 + sign * c0) * math.sin(theta_phi1)


def solve_theta(phi1: float, phi2: float, c_shape: bool,
                settings: ClothoidFitSettings) -> tuple[float, bool]:
    """
    Solve f(theta) = 0 on the bracket that holds the root for this shape.

    Args:
        phi1: Angle from start heading to chord [rad], normalised so 0 < phi2 < pi
        phi2: Angle from chord to end heading [rad]
        c_shape: Whether the curvature keeps its sign along the curve
        settings: Iteration cap and tolerance

    Returns:
        theta, converged
    """
    if c_shape:
        lam = (1.0 - math.cos(phi1)) / (1.0 - math.cos(phi2))
        theta_min = 0.0
        theta_max = lam * lam * (phi1 + phi2) / (1.0 - lam * lam)
        sign = -1.0
    else:
        theta_min = max(0.0, -phi1)
        theta_max = math.pi / 2.0 - phi1
        sign = 1.0

    f_min = _f_theta(theta_min, phi1, phi2, sign)
    f_max = _f_theta(theta_max, phi1, phi2, sign)
    if f_min * f_max > 0.0:
        raise ValueError(
            f"f({theta_min:.6g}) and f({theta_max:.6g}) have the same sign, cannot find f(theta) = 0 between them")
    if f_min == 0.0:
        return theta_min, True
    if f_max == 0.0:
        return theta_max, True

    theta, result = brentq(_f_theta, theta_min, theta_max, args=(phi1, phi2, sign),
                           xtol=settings.tol, maxiter=settings.max_iter,
                           full_output=True, disp=False)
    return theta, result.converged


def fit_clothoid(start: DirectedPoint2d, end: DirectedPoint2d,
                 settings: ClothoidFitSettings = ClothoidFitSettings()) -> ClothoidFit:
    """
    Length and curvatures of the clothoid connecting two poses.

    Straight and arc configurations (within settings.angle_tol) are reported as
    such. Otherwise the Walton & Meek / Connor & Krivodonova construction is
    used: the problem is normalised so that |phi1| <= |phi2| and 0 < phi2 < pi,
    classified as C- or S-shaped, and solved for theta.

    Args:
        start: Start pose
        end: End pose

    Returns:
        ClothoidFit
    """
    if start is None or end is None:
        raise TypeError("start and end may not be None")
    dx = end.x - start.x
    dy = end.y - start.y
    d2 = math.hypot(dx, dy)
    if d2 == 0.0:
        raise ValueError("Cannot fit a clothoid between coinciding points")
    d = math.atan2(dy, dx)
    phi1 = normalize_angle(d - start.dir_z)
    phi2 = normalize_angle(end.dir_z - d)
    tol = settings.angle_tol

    if abs(phi1) < tol and abs(phi2) < tol:
        _logger.debug("Clothoid fit: straight over %.6g m", d2)
        return ClothoidFit(STRAIGHT, d2, 0.0, 0.0)

    if abs(phi2 - phi1) < tol:
        return _fit_arc(start, end, d2, phi1)

    opposite = abs(phi2) < abs(phi1)
    if opposite:
        phi1, phi2 = -phi2, -phi1
    reflected = phi2 < 0.0 or phi2 > math.pi
    if reflected:
        phi1, phi2 = -phi1, -phi2

    # h < 0 with 0 < phi1 < phi2 < pi guarantees a C-shaped solution
    c, s = fresnel(alpha_to_t(phi1 + phi2))
    h = s * math.cos(phi1) - c * math.sin(phi1)
    c_shape = 0.0 < phi1 < phi2 < math.pi and h < 0.0

    theta, converged = solve_theta(phi1, phi2, c_shape, settings)
    if not converged:
        _logger.warning("Clothoid fit did not converge within %d iterations (theta=%.6g)",
                        settings.max_iter, theta)

    a_sign = -1.0 if c_shape else 1.0
    v1 = theta + phi1 + phi2
    v2 = theta + phi1
    c0, s0 = fresnel(alpha_to_t(theta))
    c1, s1 = fresnel(alpha_to_t(v1))
    a = d2 / ((s1 + a_sign * s0) * math.sin(v2) + (c1 + a_sign * c0) * math.cos(v2))

    alpha_min = -a_sign * theta
    curve_min = math.pi * alpha_to_t(alpha_min) / a
    curve_max = math.pi * alpha_to_t(v1) / a
    sgn = -1.0 if reflected else 1.0
    k0 = sgn * (-curve_max if opposite else curve_min)
    k1 = sgn * (-curve_min if opposite else curve_max)
    length = a * (alpha_to_t(v1) - alpha_to_t(alpha_min))

    _logger.debug("Clothoid fit: %s-shape, length %.6g m, curvature %.6g -> %.6g",
                  "C" if c_shape else "S", length, k0, k1)
    return ClothoidFit(CLOTHOID, length, k0, k1, converged=converged)


def _fit_arc(start: DirectedPoint2d, end: DirectedPoint2d, d2: float, phi1: float) -> ClothoidFit:
    r = 0.5 * d2 / math.sin(phi1)
    x0 = start.x - r * math.sin(start.dir_z)
    y0 = start.y + r * math.cos(start.dir_z)
    angle_from = math.atan2(start.y - y0, start.x - x0)
    angle_to = math.atan2(end.y - y0, end.x - x0)
    if r < 0.0 and angle_to > angle_from:
        angle_to -= 2.0 * math.pi
    elif r > 0.0 and angle_to < angle_from:
        angle_to += 2.0 * math.pi
    angle = abs(angle_to - angle_from)
    _logger.debug("Clothoid fit: arc with radius %.6g m over %.6g rad", r, angle)
    return ClothoidFit(ARC, angle * abs(r), 1.0 / r, 1.0 / r, arc_angle=angle)
