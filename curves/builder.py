import math
import yaml
from models.points import DirectedPoint2d, DirectedPoint3d, make_point
from models.offsets import PiecewiseLinearOffset
from curves.bezier import Bezier, BezierCubic
from curves.clothoid import Clothoid2d
from curves.straight import Straight2d
from curves.arc import Arc2d
from solver.clothoid_fit import ClothoidFitSettings
from solver.flattener import NumSegments, MaxDeviation, MaxAngle, MaxDeviationAndAngle, MAX_DEPTH


def load_config(config_path: str = "config/default.yaml") -> dict:
    """Load flattener, fit settings and curve definitions from a YAML file."""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f)


def build_pose(definition: dict):
    """
    Directed point from a pose definition.

    Pose keys:
    - x, y [m] and optionally z [m]
    - heading_deg: heading in the xy-plane [degrees]
    - pitch_deg: angle from the positive z-axis [degrees] (3d only, default 90)
    """
    heading = math.radians(definition.get("heading_deg", 0.0))
    if "z" in definition:
        pitch = math.radians(definition.get("pitch_deg", 90.0))
        return DirectedPoint3d(float(definition["x"]), float(definition["y"]), float(definition["z"]),
                               pitch, heading)
    return DirectedPoint2d(float(definition["x"]), float(definition["y"]), heading)


def build_fit_settings(definition: dict = None) -> ClothoidFitSettings:
    if not definition:
        return ClothoidFitSettings()
    defaults = ClothoidFitSettings()
    return ClothoidFitSettings(
        max_iter=int(definition.get("max_iter", defaults.max_iter)),
        tol=float(definition.get("tol", defaults.tol)),
        angle_tol=math.radians(definition["angle_tol_deg"]) if "angle_tol_deg" in definition
        else defaults.angle_tol,
    )


def build_flattener(definition: dict):
    """
    Flattener from its definition.

    Flattener types:
    - {"type": "num_segments", "num_segments": n}
    - {"type": "max_deviation", "max_deviation": eps}
    - {"type": "max_angle", "max_angle_deg": theta}
    - {"type": "max_deviation_and_angle", "max_deviation": eps, "max_angle_deg": theta}
    """
    flattener_type = definition["type"]
    max_depth = int(definition.get("max_depth", MAX_DEPTH))

    if flattener_type == "num_segments":
        return NumSegments(int(definition["num_segments"]))
    elif flattener_type == "max_deviation":
        return MaxDeviation(float(definition["max_deviation"]), max_depth)
    elif flattener_type == "max_angle":
        return MaxAngle(math.radians(definition["max_angle_deg"]), max_depth)
    elif flattener_type == "max_deviation_and_angle":
        return MaxDeviationAndAngle(float(definition["max_deviation"]),
                                    math.radians(definition["max_angle_deg"]), max_depth)
    else:
        raise ValueError(f"Unknown flattener type: {flattener_type}")


def build_offsets(definition):
    """Offsets from a flat [fraction, value, ...] list or a {fraction: value} mapping; None if absent."""
    if definition is None:
        return None
    if isinstance(definition, dict):
        return PiecewiseLinearOffset.from_mapping(definition)
    return PiecewiseLinearOffset(*definition)


def build_curve(definition: dict, fit_settings: ClothoidFitSettings = None):
    """
    Curve from its definition.

    Curve types:
    - {"type": "bezier", "points": [[x, y], ...]}
    - {"type": "bezier_cubic", "points": [[x, y], [x, y], [x, y], [x, y]]}
    - {"type": "bezier_cubic", "start": pose, "end": pose, "shape": s, "weighted": bool}
    - {"type": "clothoid", "start": pose, "end": pose}
    - {"type": "clothoid_length", "start": pose, "length": L, "start_curvature": k0, "end_curvature": k1}
    - {"type": "clothoid_a", "start": pose, "a": A, "start_curvature": k0, "end_curvature": k1}
    - {"type": "straight", "start": pose, "length": L}
    - {"type": "arc", "start": pose, "radius": R, "angle_deg": theta} (positive angle = left turn)
    """
    curve_type = definition["type"]

    if curve_type == "bezier":
        return Bezier(*[make_point(p) for p in definition["points"]])

    elif curve_type == "bezier_cubic":
        if "points" in definition:
            return BezierCubic.from_points([make_point(p) for p in definition["points"]])
        return BezierCubic.from_rays(build_pose(definition["start"]), build_pose(definition["end"]),
                                     float(definition.get("shape", 1.0)),
                                     bool(definition.get("weighted", False)))

    elif curve_type == "clothoid":
        return Clothoid2d(build_pose(definition["start"]), build_pose(definition["end"]), fit_settings)

    elif curve_type == "clothoid_length":
        return Clothoid2d.from_length(build_pose(definition["start"]), float(definition["length"]),
                                      float(definition["start_curvature"]),
                                      float(definition["end_curvature"]))

    elif curve_type == "clothoid_a":
        return Clothoid2d.from_a(build_pose(definition["start"]), float(definition["a"]),
                                 float(definition["start_curvature"]),
                                 float(definition["end_curvature"]))

    elif curve_type == "straight":
        return Straight2d(build_pose(definition["start"]), float(definition["length"]))

    elif curve_type == "arc":
        angle = math.radians(definition["angle_deg"])
        return Arc2d(build_pose(definition["start"]), float(definition["radius"]), angle > 0.0, abs(angle))

    else:
        raise ValueError(f"Unknown curve type: {curve_type}")
