"""
Head rotation and depth estimation from a Personal/Dynamic frame pair.

Two independent estimators are blended:

Vector-angle method:
    yaw   = angle(personal.x_axis, dynamic.x_axis)
    pitch = angle(personal.y_axis, dynamic.y_axis)
    roll  = angle(personal.z_axis, dynamic.z_axis)

Distance-ratio method (foreshortening of the scale references):
    yaw   = acos(min(dynamic.eye_distance / personal.eye_distance, 1))
    pitch = acos(min(dynamic.nose_to_eye_distance / personal.nose_to_eye_distance, 1))
    roll  = vector-angle roll (no distance proxy exists for roll)

All angles are unsigned degrees in [0, 180]. The hybrid weights are fixed
empirical constants.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .coordinates import DynamicCoordinateSystem, PersonalCoordinateSystem

# (vector weight, distance weight) per angle
YAW_WEIGHTS = (0.6, 0.4)
PITCH_WEIGHTS = (0.6, 0.4)
ROLL_WEIGHTS = (0.8, 0.2)

DEFAULT_BASE_DEPTH = 0.1


@dataclass(frozen=True)
class RotationAngles:
    """Unsigned head rotation in degrees."""
    yaw: float
    pitch: float
    roll: float


def calculate_rotation_angles(
    personal: PersonalCoordinateSystem,
    dynamic: DynamicCoordinateSystem
) -> RotationAngles:
    """Vector-angle estimate: angle between corresponding axes."""
    return RotationAngles(
        yaw=v3.angle_between_deg(personal.x_axis, dynamic.x_axis),
        pitch=v3.angle_between_deg(personal.y_axis, dynamic.y_axis),
        roll=v3.angle_between_deg(personal.z_axis, dynamic.z_axis),
    )


def _ratio_angle_deg(current: float, reference: float) -> float:
    # Zero reference only occurs for a degenerate personal frame
    if reference == 0.0:
        return 0.0
    ratio = min(current / reference, 1.0)
    return float(np.degrees(np.arccos(max(ratio, -1.0))))


def calculate_rotation_angles_from_distance(
    personal: PersonalCoordinateSystem,
    dynamic: DynamicCoordinateSystem
) -> RotationAngles:
    """Distance-ratio estimate from eye and mouth-to-eye foreshortening."""
    return RotationAngles(
        yaw=_ratio_angle_deg(dynamic.eye_distance, personal.eye_distance),
        pitch=_ratio_angle_deg(
            dynamic.nose_to_eye_distance, personal.nose_to_eye_distance
        ),
        roll=v3.angle_between_deg(personal.z_axis, dynamic.z_axis),
    )


def calculate_hybrid_rotation_angles(
    personal: PersonalCoordinateSystem,
    dynamic: DynamicCoordinateSystem
) -> RotationAngles:
    """Weighted blend of the vector-angle and distance-ratio estimates."""
    vec = calculate_rotation_angles(personal, dynamic)
    dist = calculate_rotation_angles_from_distance(personal, dynamic)
    return RotationAngles(
        yaw=vec.yaw * YAW_WEIGHTS[0] + dist.yaw * YAW_WEIGHTS[1],
        pitch=vec.pitch * PITCH_WEIGHTS[0] + dist.pitch * PITCH_WEIGHTS[1],
        roll=vec.roll * ROLL_WEIGHTS[0] + dist.roll * ROLL_WEIGHTS[1],
    )


def estimate_depth_from_rotation(
    angles: RotationAngles,
    base_depth: float = DEFAULT_BASE_DEPTH
) -> float:
    """
    Depth correction added to target z to offset foreshortening.

    sqrt((base * sin|yaw|)^2 + (base * sin|pitch|)^2), angles in radians.
    Always >= 0 and increasing in |yaw| and |pitch| over [0, 90] degrees.
    """
    yaw_depth = base_depth * np.sin(abs(np.radians(angles.yaw)))
    pitch_depth = base_depth * np.sin(abs(np.radians(angles.pitch)))
    return float(np.sqrt(yaw_depth ** 2 + pitch_depth ** 2))


def calculate_distance_scale(
    personal: PersonalCoordinateSystem,
    dynamic: DynamicCoordinateSystem
) -> float:
    """Eye-distance ratio dynamic / personal, 1.0 if the reference is zero."""
    if personal.eye_distance == 0.0:
        return 1.0
    return dynamic.eye_distance / personal.eye_distance


def apply_distance_scale(offsets: v3.Vec3Like, scale: float) -> NDArray[np.float64]:
    """Scale one shape-relative offset, or an (N, 3) array of them, by the eye-distance ratio."""
    if isinstance(offsets, np.ndarray) and offsets.ndim == 2:
        return offsets * float(scale)
    return v3.scale(offsets, scale)
