"""
Head-anchored coordinate frames and their validation.

A frame is built from one landmark sample and is anchored at the mouth
center of that sample:

    Origin: Mouth center (midpoint of upper/lower lip center landmarks)
    +X: Left eye inner corner -> right eye inner corner
    +Z: X × (nose tip -> forehead), perpendicular to X by construction
    +Y: Z × X, completing a right-handed orthonormal basis

Two frames with the same construction play different roles:
- Personal frame: built once from the calibration pose, immutable thereafter
- Dynamic frame: rebuilt from every live sample, never reused across frames

Comparing the two recovers head rotation (see rotation.py). Re-expressing a
calibration-pose offset in Personal axes and rebuilding it from Dynamic axes
applies the same rotation to it (see to_local / to_world).

Scale references:
    eye_distance:          |right eye - left eye|
    nose_to_eye_distance:  |left eye - mouth center|. Despite the name this
                           is a mouth-to-eye distance.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Union

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .landmarks import (
    FOREHEAD_CENTER,
    LEFT_EYE_INNER,
    NOSE_TIP,
    RIGHT_EYE_INNER,
    find_mouth_center,
)

logger = logging.getLogger(__name__)

# Allowed deviation for |dot| between axes and for |length - 1|
AXIS_TOLERANCE = 0.01

PointsLike = Union[v3.Vec3Like, NDArray[np.float64]]


def _as_points(points: PointsLike) -> NDArray[np.float64]:
    if isinstance(points, np.ndarray) and points.ndim == 2:
        if points.shape[1] != 3:
            raise ValueError(f"Expected points shape (N, 3), got {points.shape}")
        return points.astype(np.float64, copy=False)
    return v3.as_vec3(points)


@dataclass(frozen=True)
class CoordinateSystem:
    """
    Orthonormal head frame anchored at the mouth center.

    The origin and axis arrays are stored as read-only copies, so a frame
    cannot change after construction.
    """
    origin: NDArray[np.float64]
    x_axis: NDArray[np.float64]
    y_axis: NDArray[np.float64]
    z_axis: NDArray[np.float64]
    eye_distance: float
    nose_to_eye_distance: float

    def __post_init__(self):
        for name in ("origin", "x_axis", "y_axis", "z_axis"):
            object.__setattr__(self, name, v3.readonly(getattr(self, name)))

    @property
    def rotation(self) -> NDArray[np.float64]:
        """3x3 matrix whose columns are the frame axes in world coords."""
        return np.column_stack([self.x_axis, self.y_axis, self.z_axis])

    def to_local(self, offsets: PointsLike) -> NDArray[np.float64]:
        """
        Express world-space offsets in this frame's axes.

        For an orthonormal frame this is the inverse rotation R^T @ offset.
        The origin is not subtracted; pass offsets, not positions.

        Args:
            offsets: One offset, or an (N, 3) array of offsets

        Returns:
            Array of the same shape as the input
        """
        return _as_points(offsets) @ self.rotation

    def to_world(
        self,
        local: PointsLike,
        origin: v3.Vec3Like = None
    ) -> NDArray[np.float64]:
        """
        Rebuild world-space points from local coordinates.

        Args:
            local: Coordinates along (x_axis, y_axis, z_axis), one point or
                   an (N, 3) array
            origin: Anchor to translate to (default: this frame's origin)
        """
        anchor = self.origin if origin is None else v3.as_vec3(origin)
        return anchor + _as_points(local) @ self.rotation.T


# Same shape, different lifecycle
PersonalCoordinateSystem = CoordinateSystem
DynamicCoordinateSystem = CoordinateSystem


def build_coordinate_system(landmarks: NDArray[np.float64]) -> CoordinateSystem:
    """
    Build the mouth-anchored head frame from one landmark sample.

    Deterministic and pose-dependent: two samples of the same face in
    different poses give two different, internally orthonormal frames.

    Degenerate input (coincident eye corners, or nose->forehead parallel to
    the eye line) produces zero-length axes instead of raising. Check the
    result with validate_frame() before trusting it.

    Args:
        landmarks: (N, 3) MediaPipe face mesh sample

    Returns:
        CoordinateSystem for this sample
    """
    nose = v3.as_vec3(landmarks[NOSE_TIP])
    forehead = v3.as_vec3(landmarks[FOREHEAD_CENTER])
    left_eye = v3.as_vec3(landmarks[LEFT_EYE_INNER])
    right_eye = v3.as_vec3(landmarks[RIGHT_EYE_INNER])

    origin = find_mouth_center(landmarks)

    eye_vector = right_eye - left_eye
    x_axis = v3.normalize(eye_vector)
    z_axis = v3.normalize(v3.cross(x_axis, forehead - nose))
    y_axis = v3.normalize(v3.cross(z_axis, x_axis))

    return CoordinateSystem(
        origin=origin,
        x_axis=x_axis,
        y_axis=y_axis,
        z_axis=z_axis,
        eye_distance=v3.length(eye_vector),
        nose_to_eye_distance=v3.length(left_eye - origin),
    )


def create_personal_coordinate_system(
    landmarks: NDArray[np.float64]
) -> PersonalCoordinateSystem:
    """Build the one-time calibration-pose frame."""
    frame = build_coordinate_system(landmarks)
    logger.debug(
        "Personal frame: origin=%s, eye_distance=%.4f, nose_to_eye_distance=%.4f",
        np.round(frame.origin, 4).tolist(),
        frame.eye_distance,
        frame.nose_to_eye_distance,
    )
    return frame


def create_dynamic_coordinate_system(
    landmarks: NDArray[np.float64]
) -> DynamicCoordinateSystem:
    """Build the current-pose frame for one live sample."""
    return build_coordinate_system(landmarks)


# =============================================================================
# Validation
# =============================================================================

@dataclass
class ValidationResult:
    """
    Outcome of an axis check.

    `values` maps a short name (e.g. "x_dot_y", "x_length") to the measured
    quantity; `errors` holds one human-readable message per violation.
    """
    is_valid: bool
    values: dict = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def validate_orthogonality(
    frame: CoordinateSystem,
    tolerance: float = AXIS_TOLERANCE
) -> ValidationResult:
    """Check that every pair of axes has |dot| <= tolerance."""
    pairs = [
        ("x", "y", frame.x_axis, frame.y_axis),
        ("x", "z", frame.x_axis, frame.z_axis),
        ("y", "z", frame.y_axis, frame.z_axis),
    ]
    values = {}
    errors = []
    for name_a, name_b, a, b in pairs:
        d = abs(v3.dot(a, b))
        values[f"{name_a}_dot_{name_b}"] = d
        if not d <= tolerance:
            errors.append(
                f"{name_a.upper()} and {name_b.upper()} axes are not "
                f"perpendicular: |dot| = {d:.4f}"
            )
    return ValidationResult(is_valid=not errors, values=values, errors=errors)


def validate_normalization(
    frame: CoordinateSystem,
    tolerance: float = AXIS_TOLERANCE
) -> ValidationResult:
    """Check that every axis has |length - 1| <= tolerance."""
    values = {}
    errors = []
    for name, axis in (("x", frame.x_axis), ("y", frame.y_axis), ("z", frame.z_axis)):
        n = v3.length(axis)
        values[f"{name}_length"] = n
        if not abs(n - 1.0) <= tolerance:
            errors.append(f"{name.upper()} axis is not normalized: length = {n:.4f}")
    return ValidationResult(is_valid=not errors, values=values, errors=errors)


def validate_frame(
    frame: CoordinateSystem,
    tolerance: float = AXIS_TOLERANCE
) -> ValidationResult:
    """Combined orthogonality and normalization check."""
    ortho = validate_orthogonality(frame, tolerance)
    norm = validate_normalization(frame, tolerance)
    return ValidationResult(
        is_valid=ortho.is_valid and norm.is_valid,
        values={**ortho.values, **norm.values},
        errors=ortho.errors + norm.errors,
    )
