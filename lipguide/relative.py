"""
Pose-invariant relative position encoding.

A target point T is described against a reference baseline A -> B by three
quantities that survive rotation, translation and uniform scaling of the
whole configuration:

    along_ratio: signed projection of (T - A) onto AB, divided by |AB|
    perp_ratio:  length of the component of (T - A) perpendicular to AB,
                 divided by |AB|
    perp_unit:   unit direction of that perpendicular component

decode() rebuilds T from a (possibly moved) baseline A', B'. The
perpendicular direction is stored in absolute coordinates, so decoding
reproduces the moved point exactly for translation, uniform scaling, and
rotation about an axis parallel to perp_unit. Points on the baseline line
(perp_ratio == 0) follow any rigid motion.
"""

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .errors import DegenerateReferenceError
from .landmarks import LEFT_EYE_INNER, NOSE_TIP, find_mouth_center


@dataclass(frozen=True)
class RelativePosition:
    """Encoding of a point relative to a reference baseline A -> B."""
    along_ratio: float
    perp_ratio: float
    perp_unit: NDArray[np.float64] = field(default_factory=lambda: v3.ZERO.copy())

    def __post_init__(self):
        object.__setattr__(self, "perp_unit", v3.readonly(self.perp_unit))


def _baseline(point_a: v3.Vec3Like, point_b: v3.Vec3Like, caller: str):
    a = v3.as_vec3(point_a)
    ab = v3.as_vec3(point_b) - a
    dist_ab = float(np.linalg.norm(ab))
    if dist_ab == 0.0:
        raise DegenerateReferenceError(
            f"{caller}: reference points A and B are identical (|AB| = 0)"
        )
    return a, ab / dist_ab, dist_ab


def encode(
    target: v3.Vec3Like,
    point_a: v3.Vec3Like,
    point_b: v3.Vec3Like
) -> RelativePosition:
    """
    Encode target relative to the baseline A -> B.

    Args:
        target: Point to encode
        point_a: Baseline start (reference A)
        point_b: Baseline end (reference B)

    Returns:
        RelativePosition with perp_unit of length 1, or the zero vector when
        the target lies exactly on the baseline line

    Raises:
        DegenerateReferenceError: If A == B
    """
    a, unit_ab, dist_ab = _baseline(point_a, point_b, "encode")
    at = v3.as_vec3(target) - a

    along = float(np.dot(at, unit_ab))
    perp_vec = at - unit_ab * along
    perp_dist = float(np.linalg.norm(perp_vec))
    perp_unit = perp_vec / perp_dist if perp_dist > 0.0 else v3.ZERO.copy()

    return RelativePosition(
        along_ratio=along / dist_ab,
        perp_ratio=perp_dist / dist_ab,
        perp_unit=perp_unit,
    )


def decode(
    rel: RelativePosition,
    point_a: v3.Vec3Like,
    point_b: v3.Vec3Like
) -> NDArray[np.float64]:
    """
    Rebuild a point from its encoding and the current baseline A -> B.

    result = A + unitAB * (along_ratio * |AB|) + perp_unit * (perp_ratio * |AB|)

    Raises:
        DegenerateReferenceError: If A == B
    """
    a, unit_ab, dist_ab = _baseline(point_a, point_b, "decode")
    along_component = unit_ab * (rel.along_ratio * dist_ab)
    perp_component = v3.as_vec3(rel.perp_unit) * (rel.perp_ratio * dist_ab)
    return a + along_component + perp_component


def encode_mouth_center(landmarks: NDArray[np.float64]) -> RelativePosition:
    """Encode the mouth center against the nose tip -> left eye baseline."""
    return encode(
        find_mouth_center(landmarks),
        landmarks[NOSE_TIP],
        landmarks[LEFT_EYE_INNER],
    )


def decode_mouth_center(
    rel: RelativePosition,
    landmarks: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Restore the mouth center from a stored encoding and a new sample."""
    return decode(rel, landmarks[NOSE_TIP], landmarks[LEFT_EYE_INNER])
