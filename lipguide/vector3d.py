"""
3D vector primitives.

Points and vectors share one representation: a float64 numpy array of shape
(3,). Inputs may be any length-2 or length-3 sequence, or a mapping with
"x", "y" and optional "z" keys; a missing z is treated as 0.

Positions and directions are not distinguished by type. Only directions
should ever be passed to normalize().
"""

from typing import Mapping, Sequence, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

Vec3Like = Union[NDArray[np.float64], Sequence[float], Mapping[str, float]]

ZERO = np.zeros(3, dtype=np.float64)
ZERO.setflags(write=False)


def as_vec3(v: Vec3Like) -> NDArray[np.float64]:
    """
    Convert a point-like value to a float64 array of shape (3,).

    Args:
        v: Array or sequence of 2 or 3 floats, or a mapping with x, y, (z)

    Returns:
        New array [x, y, z] with z defaulting to 0

    Raises:
        ValueError: If the value does not hold 2 or 3 coordinates
    """
    if isinstance(v, Mapping):
        z = v.get("z")
        return np.array(
            [v["x"], v["y"], 0.0 if z is None else z], dtype=np.float64
        )

    arr = np.asarray(v, dtype=np.float64).reshape(-1)
    if arr.shape[0] == 3:
        return arr.copy()
    if arr.shape[0] == 2:
        return np.array([arr[0], arr[1], 0.0], dtype=np.float64)
    raise ValueError(f"Expected 2 or 3 coordinates, got shape {arr.shape}")


def add(a: Vec3Like, b: Vec3Like) -> NDArray[np.float64]:
    """a + b"""
    return as_vec3(a) + as_vec3(b)


def sub(a: Vec3Like, b: Vec3Like) -> NDArray[np.float64]:
    """a - b"""
    return as_vec3(a) - as_vec3(b)


def dot(a: Vec3Like, b: Vec3Like) -> float:
    """a · b"""
    return float(np.dot(as_vec3(a), as_vec3(b)))


def cross(a: Vec3Like, b: Vec3Like) -> NDArray[np.float64]:
    """Right-handed cross product a × b."""
    return np.cross(as_vec3(a), as_vec3(b))


def scale(v: Vec3Like, s: float) -> NDArray[np.float64]:
    """v * s"""
    return as_vec3(v) * float(s)


def length(v: Vec3Like) -> float:
    """Euclidean length |v|."""
    return float(np.linalg.norm(as_vec3(v)))


def normalize(v: Vec3Like) -> NDArray[np.float64]:
    """
    Return the unit vector along v.

    The zero vector normalizes to the zero vector instead of NaN. Callers
    building axes should treat a zero result as degenerate geometry (see
    coordinates.validate_normalization).
    """
    vec = as_vec3(v)
    norm = float(np.linalg.norm(vec))
    if norm == 0.0:
        return ZERO.copy()
    return vec / norm


def midpoint(a: Vec3Like, b: Vec3Like) -> NDArray[np.float64]:
    """Point halfway between a and b."""
    return (as_vec3(a) + as_vec3(b)) / 2.0


def angle_between_deg(v1: Vec3Like, v2: Vec3Like) -> float:
    """
    Unsigned angle between two vectors in degrees, in [0, 180].

    The cosine is clamped to [-1, 1] before arccos so floating-point overshoot
    never yields NaN. Returns 0 if either vector has zero length.
    """
    a = as_vec3(v1)
    b = as_vec3(v2)
    mag1 = float(np.linalg.norm(a))
    mag2 = float(np.linalg.norm(b))
    if mag1 == 0.0 or mag2 == 0.0:
        return 0.0

    cos_angle = float(np.dot(a, b)) / (mag1 * mag2)
    return float(np.degrees(np.arccos(np.clip(cos_angle, -1.0, 1.0))))


def readonly(v: ArrayLike) -> NDArray[np.float64]:
    """Float64 copy of v with the writeable flag cleared."""
    arr = np.array(v, dtype=np.float64)
    arr.setflags(write=False)
    return arr
