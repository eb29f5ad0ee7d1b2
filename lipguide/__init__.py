"""
lipguide - Pose-stabilized target mouth shapes for vowel pronunciation practice.

This package takes a per-user vowel calibration record and a stream of
MediaPipe face mesh samples and computes, for every sample, where the lip
landmarks of a target vowel belong in the user's current head pose:
- Vector primitives and pose-invariant relative position encoding
- Mouth-anchored orthonormal head frames (personal and dynamic)
- Rotation and depth estimation from a frame pair
- Vowel target shapes from calibration captures and fixed coefficients

It draws nothing and stores nothing.

Example usage:
    from lipguide import CalibrationRecord, TargetLandmarkComputer

    calibration = CalibrationRecord.from_json("calibration.json")
    computer = TargetLandmarkComputer(calibration, target_vowel="ㅔ")
    targets = computer.compute_target_landmarks(landmarks)
"""

__version__ = "0.1.0"

from .calibration import CalibrationRecord, CapturedFrame
from .computer import CalibrationState, TargetLandmarkComputer, ThrottledTargetComputer
from .coordinates import (
    CoordinateSystem,
    build_coordinate_system,
    create_dynamic_coordinate_system,
    create_personal_coordinate_system,
    validate_normalization,
    validate_orthogonality,
)
from .errors import (
    DegenerateFrameError,
    DegenerateReferenceError,
    IncompleteCalibrationError,
    LipGuideError,
    MissingLandmarkError,
    UnknownVowelError,
)
from .relative import RelativePosition, decode, encode
from .rotation import (
    RotationAngles,
    calculate_hybrid_rotation_angles,
    estimate_depth_from_rotation,
)
from .vowels import (
    Coeffs,
    build_target_vowel_shape,
    extract_vowel,
    mouth_center_of,
    precompute_all_target_vowels,
)

__all__ = [
    "CalibrationRecord",
    "CalibrationState",
    "CapturedFrame",
    "Coeffs",
    "CoordinateSystem",
    "DegenerateFrameError",
    "DegenerateReferenceError",
    "IncompleteCalibrationError",
    "LipGuideError",
    "MissingLandmarkError",
    "RelativePosition",
    "RotationAngles",
    "TargetLandmarkComputer",
    "ThrottledTargetComputer",
    "UnknownVowelError",
    "build_coordinate_system",
    "build_target_vowel_shape",
    "calculate_hybrid_rotation_angles",
    "create_dynamic_coordinate_system",
    "create_personal_coordinate_system",
    "decode",
    "encode",
    "estimate_depth_from_rotation",
    "extract_vowel",
    "mouth_center_of",
    "precompute_all_target_vowels",
    "validate_normalization",
    "validate_orthogonality",
]
