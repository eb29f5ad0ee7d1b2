"""
Per-frame target landmark computation.

TargetLandmarkComputer is a small state machine owned by one tracking
session:

    UNCALIBRATED --compute_target_landmarks / calibrate--> CALIBRATED
    CALIBRATED   --reset-->                                 UNCALIBRATED

The only state carried across frames is the personal frame and the selected
vowel. Each call to compute_target_landmarks():

1. Calibrates from the sample if uncalibrated (personal frame, cached)
2. Builds the dynamic frame for the sample
3. Estimates hybrid rotation angles and the depth correction
4. Builds the target shape for the selected vowel and its mouth center
5. For every target landmark, expresses (point - shape center) in the
   personal axes, rebuilds it from the dynamic axes around the live mouth
   center, and adds the depth correction to z

Step 5 applies to the calibration-pose shape the same rotation that takes
the personal frame to the dynamic frame.

Instances are not thread-safe. Concurrent sessions (e.g. several faces) must
each own a computer.
"""

import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional

import numpy as np
from numpy.typing import NDArray

from .calibration import CalibrationInput, CalibrationRecord, as_calibration_record
from .config import TrackerConfig
from .coordinates import (
    CoordinateSystem,
    PersonalCoordinateSystem,
    create_dynamic_coordinate_system,
    create_personal_coordinate_system,
    validate_frame,
)
from .errors import DegenerateFrameError
from .landmarks import LandmarkInput, as_landmark_array
from .rotation import (
    RotationAngles,
    apply_distance_scale,
    calculate_distance_scale,
    calculate_hybrid_rotation_angles,
    estimate_depth_from_rotation,
)
from .vowels import build_target_vowel_shape, mouth_center_of

logger = logging.getLogger(__name__)

TargetLandmarks = Dict[int, NDArray[np.float64]]


class CalibrationState(Enum):
    UNCALIBRATED = "uncalibrated"
    CALIBRATED = "calibrated"


def _checked_frame(frame: CoordinateSystem, role: str) -> CoordinateSystem:
    result = validate_frame(frame)
    if not result.is_valid:
        logger.warning("%s frame failed validation: %s", role, "; ".join(result.errors))
        raise DegenerateFrameError(f"{role} frame is not orthonormal", result.errors)
    return frame


class TargetLandmarkComputer:
    """
    Track where the target vowel's lip landmarks belong in the current pose.

    Usage:
        computer = TargetLandmarkComputer(calibration, target_vowel='ㅔ')
        for landmarks in frames:
            try:
                targets = computer.compute_target_landmarks(landmarks)
            except LipGuideError:
                continue  # no overlay this frame
    """

    def __init__(
        self,
        calibration: CalibrationInput,
        target_vowel: Optional[str] = None,
        config: Optional[TrackerConfig] = None
    ):
        """
        Initialize the computer.

        Args:
            calibration: CalibrationRecord or an equivalent mapping
            target_vowel: Vowel to track (default: config.target_vowel)
            config: Tracking options

        Raises:
            IncompleteCalibrationError: If a required capture is missing
        """
        self.config = config if config is not None else TrackerConfig()
        self.calibration: CalibrationRecord = as_calibration_record(calibration)
        self._target_vowel = (
            target_vowel if target_vowel is not None else self.config.target_vowel
        )
        self._personal: Optional[PersonalCoordinateSystem] = None
        self.last_angles: Optional[RotationAngles] = None
        self.last_depth: Optional[float] = None

    @property
    def state(self) -> CalibrationState:
        if self._personal is None:
            return CalibrationState.UNCALIBRATED
        return CalibrationState.CALIBRATED

    @property
    def personal_frame(self) -> Optional[PersonalCoordinateSystem]:
        return self._personal

    @property
    def target_vowel(self) -> Optional[str]:
        return self._target_vowel

    def set_target_vowel(self, vowel: Optional[str]) -> None:
        """Select the vowel for the next computation. Keeps the calibration."""
        self._target_vowel = vowel

    def reset(self) -> None:
        """Drop the personal frame, e.g. when the user re-calibrates."""
        self._personal = None
        self.last_angles = None
        self.last_depth = None
        logger.debug("Calibration reset")

    def calibrate(self, landmarks: LandmarkInput) -> PersonalCoordinateSystem:
        """
        Build and cache the personal frame from one landmark sample.

        Raises:
            DegenerateFrameError: If the sample yields a non-orthonormal
                frame. The computer stays uncalibrated.
        """
        lm = as_landmark_array(landmarks)
        frame = _checked_frame(create_personal_coordinate_system(lm), "Personal")
        self._personal = frame
        logger.info(
            "Personal frame calibrated at mouth center %s",
            np.round(frame.origin, 4).tolist(),
        )
        return frame

    def calibrate_from_record(self) -> PersonalCoordinateSystem:
        """Build the personal frame from the calibration neutral capture."""
        neutral = self.calibration.neutral_landmark_array()
        frame = _checked_frame(create_personal_coordinate_system(neutral), "Personal")
        self._personal = frame
        logger.info("Personal frame calibrated from neutral capture")
        return frame

    def compute_target_landmarks(self, landmarks: LandmarkInput) -> TargetLandmarks:
        """
        Compute target lip landmarks in the pose of the given sample.

        Args:
            landmarks: Live MediaPipe face mesh sample, (N, 3) or equivalent

        Returns:
            Map from lip landmark id to a (3,) point in the sample's
            normalized coordinate space. Points are read-only. Empty if no
            vowel is selected.

        Raises:
            DegenerateFrameError: If the personal or dynamic frame is degenerate
            UnknownVowelError: If the selected vowel is not supported
            MissingLandmarkError: If the target shape lacks a lip center
        """
        if not self._target_vowel:
            return {}

        lm = as_landmark_array(landmarks)

        if self._personal is None:
            if self.config.calibrate_from_record:
                self.calibrate_from_record()
            else:
                self.calibrate(lm)
        personal = self._personal

        dynamic = _checked_frame(create_dynamic_coordinate_system(lm), "Dynamic")

        angles = calculate_hybrid_rotation_angles(personal, dynamic)
        depth = estimate_depth_from_rotation(angles, self.config.base_depth)

        shape = build_target_vowel_shape(self._target_vowel, self.calibration)
        shape_center = mouth_center_of(shape)

        ids = list(shape.keys())
        offsets = np.array([shape[i] for i in ids]) - shape_center

        distance_scale = 1.0
        if self.config.apply_distance_scale:
            distance_scale = calculate_distance_scale(personal, dynamic)
            offsets = apply_distance_scale(offsets, distance_scale)

        world = dynamic.to_world(personal.to_local(offsets))
        world[:, 2] += depth
        world.setflags(write=False)

        self.last_angles = angles
        self.last_depth = depth
        logger.debug(
            "vowel=%s yaw=%.1f pitch=%.1f roll=%.1f depth=%.4f scale=%.3f",
            self._target_vowel, angles.yaw, angles.pitch, angles.roll,
            depth, distance_scale,
        )

        return {idx: world[k] for k, idx in enumerate(ids)}


class ThrottledTargetComputer:
    """
    Reuse the last result when frames arrive faster than min_interval_ms.

    Wraps a TargetLandmarkComputer for per-frame callbacks running at display
    rate. Each call returns a new dict of the read-only cached points. Errors
    propagate and leave the cached result untouched.
    """

    def __init__(
        self,
        computer: TargetLandmarkComputer,
        min_interval_ms: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.computer = computer
        self.min_interval_ms = (
            computer.config.min_interval_ms if min_interval_ms is None else min_interval_ms
        )
        self._clock = clock
        self._last_result: Optional[TargetLandmarks] = None
        self._last_time: Optional[float] = None

    def compute(self, landmarks: LandmarkInput) -> TargetLandmarks:
        now = self._clock()
        if (
            self._last_result is not None
            and (now - self._last_time) * 1000.0 < self.min_interval_ms
        ):
            return dict(self._last_result)

        result = self.computer.compute_target_landmarks(landmarks)
        self._last_result = result
        self._last_time = now
        return dict(result)

    def set_target_vowel(self, vowel: Optional[str]) -> None:
        self.computer.set_target_vowel(vowel)
        self.invalidate()

    def reset(self) -> None:
        self.computer.reset()
        self.invalidate()

    def invalidate(self) -> None:
        """Force the next compute() to recompute."""
        self._last_result = None
        self._last_time = None
