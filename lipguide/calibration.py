"""
Per-user calibration record.

A calibration record holds four captures of the user's face: a neutral pose
and the three reference vowels a (ㅏ, jaw opening), u (ㅜ, lip rounding) and
i (ㅣ, lip spreading). Each capture stores sparse landmark coordinates keyed
by MediaPipe id plus the blendshape scores sampled at capture time.

The record is produced and persisted outside this package; here it is only
parsed, validated and read.

JSON layout:
    {
      "neutral": {"landmarks": {"61": [x, y, z], ...},
                  "blendshapes": {"jawOpen": 0.02, ...}},
      "a": {...}, "u": {...}, "i": {...}
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .errors import IncompleteCalibrationError
from .landmarks import landmarks_from_id_map

logger = logging.getLogger(__name__)

REQUIRED_CALIBRATION_KEYS = ("neutral", "a", "u", "i")


@dataclass
class CapturedFrame:
    """One calibration capture: sparse landmarks and blendshape scores."""
    landmarks: Dict[int, NDArray[np.float64]]
    blendshapes: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CapturedFrame":
        landmarks = {
            int(key): v3.as_vec3(coords)
            for key, coords in (data.get("landmarks") or {}).items()
        }
        blendshapes = {
            str(name): float(score)
            for name, score in (data.get("blendshapes") or {}).items()
        }
        return cls(landmarks=landmarks, blendshapes=blendshapes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "landmarks": {
                str(idx): [float(c) for c in coords]
                for idx, coords in self.landmarks.items()
            },
            "blendshapes": dict(self.blendshapes),
        }


@dataclass
class CalibrationRecord:
    """Neutral plus three reference-vowel captures for one user."""
    neutral: CapturedFrame
    a: CapturedFrame
    u: CapturedFrame
    i: CapturedFrame

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalibrationRecord":
        """
        Parse a calibration mapping.

        Raises:
            IncompleteCalibrationError: If neutral, a, u or i is missing
        """
        missing = [key for key in REQUIRED_CALIBRATION_KEYS if not data.get(key)]
        if missing:
            raise IncompleteCalibrationError(missing)

        record = cls(**{
            key: CapturedFrame.from_dict(data[key])
            for key in REQUIRED_CALIBRATION_KEYS
        })
        logger.debug(
            "Loaded calibration record: %s",
            {key: len(record.capture(key).landmarks) for key in REQUIRED_CALIBRATION_KEYS},
        )
        return record

    @classmethod
    def from_json(cls, filepath: Union[str, Path]) -> "CalibrationRecord":
        """
        Load a calibration record from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist
            IncompleteCalibrationError: If a required capture is missing
        """
        with open(Path(filepath), 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {key: self.capture(key).to_dict() for key in REQUIRED_CALIBRATION_KEYS}

    def capture(self, key: str) -> CapturedFrame:
        """Return the capture stored under neutral, a, u or i."""
        if key not in REQUIRED_CALIBRATION_KEYS:
            raise KeyError(key)
        return getattr(self, key)

    def neutral_landmark_array(self) -> NDArray[np.float64]:
        """Dense landmark array of the neutral capture, NaN where absent."""
        return landmarks_from_id_map(self.neutral.landmarks)


CalibrationInput = Union[CalibrationRecord, Mapping[str, Any]]


def as_calibration_record(calibration: CalibrationInput) -> CalibrationRecord:
    """Pass a CalibrationRecord through, parse anything else with from_dict."""
    if isinstance(calibration, CalibrationRecord):
        return calibration
    return CalibrationRecord.from_dict(calibration)
