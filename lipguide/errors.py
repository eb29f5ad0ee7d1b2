"""
Error types raised by the lipguide geometry core.

All errors are local and synchronous: they are raised by the operation that
detects them and are never retried internally. Callers skip the overlay for
the failing frame and retry with the next landmark sample.

Every error also subclasses ValueError.
"""

from typing import List, Optional


class LipGuideError(Exception):
    """Base class for all lipguide errors."""


class DegenerateReferenceError(LipGuideError, ValueError):
    """Reference points A and B coincide, so |AB| = 0."""


class DegenerateFrameError(LipGuideError, ValueError):
    """A coordinate frame failed the orthonormality checks."""

    def __init__(self, message: str, violations: Optional[List[str]] = None):
        super().__init__(message)
        self.violations = list(violations or [])


class UnknownVowelError(LipGuideError, ValueError):
    """Vowel is neither calibrated nor present in the coefficient table."""

    def __init__(self, vowel: str):
        super().__init__(f"Unknown vowel: {vowel!r}")
        self.vowel = vowel


class IncompleteCalibrationError(LipGuideError, ValueError):
    """Calibration record is missing one or more required captures."""

    def __init__(self, missing: List[str]):
        super().__init__(
            f"Calibration data is incomplete, missing: {', '.join(missing)}. "
            f"neutral, a, u and i are all required."
        )
        self.missing = list(missing)


class MissingLandmarkError(LipGuideError, ValueError):
    """A landmark id required for the computation is absent."""

    def __init__(self, landmark_ids: List[int], context: str = "landmark data"):
        ids = ", ".join(str(i) for i in landmark_ids)
        super().__init__(f"Required landmarks missing from {context}: {ids}")
        self.landmark_ids = list(landmark_ids)
