"""
Target mouth shapes for Korean vowels.

Three vowels are captured directly during calibration and serve as basis
deformations away from the neutral pose:

    open   - ㅏ (a): jaw opening
    round  - ㅜ (u): lip rounding
    spread - ㅣ (i): lip spreading

Calibrated vowels (including the y-glide endpoints ㅑ and ㅠ) are read
straight from the captures. Every other supported vowel is a fixed linear
combination of the three deltas from neutral:

    target[id] = neutral[id] + open * (a[id] - neutral[id])
                             + round * (u[id] - neutral[id])
                             + spread * (i[id] - neutral[id])

Coefficients are hand-authored from articulatory phonetics, not fitted.
Negative or >1 coefficients extrapolate past the captured poses.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .calibration import CalibrationInput, as_calibration_record
from .errors import MissingLandmarkError, UnknownVowelError
from .landmarks import LOWER_LIP_CENTER, MOUTH_LANDMARKS, UPPER_LIP_CENTER

logger = logging.getLogger(__name__)

TargetShape = Dict[int, NDArray[np.float64]]


@dataclass(frozen=True)
class Coeffs:
    """Weights of the open/round/spread basis deformations."""
    open: float
    round: float
    spread: float


# Vowels read directly from a calibration capture
CALIBRATED_VOWELS = {
    'ㅏ': 'a',
    'ㅑ': 'a',  # [ja] static endpoint ≈ ㅏ
    'ㅜ': 'u',
    'ㅠ': 'u',  # [ju] static endpoint ≈ ㅜ
    'ㅣ': 'i',
}

VOWEL_COEFFS = {
    'ㅓ': Coeffs(open=0.75, round=0.5, spread=0.15),    # [ʌ] mid-low back unrounded
    'ㅔ': Coeffs(open=0.4, round=0.0, spread=0.7),      # [e̞] mid front unrounded
    'ㅐ': Coeffs(open=0.4, round=0.0, spread=0.7),      # [ɛ], merged with ㅔ for most speakers
    'ㅗ': Coeffs(open=0.35, round=0.85, spread=-0.15),  # [o] mid-high back rounded
    'ㅛ': Coeffs(open=0.35, round=0.85, spread=-0.15),  # [jo] static endpoint ≈ ㅗ
    'ㅡ': Coeffs(open=0.2, round=0.0, spread=0.8),      # [ɯ] high back unrounded
    'ㅕ': Coeffs(open=0.75, round=0.5, spread=0.15),    # [jʌ] static endpoint ≈ ㅓ
}

SUPPORTED_VOWELS = sorted(set(CALIBRATED_VOWELS) | set(VOWEL_COEFFS))

# Vowels covered by precompute_all_target_vowels()
PRECOMPUTE_VOWELS = ['ㅏ', 'ㅑ', 'ㅓ', 'ㅕ', 'ㅗ', 'ㅛ', 'ㅜ', 'ㅠ', 'ㅡ', 'ㅣ']

PRECOMPUTED_FORMAT_VERSION = "1.0.0"


def build_target_vowel_shape(
    vowel: str,
    calibration: CalibrationInput
) -> TargetShape:
    """
    Build the target lip shape for a vowel.

    Pure function of its inputs; nothing is cached.

    Args:
        vowel: Vowel jamo, e.g. 'ㅏ' or 'ㅔ'
        calibration: CalibrationRecord, or a mapping accepted by
                     CalibrationRecord.from_dict

    Returns:
        Map from lip landmark id to a new (3,) point

    Raises:
        UnknownVowelError: If the vowel is not supported
        IncompleteCalibrationError: If a required capture is missing
    """
    if vowel not in CALIBRATED_VOWELS and vowel not in VOWEL_COEFFS:
        raise UnknownVowelError(vowel)

    record = as_calibration_record(calibration)
    shape: TargetShape = {}

    if vowel in CALIBRATED_VOWELS:
        capture = record.capture(CALIBRATED_VOWELS[vowel]).landmarks
        for idx in MOUTH_LANDMARKS:
            if idx not in capture:
                logger.warning("Missing calibration data for landmark %d", idx)
                continue
            shape[idx] = capture[idx].copy()
        return shape

    coeffs = VOWEL_COEFFS[vowel]
    neutral = record.neutral.landmarks
    open_ = record.a.landmarks
    round_ = record.u.landmarks
    spread = record.i.landmarks

    for idx in MOUTH_LANDMARKS:
        if not all(idx in capture for capture in (neutral, open_, round_, spread)):
            logger.warning("Missing calibration data for landmark %d", idx)
            continue

        base = neutral[idx]
        shape[idx] = (
            base
            + coeffs.open * (open_[idx] - base)
            + coeffs.round * (round_[idx] - base)
            + coeffs.spread * (spread[idx] - base)
        )

    return shape


def mouth_center_of(shape: TargetShape) -> NDArray[np.float64]:
    """
    Intrinsic mouth center of a target shape.

    Midpoint of the shape's own upper/lower lip center landmarks. Distinct
    from the live mouth center of any frame.

    Raises:
        MissingLandmarkError: If the shape lacks either lip center
    """
    missing = [i for i in (UPPER_LIP_CENTER, LOWER_LIP_CENTER) if i not in shape]
    if missing:
        raise MissingLandmarkError(missing, context="target shape")
    return v3.midpoint(shape[UPPER_LIP_CENTER], shape[LOWER_LIP_CENTER])


# =============================================================================
# Precomputation
# =============================================================================

@dataclass
class PrecomputedTargets:
    """Target shapes for every vowel, computed once after calibration."""
    calibrated_at: str
    version: str
    vowels: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping with landmark ids as string keys."""
        vowels = {}
        for vowel, entry in self.vowels.items():
            vowels[vowel] = {
                "landmarks": {
                    str(idx): {"x": float(p[0]), "y": float(p[1]), "z": float(p[2])}
                    for idx, p in entry["landmarks"].items()
                },
                "blendshapes": dict(entry.get("blendshapes", {})),
            }
        return {
            "calibratedAt": self.calibrated_at,
            "version": self.version,
            "vowels": vowels,
        }


def precompute_all_target_vowels(
    calibration: CalibrationInput,
    vowels: Optional[List[str]] = None
) -> PrecomputedTargets:
    """
    Compute the target shape of every vowel up front.

    A vowel that fails to build is logged and stored with empty landmarks.

    Raises:
        IncompleteCalibrationError: If a required capture is missing
    """
    record = as_calibration_record(calibration)
    vowel_list = PRECOMPUTE_VOWELS if vowels is None else vowels

    results: Dict[str, Dict[str, Any]] = {}
    for vowel in vowel_list:
        try:
            shape = build_target_vowel_shape(vowel, record)
        except UnknownVowelError as e:
            logger.error("Failed to compute target for %s: %s", vowel, e)
            results[vowel] = {"landmarks": {}, "blendshapes": {}}
            continue

        blendshapes = {}
        if vowel in CALIBRATED_VOWELS:
            blendshapes = dict(record.capture(CALIBRATED_VOWELS[vowel]).blendshapes)

        results[vowel] = {"landmarks": shape, "blendshapes": blendshapes}
        logger.debug("Computed target for %s (%d landmarks)", vowel, len(shape))

    logger.info("Precomputed targets for %d vowels", len(vowel_list))
    return PrecomputedTargets(
        calibrated_at=datetime.now(timezone.utc).isoformat(),
        version=PRECOMPUTED_FORMAT_VERSION,
        vowels=results,
    )


# =============================================================================
# Hangul vowel extraction
# =============================================================================

_HANGUL_BASE = 0xAC00
_HANGUL_LAST = 0xD7A3
_JUNGSEONG_COUNT = 21
_JONGSEONG_COUNT = 28
_COMPAT_VOWEL_BASE = 0x314F


def extract_vowel(syllable: str) -> Optional[str]:
    """
    Medial vowel of a precomposed Hangul syllable, as a compatibility jamo.

    '가' -> 'ㅏ', '의' -> 'ㅢ'. A bare vowel jamo is returned unchanged.
    Anything else gives None.
    """
    if len(syllable) != 1:
        return None

    code = ord(syllable)
    if _COMPAT_VOWEL_BASE <= code < _COMPAT_VOWEL_BASE + _JUNGSEONG_COUNT:
        return syllable
    if not _HANGUL_BASE <= code <= _HANGUL_LAST:
        return None

    # Compatibility vowels U+314F..U+3163 follow the medial index order
    medial_index = ((code - _HANGUL_BASE) // _JONGSEONG_COUNT) % _JUNGSEONG_COUNT
    return chr(_COMPAT_VOWEL_BASE + medial_index)


def extract_vowels(sentence: str) -> List[Optional[str]]:
    """extract_vowel() for every non-space character."""
    return [extract_vowel(ch) for ch in sentence if ch != ' ']
