"""
MediaPipe Face Mesh landmark id scheme and landmark sample ingestion.

The geometry core indexes a dense MediaPipe face mesh sample (468 points, or
478 with the refined iris model). Coordinates are normalized: x to image
width, y to image height, z a relative depth of roughly the same scale as x.

Ids used to build the head coordinate frame:
    1:   Nose tip
    10:  Forehead center
    13:  Upper lip center (inner contour)
    14:  Lower lip center (inner contour)
    133: Left eye, inner corner
    362: Right eye, inner corner

The lip contours are 20 points each, listed in drawing order.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from . import vector3d as v3
from .errors import MissingLandmarkError

logger = logging.getLogger(__name__)


# =============================================================================
# Landmark ids
# =============================================================================

NOSE_TIP = 1
FOREHEAD_CENTER = 10
UPPER_LIP_CENTER = 13
LOWER_LIP_CENTER = 14
LEFT_EYE_INNER = 133
RIGHT_EYE_INNER = 362

FACE_ANCHORS = [NOSE_TIP, FOREHEAD_CENTER, LEFT_EYE_INNER, RIGHT_EYE_INNER]

OUTER_LIP_LANDMARKS = [
    61, 185, 40, 39, 37, 0, 267, 269, 270, 409,
    291, 375, 321, 405, 314, 17, 84, 181, 91, 146,
]

INNER_LIP_LANDMARKS = [
    78, 191, 80, 81, 82, 13, 312, 311, 310, 415,
    308, 324, 318, 402, 317, 14, 87, 178, 88, 95,
]

MOUTH_LANDMARKS = OUTER_LIP_LANDMARKS + INNER_LIP_LANDMARKS

ALL_TRACKED_LANDMARKS = FACE_ANCHORS + MOUTH_LANDMARKS

# Every id needed to build a coordinate frame from one sample
FRAME_LANDMARKS = [
    NOSE_TIP, FOREHEAD_CENTER, UPPER_LIP_CENTER, LOWER_LIP_CENTER,
    LEFT_EYE_INNER, RIGHT_EYE_INNER,
]

MEDIAPIPE_LANDMARK_COUNT = 468
MEDIAPIPE_REFINED_LANDMARK_COUNT = 478

# A live sample must reach the largest id the core indexes
REQUIRED_SAMPLE_LENGTH = max(ALL_TRACKED_LANDMARKS) + 1


LandmarkInput = Union[NDArray[np.float64], Sequence[Any]]


def as_landmark_array(
    landmarks: LandmarkInput,
    min_length: int = REQUIRED_SAMPLE_LENGTH
) -> NDArray[np.float64]:
    """
    Convert a live landmark sample to a float64 array of shape (N, 3).

    Accepts an (N, 2) or (N, 3) array-like, or a list of {x, y, z} records as
    delivered by MediaPipe's JavaScript/Python result objects converted to
    dicts. Missing z becomes 0.

    Args:
        landmarks: Landmark sample
        min_length: Minimum number of points the sample must contain

    Returns:
        New (N, 3) float64 array

    Raises:
        ValueError: If the shape is wrong or the sample is too short
    """
    if len(landmarks) > 0 and isinstance(landmarks[0], Mapping):
        lm = np.array([v3.as_vec3(p) for p in landmarks], dtype=np.float64)
    else:
        lm = np.array(landmarks, dtype=np.float64)

    if lm.ndim != 2 or lm.shape[1] not in (2, 3):
        raise ValueError(
            f"Expected landmarks shape (N, 2) or (N, 3), got {lm.shape}"
        )

    if lm.shape[1] == 2:
        lm = np.hstack([lm, np.zeros((lm.shape[0], 1), dtype=np.float64)])

    if lm.shape[0] < min_length:
        raise ValueError(
            f"Landmark sample requires at least {min_length} points, "
            f"got {lm.shape[0]}"
        )

    return lm


def landmarks_from_id_map(
    landmark_map: Mapping[Any, v3.Vec3Like],
    length: int = MEDIAPIPE_REFINED_LANDMARK_COUNT,
    required: Sequence[int] = tuple(FRAME_LANDMARKS),
) -> NDArray[np.float64]:
    """
    Expand a sparse {landmark_id: [x, y, z]} map into a dense (length, 3) array.

    Ids absent from the map are filled with NaN so that accidental use shows
    up instead of silently reading zeros.

    Raises:
        MissingLandmarkError: If any id in `required` is absent
    """
    dense = np.full((length, 3), np.nan, dtype=np.float64)
    for key, coords in landmark_map.items():
        idx = int(key)
        if 0 <= idx < length:
            dense[idx] = v3.as_vec3(coords)

    missing = [i for i in required if np.isnan(dense[i]).any()]
    if missing:
        raise MissingLandmarkError(missing, context="landmark map")

    return dense


def find_mouth_center(landmarks: NDArray[np.float64]) -> NDArray[np.float64]:
    """Midpoint of the upper and lower lip center landmarks."""
    return v3.midpoint(landmarks[UPPER_LIP_CENTER], landmarks[LOWER_LIP_CENTER])


def load_landmark_frames(filepath: Union[str, Path]) -> List[NDArray[np.float64]]:
    """
    Load a sequence of landmark samples from a JSON file.

    Supported JSON formats:
    - {"source": "mediapipe", "frames": [[[x, y, z], ...], ...]}
    - {"source": "mediapipe", "landmarks": [[x, y, z], ...]}  (single frame)

    Args:
        filepath: Path to JSON file

    Returns:
        List of (N, 3) float64 arrays, one per frame

    Raises:
        ValueError: If the format is unrecognized or a frame is invalid
        FileNotFoundError: If the file does not exist
    """
    filepath = Path(filepath)
    with open(filepath, 'r') as f:
        data = json.load(f)

    source = data.get("source", "").lower()
    if source != "mediapipe":
        raise ValueError(
            f"Unsupported face landmark source: '{source}' in {filepath}. "
            f"Supported: 'mediapipe'"
        )

    if "frames" in data:
        raw_frames = data["frames"]
    elif "landmarks" in data:
        raw_frames = [data["landmarks"]]
    else:
        raise ValueError(
            f"MediaPipe JSON missing 'frames' or 'landmarks' field in {filepath}"
        )

    logger.debug("Loading %d landmark frames from %s", len(raw_frames), filepath)
    return [as_landmark_array(frame) for frame in raw_frames]
