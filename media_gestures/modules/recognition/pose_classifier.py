"""
Rule-based pose classification from landmark geometry.

A finger counts as extended when its tip sits above its PIP joint by more
than a small margin (smaller y is higher on screen). The thumb moves
sideways instead, so its test compares tip and IP x coordinates and
depends on which hand it belongs to.
"""

import logging
import numpy as np

from media_gestures.core.types import Hand, MalformedObservationError, NUM_LANDMARKS, PoseClass
from media_gestures.modules.detection.landmark_extractor import (
    FINGER_TIP_PIP, THUMB_IP, THUMB_TIP,
)
from media_gestures.modules.utils.config import EngineConfig

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = EngineConfig()


def _check_landmarks(landmarks) -> np.ndarray:
    arr = np.asarray(landmarks, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] < 2:
        raise MalformedObservationError(
            f"Pose classification needs {NUM_LANDMARKS} landmarks, got shape {arr.shape}"
        )
    return arr


def count_extended_fingers(landmarks, margin: float = 0.02) -> int:
    """Number of extended non-thumb fingers, 0 to 4."""
    arr = _check_landmarks(landmarks)
    return sum(
        1 for tip, pip in FINGER_TIP_PIP.values()
        if arr[tip, 1] < arr[pip, 1] - margin
    )


def is_thumb_extended(landmarks, hand: Hand, margin: float = 0.02) -> bool:
    """Thumb extension for the given (already mirrored) hand identity."""
    arr = _check_landmarks(landmarks)
    tip_x = arr[THUMB_TIP, 0]
    ip_x = arr[THUMB_IP, 0]
    if hand is Hand.RIGHT:
        return bool(tip_x > ip_x + margin)
    return bool(tip_x < ip_x - margin)


def finger_state(landmarks, hand: Hand, config: EngineConfig = None) -> tuple:
    """Return ``(extended_count, thumb_extended)`` for one hand."""
    config = config or _DEFAULT_CONFIG
    ext = count_extended_fingers(landmarks, config.extension_margin)
    thumb = is_thumb_extended(landmarks, hand, config.thumb_margin)
    return ext, thumb


def classify_pose(landmarks, hand: Hand, config: EngineConfig = None) -> PoseClass:
    """Classify one hand as FIST, OPEN_HAND or INDETERMINATE.

    Args:
        landmarks: (21, 3) normalized landmarks, already mirrored
        hand: identity matching the landmarks' mirroring
        config: margins; defaults to EngineConfig()

    Raises:
        MalformedObservationError: landmark set is not 21 points
    """
    ext, thumb = finger_state(landmarks, hand, config)
    if ext == 0 and not thumb:
        return PoseClass.FIST
    if ext == 4 and thumb:
        return PoseClass.OPEN_HAND
    return PoseClass.INDETERMINATE


class PoseClassifier:
    """Config-bound wrapper around ``classify_pose``."""

    def __init__(self, config: EngineConfig = None):
        self._config = config or _DEFAULT_CONFIG

    def classify(self, observation) -> PoseClass:
        pose = classify_pose(observation.landmarks, observation.hand, self._config)
        logger.debug("Pose %s: %s", observation.hand.value, pose.value)
        return pose

    @property
    def config(self) -> EngineConfig:
        return self._config
