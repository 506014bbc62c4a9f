"""
Builds DetectionSnapshots from hand-tracker output.

The engine never talks to a tracker directly. These helpers turn what a
MediaPipe-style tracker delivers per frame (``multi_hand_landmarks`` plus
``multi_handedness``) or a recorded JSON frame into a DetectionSnapshot.
Hands that cannot be read are dropped here with a warning; the rest of
the frame is kept.
"""

import logging
from typing import List, Optional

from media_gestures.core.types import (
    DetectionSnapshot, GestureEngineError, HandObservation, MalformedObservationError,
)
from media_gestures.modules.detection.landmark_extractor import make_observation

logger = logging.getLogger(__name__)

MAX_HANDS = 2
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480


def _surface_size(value, default: int, name: str) -> int:
    """Positive pixel size, or ``default`` when missing or unusable."""
    if value is None:
        return default
    try:
        size = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Bad %s %r, using %d", name, value, default)
        return default
    if size <= 0:
        logger.warning("Bad %s %r, using %d", name, value, default)
        return default
    return size


def _handedness_label(entry) -> Optional[str]:
    """Extract a label from the shapes trackers use for handedness.

    Accepts a plain label, ``{"label": ...}``, an object with ``.label``,
    or a MediaPipe ClassificationList (``.classification[0].label``).
    """
    if entry is None or isinstance(entry, str):
        return entry
    if isinstance(entry, dict):
        if "label" in entry:
            return entry["label"]
        if "categoryName" in entry:
            return entry["categoryName"]
        return None
    if hasattr(entry, "classification"):
        classes = entry.classification
        return classes[0].label if classes else None
    if isinstance(entry, (list, tuple)):
        return _handedness_label(entry[0]) if entry else None
    return getattr(entry, "label", getattr(entry, "category_name", None))


def snapshot_from_results(
    multi_hand_landmarks,
    multi_handedness=None,
    image_width: int = DEFAULT_WIDTH,
    image_height: int = DEFAULT_HEIGHT,
) -> DetectionSnapshot:
    """Convert one frame of tracker output into a DetectionSnapshot.

    Args:
        multi_hand_landmarks: per-hand landmark lists (or None for no hands)
        multi_handedness: per-hand handedness entries aligned by index
        image_width: detection surface width in pixels
        image_height: detection surface height in pixels

    Returns:
        Unmirrored DetectionSnapshot with every readable hand
    """
    hands: List[HandObservation] = []
    multi_hand_landmarks = multi_hand_landmarks or []
    multi_handedness = multi_handedness or []

    for i, landmarks in enumerate(multi_hand_landmarks):
        label = _handedness_label(multi_handedness[i]) if i < len(multi_handedness) else None
        try:
            hands.append(make_observation(landmarks, label))
        except GestureEngineError as e:
            logger.warning("Dropping hand %d: %s", i, e)

    if len(hands) > MAX_HANDS:
        logger.warning("Tracker reported %d hands, keeping the first %d", len(hands), MAX_HANDS)
        hands = hands[:MAX_HANDS]

    return DetectionSnapshot(
        tuple(hands),
        _surface_size(image_width, DEFAULT_WIDTH, "width"),
        _surface_size(image_height, DEFAULT_HEIGHT, "height"),
    )


def snapshot_from_mediapipe(
    results,
    image_width: int = DEFAULT_WIDTH,
    image_height: int = DEFAULT_HEIGHT,
) -> DetectionSnapshot:
    """Convert a MediaPipe Hands ``process()`` result object."""
    return snapshot_from_results(
        getattr(results, "multi_hand_landmarks", None),
        getattr(results, "multi_handedness", None),
        image_width,
        image_height,
    )


def snapshot_from_dict(frame: dict) -> DetectionSnapshot:
    """Convert a recorded frame.

    Format::

        {"width": 640, "height": 480,
         "hands": [{"handedness": "Left", "landmarks": [[x, y, z], ...]}]}

    Hand entries that are not objects are dropped with a warning; a
    missing or unusable size falls back to 640x480.

    Raises:
        MalformedObservationError: ``frame`` is not a mapping or ``hands`` is not a list
    """
    if not isinstance(frame, dict):
        raise MalformedObservationError(f"Frame must be an object, got {type(frame).__name__}")
    hands = frame.get("hands") or []
    if not isinstance(hands, list):
        raise MalformedObservationError(f"\"hands\" must be a list, got {type(hands).__name__}")

    entries = []
    for i, h in enumerate(hands):
        if not isinstance(h, dict):
            logger.warning("Dropping hand %d: expected an object, got %s", i, type(h).__name__)
            continue
        entries.append(h)

    return snapshot_from_results(
        [h.get("landmarks") for h in entries],
        [h.get("handedness") for h in entries],
        frame.get("width"),
        frame.get("height"),
    )
