"""
21-point hand landmark validation, pixel scaling and mirroring.

Landmarks arrive from the tracker in the camera's frame of reference. The
preview the user watches is mirrored, so both the x coordinates and the
handedness label are flipped together before any other logic looks at a
hand. Flipping one without the other mislabels every hand.
"""

import math
import logging
import numpy as np

from media_gestures.core.types import (
    DetectionSnapshot, Hand, HandObservation, MalformedObservationError, NUM_LANDMARKS,
)

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

# Non-thumb fingers: (tip, pip) pairs used for extension checks
FINGER_TIP_PIP = {
    "index":  (INDEX_TIP, INDEX_PIP),
    "middle": (MIDDLE_TIP, MIDDLE_PIP),
    "ring":   (RING_TIP, RING_PIP),
    "pinky":  (PINKY_TIP, PINKY_PIP),
}


# =========================================================================
# Validation
# =========================================================================

def _point_to_xyz(point) -> tuple:
    """Accept MediaPipe landmark objects, {x, y, z} dicts or sequences."""
    if isinstance(point, dict):
        return (point["x"], point["y"], point.get("z", 0.0))
    if hasattr(point, "x") and hasattr(point, "y"):
        return (point.x, point.y, getattr(point, "z", 0.0))
    values = tuple(point)
    if len(values) == 2:
        return (values[0], values[1], 0.0)
    return values


def to_landmark_array(landmarks) -> np.ndarray:
    """Convert raw landmarks into a read-only (21, 3) float array.

    Raises:
        MalformedObservationError: wrong point count, shape or non-finite values
    """
    if hasattr(landmarks, "landmark"):
        landmarks = landmarks.landmark

    if landmarks is None:
        raise MalformedObservationError("Missing landmarks")
    if isinstance(landmarks, np.ndarray):
        points = landmarks
    else:
        try:
            points = [_point_to_xyz(p) for p in landmarks]
        except (KeyError, TypeError) as e:
            raise MalformedObservationError(f"Unreadable landmark: {e}")
    try:
        arr = np.array(points, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise MalformedObservationError(f"Non-numeric landmark data: {e}")

    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] not in (2, 3):
        raise MalformedObservationError(
            f"Expected {NUM_LANDMARKS} landmarks of (x, y, z), got shape {arr.shape}"
        )
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((NUM_LANDMARKS, 1))])
    if not np.all(np.isfinite(arr)):
        raise MalformedObservationError("Landmark coordinates must be finite")

    arr.setflags(write=False)
    return arr


def make_observation(landmarks, handedness=None) -> HandObservation:
    """Build a validated HandObservation from raw tracker output."""
    return HandObservation(to_landmark_array(landmarks), Hand.from_label(handedness))


def validate_observation(observation: HandObservation) -> HandObservation:
    """Re-validate an observation that may have been built without checks."""
    if not isinstance(observation, HandObservation):
        raise MalformedObservationError(f"Not a hand observation: {type(observation).__name__}")
    if not isinstance(observation.hand, Hand):
        raise MalformedObservationError(f"Invalid hand identity: {observation.hand!r}")
    landmarks = observation.landmarks
    if (isinstance(landmarks, np.ndarray) and landmarks.shape == (NUM_LANDMARKS, 3)
            and not landmarks.flags.writeable and np.isfinite(landmarks).all()):
        return observation
    return HandObservation(to_landmark_array(landmarks), observation.hand)


# =========================================================================
# Mirror Adapter
# =========================================================================

def mirror_landmarks(landmarks: np.ndarray) -> np.ndarray:
    """Flip x around the vertical axis: x' = 1 - x, y and z unchanged."""
    mirrored = np.array(landmarks, dtype=np.float64)
    mirrored[:, 0] = 1.0 - mirrored[:, 0]
    mirrored.setflags(write=False)
    return mirrored


def mirror_observation(observation: HandObservation) -> HandObservation:
    """Mirror landmarks and identity together."""
    return HandObservation(mirror_landmarks(observation.landmarks), observation.hand.mirrored)


def mirror_snapshot(snapshot: DetectionSnapshot) -> DetectionSnapshot:
    """Mirror every hand in a snapshot. Applying it twice is the identity."""
    return DetectionSnapshot(
        hands=tuple(mirror_observation(h) for h in snapshot.hands),
        image_width=snapshot.image_width,
        image_height=snapshot.image_height,
        mirrored=not snapshot.mirrored,
    )


# =========================================================================
# Geometry
# =========================================================================

def to_pixel_coords(landmarks: np.ndarray, width: int, height: int) -> np.ndarray:
    """Scale normalized landmarks to the detection surface.

    Returns:
        np.ndarray of shape (N, 2) with float pixel x, y
    """
    pixels = np.empty((landmarks.shape[0], 2), dtype=np.float64)
    pixels[:, 0] = landmarks[:, 0] * width
    pixels[:, 1] = landmarks[:, 1] * height
    return pixels


def pinch_metrics(landmarks: np.ndarray, width: int, height: int) -> tuple:
    """Thumb-tip to index-tip distance and their midpoint x, both in pixels.

    Returns:
        (dist, cx)
    """
    pixels = to_pixel_coords(landmarks[[THUMB_TIP, INDEX_TIP]], width, height)
    thumb, index = pixels
    dist = math.hypot(thumb[0] - index[0], thumb[1] - index[1])
    cx = (thumb[0] + index[0]) / 2.0
    return float(dist), float(cx)
