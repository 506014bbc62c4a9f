"""
Shared domain types for the touchless media gesture engine.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np


NUM_LANDMARKS = 21


# =============================================================================
# Errors
# =============================================================================

class GestureEngineError(ValueError):
    """Base error for invalid input reaching the gesture engine."""


class MalformedObservationError(GestureEngineError):
    """A hand observation does not carry a usable 21-point landmark set."""


class ConfigError(GestureEngineError):
    """A configuration value cannot be interpreted."""


# =============================================================================
# Hand / Pose Types
# =============================================================================

class Hand(Enum):
    """Hand identity as reported by the tracker."""
    LEFT = "Left"
    RIGHT = "Right"

    @property
    def mirrored(self) -> 'Hand':
        return Hand.RIGHT if self is Hand.LEFT else Hand.LEFT

    @classmethod
    def from_label(cls, label) -> 'Hand':
        """Parse an upstream handedness label.

        A missing label is reported as ``Right``, matching what the tracker
        assumes when it has no classification for a hand.
        """
        if isinstance(label, Hand):
            return label
        if label is None:
            return cls.RIGHT
        try:
            return cls(str(label).strip().capitalize())
        except ValueError:
            raise MalformedObservationError(f"Unknown handedness label: {label!r}")


class PoseClass(Enum):
    """Discrete hand-shape classification for one frame."""
    FIST = "fist"
    OPEN_HAND = "open_hand"
    INDETERMINATE = "indeterminate"


class MediaAction(Enum):
    """All commands the engine can send to a media target."""
    PLAY = "play"
    PAUSE = "pause"
    SET_VOLUME = "set_volume"
    SEEK_TO = "seek_to"
    TOGGLE_FULLSCREEN = "toggle_fullscreen"

    @property
    def is_discrete(self) -> bool:
        return self in (MediaAction.PLAY, MediaAction.PAUSE, MediaAction.TOGGLE_FULLSCREEN)


# =============================================================================
# Data Containers
# =============================================================================

@dataclass(frozen=True)
class LandmarkPoint:
    """A single landmark with normalized x, y and relative depth z."""
    x: float
    y: float
    z: float = 0.0

    def to_pixel(self, width: int, height: int) -> Tuple[float, float]:
        return (self.x * width, self.y * height)


@dataclass(frozen=True, eq=False)
class HandObservation:
    """One hand's landmarks and handedness for a single frame.

    ``landmarks`` is a read-only (21, 3) float array of normalized
    coordinates. Use ``modules.detection.landmark_extractor`` to build one
    from raw tracker output; this constructor does not validate.
    """
    landmarks: np.ndarray
    hand: Hand

    def point(self, index: int) -> LandmarkPoint:
        x, y, z = self.landmarks[index]
        return LandmarkPoint(float(x), float(y), float(z))


@dataclass(frozen=True)
class DetectionSnapshot:
    """Zero, one or two hands detected in one frame tick.

    ``image_width``/``image_height`` give the detection surface size used
    to scale pinch distances into pixels. ``mirrored`` records whether the
    mirror adapter has already been applied.
    """
    hands: Tuple[HandObservation, ...] = ()
    image_width: int = 640
    image_height: int = 480
    mirrored: bool = False

    @property
    def hand_count(self) -> int:
        return len(self.hands)

    @property
    def is_empty(self) -> bool:
        return not self.hands


@dataclass(frozen=True)
class MediaSnapshot:
    """Read-only view of a media target captured at the start of a frame."""
    current_time: float = 0.0
    volume: float = 1.0
    duration: float = float("nan")
    paused: bool = True

    @classmethod
    def from_target(cls, target) -> 'MediaSnapshot':
        return cls(
            current_time=float(target.current_time),
            volume=float(target.volume),
            duration=float(target.duration),
            paused=bool(target.paused),
        )


@dataclass(frozen=True)
class Command:
    """A single media command produced by the evaluator.

    Seek and volume commands carry absolute, already-clamped values.
    """
    action: MediaAction
    value: Optional[float] = None
    hand: Optional[Hand] = None
    gesture: str = ""
    message: str = ""
    icon: str = ""

    def __repr__(self):
        value = "" if self.value is None else f", value={self.value:.3f}"
        return f"Command({self.action.value}{value}, gesture={self.gesture or 'none'})"


@dataclass(frozen=True)
class PinchAnchor:
    """Reference captured when a pinch engages."""
    cx: float
    t: float
    media_time: float
    volume: float


@dataclass
class PinchState:
    """Per-hand pinch state. ``anchor`` is set iff ``active``."""
    active: bool = False
    anchor: Optional[PinchAnchor] = None
    last_cx: Optional[float] = None

    def engage(self, anchor: PinchAnchor):
        self.active = True
        self.anchor = anchor
        self.last_cx = anchor.cx

    def clear(self):
        self.active = False
        self.anchor = None
        self.last_cx = None

    def copy(self) -> 'PinchState':
        return PinchState(self.active, self.anchor, self.last_cx)
