"""
Per-hand pinch state machine.

Thumb-index contact serves two purposes depending on how long it lasts:

    - Hold and move (longer than ``pinch_min_hold_ms``): continuous drag.
      The right hand sets volume, the left hand scrubs playback. Values are
      computed as an absolute offset from the anchor captured at contact,
      not as per-frame increments.
    - Quick contact (shorter than ``tap_max_duration_ms``): a tap. Two taps
      from the same hand within ``double_tap_window_ms`` (release to
      release) fire a coarse seek, left back and right forward.

States per hand: Inactive -> Active(anchor) -> Inactive.

Drag adjustments are not cooldown-gated; the double-tap seek is a discrete
action and goes through the shared cooldown clock.
"""

import math
import logging
from typing import List

from media_gestures.core.types import (
    Command, Hand, MediaAction, MediaSnapshot, PinchAnchor, PinchState,
)
from media_gestures.modules.control.cooldown import CooldownClock
from media_gestures.modules.detection.landmark_extractor import pinch_metrics
from media_gestures.modules.utils.config import EngineConfig

logger = logging.getLogger(__name__)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_seek(target: float, duration: float) -> float:
    """Clamp a seek target to [0, duration]; an unknown duration leaves it open above."""
    upper = duration if math.isfinite(duration) else math.inf
    return clamp(target, 0.0, upper)


class PinchTracker:
    """Stateless transition logic; the caller owns the PinchState and tap clocks."""

    def __init__(self, config: EngineConfig = None):
        self._config = config or EngineConfig()

    def update(
        self,
        hand: Hand,
        pinch: PinchState,
        tap_clock: dict,
        cooldown: CooldownClock,
        landmarks,
        media: MediaSnapshot,
        now: float,
        width: int,
        height: int,
    ) -> List[Command]:
        """Advance one hand's pinch by one frame.

        Mutates ``pinch``, ``tap_clock[hand]`` and ``cooldown`` in place.

        Returns:
            Commands produced this frame (zero or one)
        """
        dist, cx = pinch_metrics(landmarks, width, height)

        if dist < self._config.pinch_threshold_px:
            if not pinch.active:
                pinch.engage(PinchAnchor(
                    cx=cx, t=now, media_time=media.current_time, volume=media.volume,
                ))
                logger.debug("Pinch engaged: %s at cx=%.1f", hand.value, cx)
                return []
            commands = self._drag(hand, pinch, cx, media, now)
            pinch.last_cx = cx
            return commands

        if pinch.active:
            return self._release(hand, pinch, tap_clock, cooldown, media, now)
        return []

    def _drag(self, hand: Hand, pinch: PinchState, cx: float,
              media: MediaSnapshot, now: float) -> List[Command]:
        anchor = pinch.anchor
        if now - anchor.t <= self._config.pinch_min_hold_ms:
            return []

        dx = cx - anchor.cx
        if hand is Hand.RIGHT:
            volume = clamp(anchor.volume + dx * self._config.volume_sensitivity, 0.0, 1.0)
            return [Command(
                MediaAction.SET_VOLUME, volume, hand,
                gesture="pinch_drag",
                message=f"Volume {round(volume * 100)}%", icon="🔊",
            )]

        target = clamp_seek(anchor.media_time + dx * self._config.seek_sensitivity, media.duration)
        return [Command(
            MediaAction.SEEK_TO, target, hand,
            gesture="pinch_drag",
            message=f"Seek {round(target)}s", icon="⏩",
        )]

    def _release(self, hand: Hand, pinch: PinchState, tap_clock: dict,
                 cooldown: CooldownClock, media: MediaSnapshot, now: float) -> List[Command]:
        commands = []
        duration = now - pinch.anchor.t

        if duration < self._config.tap_max_duration_ms:
            last_tap = tap_clock.get(hand, 0.0)
            if (last_tap and now - last_tap < self._config.double_tap_window_ms
                    and cooldown.elapsed(now)):
                commands.append(self._coarse_seek(hand, media))
                cooldown.mark_fired(now)
                tap_clock[hand] = 0.0
                logger.debug("Double tap: %s", hand.value)
            else:
                tap_clock[hand] = now
                logger.debug("Tap armed: %s at %.0f", hand.value, now)

        pinch.clear()
        return commands

    def _coarse_seek(self, hand: Hand, media: MediaSnapshot) -> Command:
        step = self._config.coarse_seek_seconds
        if hand is Hand.LEFT:
            target = max(0.0, media.current_time - step)
            return Command(MediaAction.SEEK_TO, target, hand, gesture="double_tap",
                           message=f"-{step:g} Seconds", icon="⏪")
        target = clamp_seek(media.current_time + step, media.duration)
        return Command(MediaAction.SEEK_TO, target, hand, gesture="double_tap",
                       message=f"+{step:g} Seconds", icon="⏩")

    @staticmethod
    def force_release(pinch: PinchState) -> bool:
        """Drop an active pinch without tap side effects.

        Returns:
            True if a pinch was active
        """
        if not pinch.active:
            return False
        pinch.clear()
        return True

    @property
    def config(self) -> EngineConfig:
        return self._config
