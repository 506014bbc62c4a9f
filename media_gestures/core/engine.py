"""
Per-frame gesture evaluation and the engine that drives it.

Architecture:
    DetectionSnapshot -> mirror + validate -> PoseClassifier
    -> discrete rules (two-fist, single open hand) | PinchTracker
    -> Commands -> ActionExecutor -> MediaTarget + NotificationSink

``evaluate()`` is a pure transition ``(state, snapshot, media, config, now)
-> (new_state, commands)``; the input state is never mutated, so the whole
recognizer can be tested without a media target. ``GestureEngine`` owns
the state between frames and applies the commands.

Rule priority per frame (first match returns):
    1. Two hands, one of each identity, both FIST -> toggle (or fullscreen)
    2. One hand, OPEN_HAND -> left plays, right pauses
    3. Pinch pass for every non-FIST hand
Rules 1 and 2 require no active pinch and an elapsed cooldown. A frame
with no hands drops every active pinch without tap side effects.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from media_gestures.core.events import EventBus, Events
from media_gestures.core.types import (
    Command, DetectionSnapshot, GestureEngineError, Hand, MediaAction,
    MediaSnapshot, PinchState, PoseClass,
)
from media_gestures.modules.control.action_executor import ActionExecutor
from media_gestures.modules.control.cooldown import CooldownClock
from media_gestures.modules.detection.landmark_extractor import (
    mirror_observation, validate_observation,
)
from media_gestures.modules.recognition.pinch_tracker import PinchTracker
from media_gestures.modules.recognition.pose_classifier import classify_pose
from media_gestures.modules.utils.config import EngineConfig
from media_gestures.modules.utils.logger import log_timing

logger = logging.getLogger(__name__)


def _both_hands(factory):
    return lambda: {Hand.LEFT: factory(), Hand.RIGHT: factory()}


@dataclass
class EngineState:
    """All mutable engine state, owned by one engine instance.

    ``tap_clock`` maps each hand to the time (ms) of its last unpaired tap
    release; 0 means no tap is pending.
    """
    pinch: dict = field(default_factory=_both_hands(PinchState))
    tap_clock: dict = field(default_factory=_both_hands(float))
    cooldown: CooldownClock = field(default_factory=CooldownClock)
    enabled: bool = True

    @classmethod
    def initial(cls, config: EngineConfig = None) -> 'EngineState':
        config = config or EngineConfig()
        return cls(cooldown=CooldownClock(config.discrete_cooldown_ms))

    @property
    def any_pinch_active(self) -> bool:
        return any(p.active for p in self.pinch.values())

    def copy(self) -> 'EngineState':
        return EngineState(
            pinch={hand: p.copy() for hand, p in self.pinch.items()},
            tap_clock=dict(self.tap_clock),
            cooldown=self.cooldown.copy(),
            enabled=self.enabled,
        )


# =============================================================================
# Pure evaluation
# =============================================================================

def prepare_hands(snapshot: DetectionSnapshot, config: EngineConfig) -> list:
    """Validate and (if configured) mirror every hand; malformed ones are dropped."""
    hands = []
    for i, observation in enumerate(snapshot.hands):
        try:
            observation = validate_observation(observation)
        except GestureEngineError as e:
            logger.debug("Discarding hand %d for this frame: %s", i, e)
            continue
        if config.mirror_input and not snapshot.mirrored:
            observation = mirror_observation(observation)
        hands.append(observation)
    return hands


def release_all(state: EngineState) -> List[Hand]:
    """Drop every active pinch on ``state`` in place; returns the hands released."""
    released = [hand for hand, pinch in state.pinch.items() if PinchTracker.force_release(pinch)]
    if released:
        logger.debug("Pinch dropped without release: %s", ", ".join(h.value for h in released))
    return released


def _two_fist_command(config: EngineConfig, media: MediaSnapshot) -> Command:
    if config.two_fist_action == "fullscreen":
        return Command(MediaAction.TOGGLE_FULLSCREEN, gesture="two_fist",
                       message="Both Fists → Fullscreen", icon="⛶")
    if media.paused:
        return Command(MediaAction.PLAY, gesture="two_fist",
                       message="Both Fists → Play", icon="▶️")
    return Command(MediaAction.PAUSE, gesture="two_fist",
                   message="Both Fists → Pause", icon="⏸️")


def _open_hand_command(hand: Hand) -> Command:
    if hand is Hand.LEFT:
        return Command(MediaAction.PLAY, hand=hand, gesture="open_hand",
                       message="Left Open → Play", icon="▶️")
    return Command(MediaAction.PAUSE, hand=hand, gesture="open_hand",
                   message="Right Open → Pause", icon="⏸️")


def evaluate(
    state: EngineState,
    snapshot: DetectionSnapshot,
    media: Optional[MediaSnapshot],
    config: Optional[EngineConfig],
    now: float,
) -> Tuple[EngineState, List[Command]]:
    """Run one frame of gesture recognition.

    Args:
        state: state after the previous frame (not modified)
        snapshot: hands detected this frame, unmirrored unless flagged
        media: target state at the start of the frame, or None if unbound
        config: thresholds and behavior switches; None for defaults
        now: frame time in milliseconds

    Returns:
        (new_state, commands) with commands in execution order
    """
    config = config or EngineConfig()
    if not state.enabled or media is None:
        return state, []

    new_state = state.copy()
    tracker = PinchTracker(config)
    hands = prepare_hands(snapshot, config)

    # --- No hands: tracking loss is not a release gesture ---
    if not hands:
        release_all(new_state)
        return new_state, []

    # --- Identities that left the frame lose their pinch ---
    present = {observation.hand for observation in hands}
    for hand, pinch in new_state.pinch.items():
        if hand not in present and PinchTracker.force_release(pinch):
            logger.debug("Pinch dropped, %s hand left the frame", hand.value)

    poses = [(observation, classify_pose(observation.landmarks, observation.hand, config))
             for observation in hands]
    any_pinch = new_state.any_pinch_active
    cooldown = new_state.cooldown

    # --- 1. Both fists ---
    if len(poses) == 2 and not any_pinch and cooldown.elapsed(now):
        by_hand = {observation.hand: pose for observation, pose in poses}
        if (by_hand.get(Hand.LEFT) is PoseClass.FIST
                and by_hand.get(Hand.RIGHT) is PoseClass.FIST):
            cooldown.mark_fired(now)
            return new_state, [_two_fist_command(config, media)]

    # --- 2. Single open hand ---
    if len(poses) == 1 and not any_pinch and cooldown.elapsed(now):
        observation, pose = poses[0]
        if pose is PoseClass.OPEN_HAND:
            cooldown.mark_fired(now)
            return new_state, [_open_hand_command(observation.hand)]

    # --- 3. Pinch pass ---
    commands = []
    for observation, pose in poses:
        hand = observation.hand
        if pose is PoseClass.FIST:
            if config.release_pinch_on_fist and PinchTracker.force_release(new_state.pinch[hand]):
                logger.debug("Pinch dropped, %s hand closed into a fist", hand.value)
            continue
        commands.extend(tracker.update(
            hand,
            new_state.pinch[hand],
            new_state.tap_clock,
            cooldown,
            observation.landmarks,
            media,
            now,
            snapshot.image_width,
            snapshot.image_height,
        ))

    return new_state, commands


def set_enabled(state: EngineState, enabled: bool) -> EngineState:
    """Return a copy of ``state`` with the enable flag set.

    Disabling drops every active pinch and pending tap so that re-enabling
    never resumes a drag against a stale anchor.
    """
    new_state = state.copy()
    new_state.enabled = enabled
    if not enabled:
        release_all(new_state)
        for hand in new_state.tap_clock:
            new_state.tap_clock[hand] = 0.0
    return new_state


# =============================================================================
# Stateful engine
# =============================================================================

def _default_clock() -> float:
    return time.time() * 1000


class GestureEngine:
    """Reactive controller fed one DetectionSnapshot per frame.

    Invocation is strictly sequential: each ``process()`` call fully applies
    its state transition before returning.
    """

    def __init__(
        self,
        config: EngineConfig = None,
        target=None,
        notification_sink=None,
        event_bus: EventBus = None,
        gesture_logger=None,
        clock=None,
    ):
        self._config = config or EngineConfig()
        self._state = EngineState.initial(self._config)
        self._target = target
        self._bus = event_bus or EventBus()
        self._clock = clock or _default_clock
        self._executor = ActionExecutor(
            notification_sink=notification_sink,
            event_bus=self._bus,
            gesture_logger=gesture_logger,
            notifications=self._config.notifications,
        )
        self._frame_count = 0

        logger.info(
            "GestureEngine initialized (cooldown=%sms, pinch=%spx, two_fist=%s, mirror=%s)",
            self._config.discrete_cooldown_ms, self._config.pinch_threshold_px,
            self._config.two_fist_action, self._config.mirror_input,
        )

    # --- Media target binding ---

    def bind_target(self, target):
        self._target = target
        self._bus.emit(Events.TARGET_BOUND, target=target)
        logger.info("Media target bound: %s", type(target).__name__)

    def unbind_target(self):
        if self._target is not None:
            self._target = None
            self._bus.emit(Events.TARGET_UNBOUND)
            logger.info("Media target unbound")

    # --- Frame processing ---

    @log_timing
    def process(self, snapshot: DetectionSnapshot, now: float = None) -> List[Command]:
        """Evaluate one frame and apply its commands.

        Returns:
            Commands produced this frame (already applied to the target)
        """
        if not self._state.enabled or self._target is None:
            return []

        now = self._clock() if now is None else now
        try:
            media = MediaSnapshot.from_target(self._target)
        except Exception as e:
            logger.warning("Could not read media target state: %s", e)
            return []

        previous = self._state
        self._state, commands = evaluate(previous, snapshot, media, self._config, now)
        self._frame_count += 1

        self._emit_pinch_changes(previous, self._state)
        self._executor.execute_all(self._target, commands)
        self._bus.emit(Events.FRAME_PROCESSED, hand_count=snapshot.hand_count, commands=commands)
        return commands

    def _emit_pinch_changes(self, before: EngineState, after: EngineState):
        for hand, pinch in after.pinch.items():
            was_active = before.pinch[hand].active
            if pinch.active and not was_active:
                self._bus.emit(Events.PINCH_ENGAGED, hand=hand, anchor=pinch.anchor)
            elif was_active and not pinch.active:
                self._bus.emit(Events.PINCH_RELEASED, hand=hand)

    # --- Enable switch ---

    def toggle_gestures(self, enabled: bool):
        """Enable or disable gesture control."""
        enabled = bool(enabled)
        previous = self._state
        self._state = set_enabled(previous, enabled)
        self._emit_pinch_changes(previous, self._state)

        logger.info("Gestures %s", "enabled" if enabled else "disabled")
        if self._config.notifications:
            self._executor.notify(
                "Gestures Enabled" if enabled else "Gestures Disabled",
                "✅" if enabled else "❌",
            )
        self._bus.emit(Events.GESTURES_TOGGLED, enabled=enabled)

    def reset(self):
        """Forget all pinch, tap and cooldown state; keeps the enable flag."""
        enabled = self._state.enabled
        self._state = EngineState.initial(self._config)
        self._state.enabled = enabled

    # --- Accessors ---

    @property
    def enabled(self) -> bool:
        return self._state.enabled

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def target(self):
        return self._target

    @property
    def executor(self) -> ActionExecutor:
        return self._executor

    @property
    def frame_count(self) -> int:
        return self._frame_count
