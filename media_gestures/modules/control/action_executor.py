"""
Applies engine commands to a bound media target.

The evaluator decides what should happen; this module is the thin adapter
that performs it. Each command maps to one target call. A failing call is
logged and reported, never retried, and does not stop the remaining
commands of the frame.
"""

import logging

from media_gestures.core.events import EventBus, Events
from media_gestures.core.types import Command, MediaAction

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Executes commands against a media target and notifies a sink."""

    def __init__(self, notification_sink=None, event_bus: EventBus = None,
                 gesture_logger=None, notifications: bool = True):
        self._sink = notification_sink
        self._bus = event_bus or EventBus()
        self._gesture_logger = gesture_logger
        self._notifications = notifications

        self._action_callbacks = []
        self._last_command = None
        self._action_count = 0

    def execute(self, target, command: Command) -> bool:
        """Apply a single command.

        Returns:
            True if the target call completed without raising
        """
        if target is None:
            logger.debug("No media target bound, dropping %r", command)
            return False

        try:
            self._apply(target, command)
        except Exception as e:
            logger.warning("Media target rejected %r: %s", command, e)
            self._bus.emit(Events.ACTION_FAILED, command=command, error=e)
            if self._gesture_logger is not None:
                self._gesture_logger.log_command(command, success=False, error=e)
            return False

        self._record(command)
        self._notify(command)
        return True

    def execute_all(self, target, commands) -> int:
        """Apply commands in order; returns how many succeeded."""
        return sum(1 for command in commands if self.execute(target, command))

    @staticmethod
    def _apply(target, command: Command):
        action = command.action
        if action is MediaAction.PLAY:
            target.play()
        elif action is MediaAction.PAUSE:
            target.pause()
        elif action is MediaAction.SET_VOLUME:
            target.volume = command.value
        elif action is MediaAction.SEEK_TO:
            target.current_time = command.value
        elif action is MediaAction.TOGGLE_FULLSCREEN:
            toggle = getattr(target, "toggle_fullscreen", None)
            if toggle is None:
                raise AttributeError("target does not support fullscreen")
            toggle()
        else:
            raise ValueError(f"Unsupported action: {action}")

    def _record(self, command: Command):
        """Record command metadata and notify callbacks."""
        self._last_command = command
        self._action_count += 1

        if command.action.is_discrete:
            logger.info("Executed %r", command)
        else:
            logger.debug("Executed %r", command)

        if self._gesture_logger is not None:
            self._gesture_logger.log_command(command)

        self._bus.emit(Events.ACTION_EXECUTED, command=command)

        for callback in self._action_callbacks:
            try:
                callback(command)
            except Exception as e:
                logger.error("Action callback error: %s", e)

    def _notify(self, command: Command):
        if not self._notifications or self._sink is None or not command.message:
            return
        self.notify(command.message, command.icon)

    def notify(self, message: str, icon: str = ""):
        """Forward a message to the notification sink; sink errors are logged."""
        if self._sink is None:
            return
        try:
            self._sink.show(message, icon)
        except Exception as e:
            logger.error("Notification sink error: %s", e)

    def on_action(self, callback):
        """Register callback for executed commands.

        callback(command: Command)
        """
        self._action_callbacks.append(callback)

    @property
    def last_command(self):
        return self._last_command

    @property
    def action_count(self) -> int:
        return self._action_count
