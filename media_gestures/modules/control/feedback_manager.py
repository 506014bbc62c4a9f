"""
Notification feedback for executed gesture actions.

Default NotificationSink: keeps the most recent message visible for a
short display window and logs each one. Rendering is left to whatever
host embeds the engine.
"""

import time
import logging

logger = logging.getLogger(__name__)


class FeedbackManager:
    """Records ``show(message, icon)`` calls from the engine."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._display_duration = config.get("display_duration", 1.5)  # seconds
        self._max_history = config.get("max_history", 50)
        self._active_feedback = None
        self._history = []

    def show(self, message: str, icon: str = ""):
        """Show a notification. Fire-and-forget."""
        self._active_feedback = {
            "message": message,
            "icon": icon,
            "start_time": time.time(),
        }
        self._history.append((message, icon))
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]
        logger.info("%s %s", icon, message)

    def clear(self):
        self._active_feedback = None

    @property
    def is_active(self) -> bool:
        if self._active_feedback is None:
            return False
        elapsed = time.time() - self._active_feedback["start_time"]
        return elapsed <= self._display_duration

    @property
    def current_message(self):
        """Message still inside its display window, or None."""
        if not self.is_active:
            return None
        return self._active_feedback["message"]

    @property
    def history(self) -> list:
        return list(self._history)

    @property
    def messages(self) -> list:
        return [message for message, _ in self._history]
