"""
Event bus for observing the gesture engine.

The engine announces what happened in a frame (pinch engaged or dropped,
command applied or rejected, gestures toggled, target bound). Dashboards,
recorders and tests listen without the engine holding references to them.

Usage:
    bus = EventBus()
    bus.subscribe(Events.ACTION_EXECUTED, on_command)
    bus.emit(Events.ACTION_EXECUTED, command=cmd)
"""

import time
import logging
import threading
from collections import defaultdict, deque
from typing import Callable

logger = logging.getLogger(__name__)


def _callback_name(callback) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


class EventBus:
    """Synchronous publish/subscribe bus shared by one application.

    Listeners run in descending priority order on the emitting thread. A
    listener that raises is logged and skipped.
    """

    _instance = None
    HISTORY_SIZE = 100

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._listeners = defaultdict(list)  # event -> [(priority, seq, callback)]
            instance._lock = threading.Lock()
            instance._seq = 0
            instance._history = deque(maxlen=cls.HISTORY_SIZE)
            cls._instance = instance
        return cls._instance

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register ``callback(**payload)`` for ``event_name``.

        Higher ``priority`` runs first; equal priorities run in
        subscription order.
        """
        with self._lock:
            self._seq += 1
            listeners = self._listeners[event_name]
            listeners.append((priority, self._seq, callback))
            listeners.sort(key=lambda entry: (-entry[0], entry[1]))
        logger.debug("Subscribed %s to '%s' (priority=%d)",
                     _callback_name(callback), event_name, priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        with self._lock:
            self._listeners[event_name] = [
                entry for entry in self._listeners[event_name] if entry[2] is not callback
            ]

    def emit(self, event_name: str, **payload):
        """Deliver ``payload`` to every listener of ``event_name``."""
        with self._lock:
            listeners = [entry[2] for entry in self._listeners.get(event_name, ())]
        self._history.append((time.time(), event_name, tuple(sorted(payload))))

        for callback in listeners:
            try:
                callback(**payload)
            except Exception as e:
                logger.error("Listener %s failed on '%s': %s", _callback_name(callback), event_name, e)

    def clear(self, event_name: str = None):
        """Drop listeners for one event, or for all events."""
        with self._lock:
            if event_name is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event_name, None)

    @property
    def registered_events(self) -> list:
        with self._lock:
            return [name for name, entries in self._listeners.items() if entries]

    @property
    def listener_count(self) -> int:
        with self._lock:
            return sum(len(entries) for entries in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Recent emissions as ``{"event", "time", "data_keys"}`` dicts, oldest first."""
        recent = list(self._history)[-last_n:]
        return [{"event": name, "time": t, "data_keys": list(keys)} for t, name, keys in recent]

    def reset(self):
        """Forget listeners and history (for testing)."""
        self.clear()
        self._history.clear()


class Events:
    """Event names published by the gesture engine."""

    FRAME_PROCESSED = "frame_processed"      # hand_count, commands

    PINCH_ENGAGED = "pinch_engaged"          # hand, anchor
    PINCH_RELEASED = "pinch_released"        # hand

    ACTION_EXECUTED = "action_executed"      # command
    ACTION_FAILED = "action_failed"          # command, error

    GESTURES_TOGGLED = "gestures_toggled"    # enabled
    TARGET_BOUND = "target_bound"            # target
    TARGET_UNBOUND = "target_unbound"
