"""
Shared cooldown clock for discrete gesture actions.

Discrete actions (two-fist toggle, open-hand play/pause, double-tap coarse
seek, fullscreen) each check ``elapsed()`` before firing and call
``mark_fired()`` right after, so a held pose cannot re-trigger on every
frame. Continuous pinch adjustments never touch this clock.

All timestamps are milliseconds.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class CooldownClock:
    """Single shared ``last_action_time`` with a fixed cooldown window."""

    __slots__ = ("cooldown_ms", "last_action_time")

    def __init__(self, cooldown_ms: float = 1200, last_action_time: Optional[float] = None):
        self.cooldown_ms = cooldown_ms
        self.last_action_time = last_action_time  # None until the first discrete action

    def elapsed(self, now: float) -> bool:
        """True if a discrete action may fire at ``now``."""
        if self.last_action_time is None:
            return True
        return now - self.last_action_time >= self.cooldown_ms

    def mark_fired(self, now: float):
        self.last_action_time = now
        logger.debug("Discrete action fired at %.0f, locked for %dms", now, self.cooldown_ms)

    def remaining_ms(self, now: float) -> float:
        if self.last_action_time is None:
            return 0.0
        return max(0.0, self.cooldown_ms - (now - self.last_action_time))

    def reset(self):
        self.last_action_time = None

    def copy(self) -> 'CooldownClock':
        return CooldownClock(self.cooldown_ms, self.last_action_time)

    def __repr__(self):
        return f"CooldownClock(cooldown_ms={self.cooldown_ms}, last_action_time={self.last_action_time})"
