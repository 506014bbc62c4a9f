"""
In-memory media target.

Stands in for a page's video element when no real player is attached:
the replay CLI drives it, and tests assert against its recorded calls.
Any object with the same attributes can be bound to the engine instead:

    current_time (read/write), volume (read/write), duration, paused,
    play(), pause(), and optionally toggle_fullscreen().
"""

import logging

logger = logging.getLogger(__name__)


class SimulatedMediaTarget:
    """Media player state held in memory; every call is logged and recorded."""

    def __init__(self, duration: float = 600.0, current_time: float = 0.0,
                 volume: float = 1.0, paused: bool = True):
        self.duration = duration
        self._current_time = current_time
        self._volume = volume
        self._paused = paused
        self.fullscreen = False
        self.calls = []  # [(method, value)] in call order

    @property
    def current_time(self) -> float:
        return self._current_time

    @current_time.setter
    def current_time(self, value: float):
        self._current_time = float(value)
        self.calls.append(("current_time", self._current_time))
        logger.debug("[SIMULATED] current_time = %.2f", self._current_time)

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float):
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"volume out of range: {value}")
        self._volume = value
        self.calls.append(("volume", value))
        logger.debug("[SIMULATED] volume = %.3f", value)

    @property
    def paused(self) -> bool:
        return self._paused

    def play(self):
        self._paused = False
        self.calls.append(("play", None))
        logger.debug("[SIMULATED] play")

    def pause(self):
        self._paused = True
        self.calls.append(("pause", None))
        logger.debug("[SIMULATED] pause")

    def toggle_fullscreen(self):
        self.fullscreen = not self.fullscreen
        self.calls.append(("toggle_fullscreen", self.fullscreen))
        logger.debug("[SIMULATED] fullscreen = %s", self.fullscreen)

    def call_names(self) -> list:
        return [name for name, _ in self.calls]
