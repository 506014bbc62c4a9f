"""
Logging setup and a record of every media command the engine applied.
"""

import os
import time
import logging
import logging.handlers
from collections import Counter, deque
from functools import wraps

CONSOLE_FORMAT = "%(asctime)s  %(levelname)-5s  %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)-40s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure the root logger: console always, rotating file when ``log_file`` is set.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=int(max_size_mb * 1024 * 1024),
            backupCount=backup_count,
        )
        # File keeps everything, including per-frame timing
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    return root_logger


class GestureLogger:
    """Keeps a bounded history of applied (and rejected) commands."""

    def __init__(self, max_history: int = 1000):
        self.logger = logging.getLogger("gesture_events")
        self._history = deque(maxlen=max_history)
        self._counts = Counter()

    def log_command(self, command, success=True, error=None):
        """Record one command outcome from the action executor."""
        entry = {
            "timestamp": time.time(),
            "action": command.action.value,
            "value": command.value,
            "hand": command.hand.value if command.hand else None,
            "gesture": command.gesture,
            "success": success,
            "error": None if error is None else str(error),
        }
        self._history.append(entry)
        self._counts[(entry["action"], success)] += 1

        if success:
            self.logger.info(
                "%-17s | %-10s | %-5s | %s",
                entry["action"],
                entry["gesture"] or "-",
                entry["hand"] or "-",
                "" if command.value is None else f"{command.value:.3f}",
            )
        else:
            self.logger.warning("%-17s | FAILED | %s", entry["action"], entry["error"])

    def get_history(self, last_n=None):
        """Get recent command history, oldest first."""
        history = list(self._history)
        if last_n:
            return history[-last_n:]
        return history

    def summary(self) -> dict:
        """Counts per action name: ``{action: {"ok": n, "failed": m}}``."""
        result = {}
        for (action, success), n in self._counts.items():
            result.setdefault(action, {"ok": 0, "failed": 0})
            result[action]["ok" if success else "failed"] += n
        return result

    @property
    def total_actions(self):
        return sum(self._counts.values())


def log_timing(func):
    """Decorator to log function execution time at DEBUG."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        logger.debug("%s took %.2fms", func.__qualname__, (time.perf_counter() - start) * 1000)
        return result

    return wrapper
