"""
Replay recorded hand-tracking frames through the gesture engine.

Each input line is one JSON frame::

    {"t": 1200, "width": 640, "height": 480,
     "hands": [{"handedness": "Right", "landmarks": [[x, y, z], ...]}]}

``t`` is the frame time in milliseconds. Frames drive a simulated media
target; every command and notification is logged.

Usage:
    touchless-replay frames.jsonl
    touchless-replay frames.jsonl --profile youtube --log-level DEBUG
    cat frames.jsonl | touchless-replay -
"""

import sys
import json
import math
import argparse
import logging

from media_gestures.core.engine import GestureEngine
from media_gestures.core.types import ConfigError, GestureEngineError
from media_gestures.modules.control.feedback_manager import FeedbackManager
from media_gestures.modules.control.media_target import SimulatedMediaTarget
from media_gestures.modules.detection.hand_detector import snapshot_from_dict
from media_gestures.modules.utils.config import Config
from media_gestures.modules.utils.logger import GestureLogger, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Replay hand-tracking frames through the touchless media gesture engine"
    )
    parser.add_argument(
        "frames", help="JSON-lines frame recording ('-' for stdin)"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--profile", type=str, default=None,
        help="Engine profile from the config (e.g. youtube, fullscreen)"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        help="Override logging level"
    )
    parser.add_argument(
        "--no-mirror", action="store_true",
        help="Frames are already mirrored"
    )
    parser.add_argument(
        "--duration", type=float, default=600.0,
        help="Simulated media duration in seconds"
    )
    parser.add_argument(
        "--playing", action="store_true",
        help="Start the simulated media playing instead of paused"
    )
    return parser.parse_args(argv)


def _read_frames(stream):
    for line_no, line in enumerate(stream, 1):
        line = line.strip()
        if not line:
            continue
        try:
            yield line_no, json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Skipping line %d: %s", line_no, e)


def replay(engine: GestureEngine, stream) -> int:
    """Feed every frame in ``stream`` to the engine; returns the command count."""
    total = 0
    for line_no, frame in _read_frames(stream):
        try:
            snapshot = snapshot_from_dict(frame)
        except GestureEngineError as e:
            logger.warning("Skipping line %d: %s", line_no, e)
            continue
        now = frame.get("t")
        if now is not None and (isinstance(now, bool) or not isinstance(now, (int, float))
                                or not math.isfinite(now)):
            logger.warning("Skipping line %d: bad frame time %r", line_no, now)
            continue
        commands = engine.process(snapshot, now=now)
        total += len(commands)
    return total


def main(argv=None) -> int:
    args = parse_args(argv)

    config = Config()
    config.load(config_path=args.config)

    log_cfg = config.logging
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("log_file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    try:
        engine_config = config.engine_config(args.profile)
    except ConfigError as e:
        logger.error("%s", e)
        return 2
    if args.no_mirror:
        engine_config = engine_config.with_overrides(mirror_input=False)

    target = SimulatedMediaTarget(duration=args.duration, paused=not args.playing)
    gesture_log = GestureLogger()
    engine = GestureEngine(
        config=engine_config,
        target=target,
        notification_sink=FeedbackManager(),
        gesture_logger=gesture_log,
    )

    try:
        if args.frames == "-":
            total = replay(engine, sys.stdin)
        else:
            with open(args.frames, "r") as f:
                total = replay(engine, f)
    except FileNotFoundError:
        logger.error("Frame recording not found: %s", args.frames)
        return 1

    logger.info(
        "Replayed %d frames, %d commands (time=%.1fs volume=%.2f paused=%s)",
        engine.frame_count, total, target.current_time, target.volume, target.paused,
    )
    for action, counts in sorted(gesture_log.summary().items()):
        logger.info("  %-17s ok=%d failed=%d", action, counts["ok"], counts["failed"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
