"""
Touchless Media Gestures
========================

Turns per-frame hand landmarks into media commands: play/pause, seek,
volume and fullscreen.

Modules:
    - core: domain types, event bus, per-frame evaluator and engine
    - modules.detection: landmark validation, mirroring, snapshot building
    - modules.recognition: pose classification and pinch tracking
    - modules.control: cooldown, command execution, notifications
    - modules.utils: configuration and logging
"""

from .core.engine import EngineState, GestureEngine, evaluate
from .core.types import (
    Command, DetectionSnapshot, Hand, HandObservation, MediaAction,
    MediaSnapshot, PoseClass,
)
from .modules.utils.config import EngineConfig

__version__ = "1.0.0"

__all__ = [
    "Command",
    "DetectionSnapshot",
    "EngineConfig",
    "EngineState",
    "GestureEngine",
    "Hand",
    "HandObservation",
    "MediaAction",
    "MediaSnapshot",
    "PoseClass",
    "evaluate",
]
