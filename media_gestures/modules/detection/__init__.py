"""Landmark validation, mirroring and snapshot construction."""
from .landmark_extractor import make_observation, mirror_snapshot
from .hand_detector import snapshot_from_results, snapshot_from_mediapipe, snapshot_from_dict

__all__ = [
    "make_observation",
    "mirror_snapshot",
    "snapshot_from_results",
    "snapshot_from_mediapipe",
    "snapshot_from_dict",
]
