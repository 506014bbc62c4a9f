"""Gesture recognition module."""
from .pose_classifier import PoseClassifier, classify_pose
from .pinch_tracker import PinchTracker

__all__ = [
    "PoseClassifier",
    "classify_pose",
    "PinchTracker",
]
