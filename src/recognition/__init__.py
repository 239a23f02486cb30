"""Gesture recognition: classifier, gesture tables and the throttle gate."""
from .gesture_classifier import (
    FingerState,
    GestureClassifier,
    GestureClassifierConfig,
    GestureResult,
    GestureType,
)
from .gesture_mapping import label_for_gesture, shape_for_gesture
from .gesture_throttle import LatestResultSlot, ThrottleGate, ThrottleGateConfig

__all__ = [
    "FingerState",
    "GestureClassifier",
    "GestureClassifierConfig",
    "GestureResult",
    "GestureType",
    "label_for_gesture",
    "shape_for_gesture",
    "LatestResultSlot",
    "ThrottleGate",
    "ThrottleGateConfig",
]
