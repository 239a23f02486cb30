"""Hand landmark types. The MediaPipe provider lives in ``detection.hand_detector``."""
from .landmarks import HandLandmarks, Landmark, LandmarkIndex, NUM_LANDMARKS

__all__ = ["HandLandmarks", "Landmark", "LandmarkIndex", "NUM_LANDMARKS"]
