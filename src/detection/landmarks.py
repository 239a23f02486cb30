"""
Hand landmark data types.

A frame from the landmark provider is either ``None`` (no hand visible) or a
``HandLandmarks`` holding 21 points in MediaPipe order. Anything with a
different point count is treated as "no hand" downstream.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

NUM_LANDMARKS = 21


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float  # Depth relative to wrist

    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to pixel coordinates."""
        return (int(self.x * width), int(self.y * height))


@dataclass
class HandLandmarks:
    """One detected hand: 21 landmarks plus detector metadata."""
    landmarks: List[Landmark]
    handedness: str = "Right"  # "Left" or "Right"
    confidence: float = 1.0
    image_width: int = 1280
    image_height: int = 720

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]], **kwargs) -> "HandLandmarks":
        """Build from any sequence of (x, y, z) or (x, y) points, e.g. a (21, 3) array."""
        landmarks = []
        for p in points:
            z = float(p[2]) if len(p) > 2 else 0.0
            landmarks.append(Landmark(float(p[0]), float(p[1]), z))
        return cls(landmarks=landmarks, **kwargs)

    @property
    def is_complete(self) -> bool:
        """True when the frame carries exactly 21 landmarks."""
        return len(self.landmarks) == NUM_LANDMARKS

    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]

    def get_pixel(self, index: LandmarkIndex) -> Tuple[int, int]:
        """Get landmark as pixel coordinates."""
        return self.get(index).to_pixel(self.image_width, self.image_height)

    def to_numpy(self) -> np.ndarray:
        """Convert landmarks to numpy array of shape (21, 3)."""
        return np.array([[lm.x, lm.y, lm.z] for lm in self.landmarks], dtype=np.float32)

    def __len__(self) -> int:
        return len(self.landmarks)
