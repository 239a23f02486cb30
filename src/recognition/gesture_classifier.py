"""
Static Gesture Classifier
==========================

Rule-based gesture recognition from a single frame of hand landmarks.

Each finger is reduced to a "raised" flag and the flags are matched against
a fixed, ordered list of patterns. The first match wins.

Finger tests (image coordinates, smaller y = higher on screen):
- index/middle/ring/pinky: raised if the tip is above its PIP joint
- thumb: raised if the thumb tip is above the index MCP. The thumb has no
  PIP in the same chain, so this is a coarse test. It tolerates either hand
  but is not rotation-invariant; rotated poses may misclassify.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np

from detection.landmarks import HandLandmarks, Landmark, LandmarkIndex, NUM_LANDMARKS

logger = logging.getLogger(__name__)

LandmarkFrame = Union[HandLandmarks, Sequence[Sequence[float]], np.ndarray, None]


class GestureType(Enum):
    """Recognized gesture types."""
    THUMBS_UP = "thumbs-up"
    INDEX = "index"
    PEACE = "peace"
    THREE_FINGERS = "three-fingers"
    OPEN_PALM = "open-palm"
    FIST = "fist"
    NONE = "none"

    @classmethod
    def from_string(cls, name: str) -> "GestureType":
        """Convert a gesture name to GestureType, NONE when unknown."""
        try:
            return cls(name)
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class FingerState:
    """Raised flags for the five fingers of one hand."""
    thumb: bool
    index: bool
    middle: bool
    ring: bool
    pinky: bool

    @property
    def raised_count(self) -> int:
        """Raised fingers among index, middle, ring and pinky (thumb excluded)."""
        return sum((self.index, self.middle, self.ring, self.pinky))


@dataclass(frozen=True)
class GestureResult:
    """Classification output."""
    gesture: GestureType
    confidence: float

    @property
    def name(self) -> str:
        return self.gesture.value

    @property
    def is_valid(self) -> bool:
        return self.gesture is not GestureType.NONE

    @staticmethod
    def none() -> "GestureResult":
        """Result for absent hands and unmatched poses."""
        return GestureResult(GestureType.NONE, 0.0)


@dataclass
class GestureClassifierConfig:
    """Gesture classifier configuration."""
    # Raised non-thumb fingers needed for an open palm
    open_palm_finger_count: int = 4
    # Log finger states for every classification
    debug: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "GestureClassifierConfig":
        """Create config from dictionary."""
        return cls(
            open_palm_finger_count=config.get("open_palm_finger_count", 4),
            debug=config.get("debug", False),
        )


# (tip, pip) pairs for the four non-thumb fingers
_FINGER_JOINTS = {
    "index": (LandmarkIndex.INDEX_TIP, LandmarkIndex.INDEX_PIP),
    "middle": (LandmarkIndex.MIDDLE_TIP, LandmarkIndex.MIDDLE_PIP),
    "ring": (LandmarkIndex.RING_TIP, LandmarkIndex.RING_PIP),
    "pinky": (LandmarkIndex.PINKY_TIP, LandmarkIndex.PINKY_PIP),
}


def _as_landmarks(frame: LandmarkFrame) -> Optional[List[Landmark]]:
    """Normalize any supported frame to 21 Landmarks, or None for "no hand"."""
    if frame is None:
        return None

    if isinstance(frame, HandLandmarks):
        points = frame.landmarks
    else:
        points = frame

    try:
        if len(points) != NUM_LANDMARKS:
            return None
        return [
            p if isinstance(p, Landmark)
            else Landmark(float(p[0]), float(p[1]), float(p[2]) if len(p) > 2 else 0.0)
            for p in points
        ]
    except (TypeError, ValueError, IndexError):
        return None


class GestureClassifier:
    """
    Rule-based static gesture classifier.

    Stateless apart from its configuration: the same landmarks always give
    the same result, so one instance can be shared freely.

    Decision order (first match wins, confidence 1.0):
        1. thumb raised, no other finger raised   -> THUMBS_UP
        2. index only                             -> INDEX
        3. index + middle                         -> PEACE
        4. index + middle + ring                  -> THREE_FINGERS
        5. >= open_palm_finger_count raised       -> OPEN_PALM
        6. no non-thumb finger raised             -> FIST
        otherwise NONE with confidence 0.0

    Example:
        >>> classifier = GestureClassifier()
        >>> result = classifier.classify(hand)
        >>> if result.is_valid:
        ...     print(result.name, result.confidence)
    """

    def __init__(self, config: Optional[GestureClassifierConfig] = None):
        self.config = config or GestureClassifierConfig()

    def classify(self, landmarks: LandmarkFrame) -> GestureResult:
        """
        Classify a gesture from one frame of landmarks.

        Args:
            landmarks: HandLandmarks, 21 (x, y, z) points, or None

        Returns:
            GestureResult; NONE/0.0 for absent or malformed frames
        """
        points = _as_landmarks(landmarks)
        if points is None:
            return GestureResult.none()

        fingers = self._finger_state(points)
        raised = fingers.raised_count

        if self.config.debug:
            logger.debug("Finger states: %s (raised=%d)", fingers, raised)

        if fingers.thumb and raised == 0:
            return GestureResult(GestureType.THUMBS_UP, 1.0)

        if fingers.index and not fingers.middle and not fingers.ring and not fingers.pinky:
            return GestureResult(GestureType.INDEX, 1.0)

        if fingers.index and fingers.middle and not fingers.ring and not fingers.pinky:
            return GestureResult(GestureType.PEACE, 1.0)

        if fingers.index and fingers.middle and fingers.ring and not fingers.pinky:
            return GestureResult(GestureType.THREE_FINGERS, 1.0)

        if raised >= self.config.open_palm_finger_count:
            return GestureResult(GestureType.OPEN_PALM, 1.0)

        if raised == 0:
            return GestureResult(GestureType.FIST, 1.0)

        return GestureResult.none()

    def finger_state(self, landmarks: LandmarkFrame) -> Optional[FingerState]:
        """Raised flags for each finger, or None when no hand is present."""
        points = _as_landmarks(landmarks)
        if points is None:
            return None
        return self._finger_state(points)

    def landmark_at(self, landmarks: LandmarkFrame, index: int) -> Optional[Landmark]:
        """Landmark at ``index``, or None for absent frames / bad indices."""
        points = _as_landmarks(landmarks)
        if points is None or not 0 <= index < NUM_LANDMARKS:
            return None
        return points[index]

    def hand_center(self, landmarks: LandmarkFrame) -> Optional[Landmark]:
        """Middle-finger MCP, used as the hand's reference point for rotation."""
        return self.landmark_at(landmarks, LandmarkIndex.MIDDLE_MCP)

    def _finger_state(self, points: List[Landmark]) -> FingerState:
        raised = {
            finger: points[tip].y < points[pip].y
            for finger, (tip, pip) in _FINGER_JOINTS.items()
        }
        thumb = points[LandmarkIndex.THUMB_TIP].y < points[LandmarkIndex.INDEX_MCP].y
        return FingerState(thumb=thumb, **raised)
