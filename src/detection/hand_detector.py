"""
Hand Detection Module
======================

Thin adapter around MediaPipe's HandLandmarker (Tasks API) that turns
camera frames into ``HandLandmarks``. The gesture and particle code never
imports MediaPipe; it only sees the landmark types from ``landmarks.py``.
"""

import cv2
import numpy as np
import logging
import urllib.request
from dataclasses import dataclass
from typing import Optional, Tuple
from pathlib import Path

import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from .landmarks import HandLandmarks, Landmark

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent / "models" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    max_num_hands: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", "") or "",
            max_num_hands=d.get("max_num_hands", 1),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
        )


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Downloading hand landmarker model to %s...", save_path)
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
        return True
    except OSError as e:
        logger.error("Failed to download model: %s", e)
        return False


class HandDetector:
    """
    Landmark provider backed by MediaPipe's HandLandmarker in VIDEO mode.

    Only the first detected hand is reported; the rest of the system works
    with zero or one hand per frame.

    Example:
        >>> with HandDetector(HandDetectorConfig()) as detector:
        ...     hand = detector.detect(rgb_image, timestamp_ms)
        ...     if hand is not None:
        ...         result = classifier.classify(hand)
    """

    HAND_CONNECTIONS = [
        (0, 1), (1, 2), (2, 3), (3, 4),
        (0, 5), (5, 6), (6, 7), (7, 8),
        (5, 9), (9, 10), (10, 11), (11, 12),
        (9, 13), (13, 14), (14, 15), (15, 16),
        (13, 17), (17, 18), (18, 19), (19, 20),
        (0, 17),
    ]

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._last_timestamp_ms = -1

    @property
    def is_running(self) -> bool:
        return self._landmarker is not None

    def start(self) -> bool:
        """Load the model and create the landmarker."""
        model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

        if not Path(model_path).exists():
            if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                logger.error("Could not download hand landmarker model")
                return False

        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_hands=self.config.max_num_hands,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )

        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error("Failed to initialize HandLandmarker: %s", e)
            return False

        logger.info("HandLandmarker initialized with model: %s", model_path)
        return True

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    def detect(self, image: np.ndarray, timestamp_ms: int) -> Optional[HandLandmarks]:
        """
        Detect a hand in an RGB frame.

        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Frame timestamp; must increase between calls

        Returns:
            The first detected hand, or None when no hand is visible
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return None

        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        height, width = image.shape[:2]
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        if not result.hand_landmarks:
            return None

        handedness, confidence = "Right", 0.0
        if result.handedness:
            category = result.handedness[0][0]
            handedness, confidence = category.category_name, category.score

        return HandLandmarks(
            landmarks=[Landmark(lm.x, lm.y, lm.z) for lm in result.hand_landmarks[0]],
            handedness=handedness,
            confidence=confidence,
            image_width=width,
            image_height=height,
        )

    def draw_landmarks(
        self,
        image: np.ndarray,
        hand: HandLandmarks,
        landmark_color: Tuple[int, int, int] = (0, 255, 0),
        connection_color: Tuple[int, int, int] = (255, 255, 255),
    ) -> np.ndarray:
        """Draw the hand skeleton onto a BGR image sized like the source frame."""
        height, width = image.shape[:2]
        for start_idx, end_idx in self.HAND_CONNECTIONS:
            start = hand.landmarks[start_idx].to_pixel(width, height)
            end = hand.landmarks[end_idx].to_pixel(width, height)
            cv2.line(image, start, end, connection_color, 1)

        for i, lm in enumerate(hand.landmarks):
            # Red fingertips
            color = (0, 0, 255) if i in (4, 8, 12, 16, 20) else landmark_color
            cv2.circle(image, lm.to_pixel(width, height), 3, color, -1)

        return image

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
