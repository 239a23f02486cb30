"""
Particle cloud rotation driven by the hand position.

Rules per frame, applied only while a hand is visible:
- sphere: the hand steers the cloud directly (x -> yaw, y -> pitch)
- scatter: slow continuous spin
- anything else: ease back to facing the camera
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from utils.interpolation import lerp
from .shape_library import ShapeId

logger = logging.getLogger(__name__)


@dataclass
class RotationConfig:
    """Rotation behaviour settings."""
    hand_multiplier: float = 4.0    # Radians per unit of normalized hand offset
    scatter_increment: float = 0.02
    return_lerp: float = 0.05

    @classmethod
    def from_dict(cls, config: dict) -> "RotationConfig":
        """Create config from the ``animation`` section."""
        return cls(
            hand_multiplier=config.get("hand_rotation_multiplier", 4.0),
            scatter_increment=config.get("scatter_rotation_increment", 0.02),
            return_lerp=config.get("rotation_lerp", 0.05),
        )


class RotationController:
    """
    Tracks the cloud's rotation (radians about x and y).

    Example:
        >>> rotation = RotationController()
        >>> rotation.update(ShapeId.SPHERE, classifier.hand_center(hand))
        >>> renderer.render(positions, colors, rotation.angles)
    """

    def __init__(self, config: Optional[RotationConfig] = None):
        self.config = config or RotationConfig()
        self.x = 0.0
        self.y = 0.0

    @property
    def angles(self) -> Tuple[float, float]:
        """(rotation about x, rotation about y)."""
        return self.x, self.y

    def update(self, shape: Optional[ShapeId], hand_center: Optional[Tuple[float, float]]) -> None:
        """
        Apply one frame of rotation.

        Args:
            shape: Active shape (None before the first target)
            hand_center: Normalized (x, y) hand reference point, None if no hand
        """
        if hand_center is None:
            return

        if shape is ShapeId.SPHERE:
            cx, cy = hand_center
            self.y = (cx - 0.5) * self.config.hand_multiplier
            self.x = (cy - 0.5) * self.config.hand_multiplier
        elif shape is ShapeId.SCATTER:
            self.x += self.config.scatter_increment
            self.y += self.config.scatter_increment
        else:
            self.x = lerp(self.x, 0.0, self.config.return_lerp)
            self.y = lerp(self.y, 0.0, self.config.return_lerp)

    def reset(self) -> None:
        self.x = 0.0
        self.y = 0.0
