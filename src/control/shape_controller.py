"""
Shape Controller
=================

Per-frame glue between recognition and the particle system:

    hand landmarks -> classify -> throttle -> gesture->shape -> engine target
                                                             -> rotation

The host calls ``update()`` with each frame's hand (or None) and ``tick()``
once per rendered frame.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from particles.morph_engine import MorphEngine
from particles.rotation import RotationController
from particles.shape_library import ShapeId
from recognition.gesture_classifier import GestureClassifier, GestureResult, GestureType
from recognition.gesture_mapping import label_for_gesture, shape_for_gesture
from recognition.gesture_throttle import ThrottleGate, ThrottleGateConfig
from utils.logger import ShapeEventLogger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ControllerStatus:
    """Outcome of one ``update``."""
    raw: GestureResult          # This frame's classification
    gesture: GestureType        # Throttled gesture in force
    shape: ShapeId
    label: str
    switched: bool              # The engine got a new target this frame
    hand_present: bool


class ShapeController:
    """
    Drives a MorphEngine and RotationController from hand landmarks.

    Example:
        >>> controller = ShapeController(GestureClassifier(), engine, RotationController())
        >>> while running:
        ...     status = controller.update(detector.detect(frame, ts))
        ...     controller.tick()
        ...     renderer.render(engine.position_buffer, engine.color_buffer,
        ...                     controller.rotation.angles, HudInfo(label=status.label))
    """

    def __init__(
        self,
        classifier: GestureClassifier,
        engine: MorphEngine,
        rotation: Optional[RotationController] = None,
        throttle_config: Optional[ThrottleGateConfig] = None,
        event_logger: Optional[ShapeEventLogger] = None,
    ):
        self.classifier = classifier
        self.engine = engine
        self.rotation = rotation or RotationController()
        self.gate: ThrottleGate[GestureType] = ThrottleGate(throttle_config)
        self.events = event_logger or ShapeEventLogger()
        self._last_status: Optional[ControllerStatus] = None

    @property
    def last_status(self) -> Optional[ControllerStatus]:
        return self._last_status

    def update(self, hand, now_ms: Optional[float] = None) -> ControllerStatus:
        """
        Process one frame's hand.

        Args:
            hand: HandLandmarks, a 21-point sequence, or None
            now_ms: Frame time in milliseconds (monotonic clock by default)
        """
        result = self.classifier.classify(hand)
        gesture = self.gate.update(result.gesture, now_ms=now_ms)

        shape = shape_for_gesture(gesture)
        previous = self.engine.active_shape
        switched = self.engine.set_target(shape)
        if switched:
            self.events.log_switch(gesture.value, shape.value,
                                   previous.value if previous else None, result.confidence)

        center = self.classifier.hand_center(hand)
        self.rotation.update(shape, None if center is None else (center.x, center.y))

        status = ControllerStatus(
            raw=result,
            gesture=gesture,
            shape=shape,
            label=label_for_gesture(gesture),
            switched=switched,
            hand_present=center is not None,
        )
        self._last_status = status
        return status

    def tick(self) -> None:
        """Advance the particle animation one frame."""
        self.engine.tick()

    def reset(self) -> None:
        """Forget the throttled gesture and rotation (e.g. after a camera restart)."""
        self.gate.reset()
        self.rotation.reset()
        self._last_status = None
