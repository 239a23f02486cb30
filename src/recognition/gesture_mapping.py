"""
Gesture -> shape and gesture -> label lookup tables.

Both tables are total: unknown names fall back to the sphere shape and the
"STANDBY" label.
"""

from typing import Dict, Union

from particles.shape_library import ShapeId
from .gesture_classifier import GestureType

DEFAULT_SHAPE = ShapeId.SPHERE
DEFAULT_LABEL = "STANDBY"

GESTURE_SHAPES: Dict[GestureType, ShapeId] = {
    GestureType.THUMBS_UP: ShapeId.SCATTER,
    GestureType.INDEX: ShapeId.HELLO,
    GestureType.PEACE: ShapeId.GEMINI,
    GestureType.THREE_FINGERS: ShapeId.GREAT_WORD,
    GestureType.OPEN_PALM: ShapeId.SPHERE,
    GestureType.FIST: ShapeId.GREETING_WORD,
    GestureType.NONE: ShapeId.SPHERE,
}

GESTURE_LABELS: Dict[GestureType, str] = {
    GestureType.THUMBS_UP: "BLAST!",
    GestureType.INDEX: "Hello",
    GestureType.PEACE: "Gemini",
    GestureType.THREE_FINGERS: "නියමයි (Great)",
    GestureType.OPEN_PALM: "Open Palm",
    GestureType.FIST: "ආයුබෝවන් (Ayubowan)",
    GestureType.NONE: DEFAULT_LABEL,
}


def _gesture_type(gesture: Union[GestureType, str]) -> GestureType:
    if isinstance(gesture, GestureType):
        return gesture
    return GestureType.from_string(gesture)


def shape_for_gesture(gesture: Union[GestureType, str]) -> ShapeId:
    """Target shape for a gesture (sphere when unmapped)."""
    return GESTURE_SHAPES.get(_gesture_type(gesture), DEFAULT_SHAPE)


def label_for_gesture(gesture: Union[GestureType, str]) -> str:
    """Human-readable label for a gesture ("STANDBY" when unmapped)."""
    return GESTURE_LABELS.get(_gesture_type(gesture), DEFAULT_LABEL)
