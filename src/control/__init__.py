"""Gesture-to-particle control loop."""
from .shape_controller import ControllerStatus, ShapeController

__all__ = ["ControllerStatus", "ShapeController"]
