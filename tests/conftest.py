"""
Shared fixtures: synthetic hands and a font-free text rasterizer.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from detection.landmarks import HandLandmarks, Landmark


def create_mock_landmarks(
    finger_states: dict,
    center: tuple = (0.5, 0.6),
) -> HandLandmarks:
    """
    Build a synthetic upright right hand.

    Args:
        finger_states: finger -> "up" / "down" (missing fingers are down)
        center: Normalized wrist position

    Returns:
        HandLandmarks with 21 points
    """
    base_x, base_y = center
    landmarks = [Landmark(x=base_x, y=base_y, z=0.0)]  # Wrist

    # Thumb (1-4); raised means the tip is above the index MCP (y offset 0.08)
    thumb_up = finger_states.get("thumb", "down") == "up"
    thumb_tip_off = 0.20 if thumb_up else 0.03
    for i, y_off in enumerate([0.02, 0.03, 0.03, thumb_tip_off]):
        landmarks.append(Landmark(x=base_x - 0.04 * (i + 1), y=base_y - y_off, z=0.0))

    # (x offset, [mcp, pip, dip, tip-up] y offsets); a lowered tip sits below its PIP
    fingers = [
        ("index", -0.05, [0.08, 0.14, 0.20, 0.28]),
        ("middle", 0.00, [0.09, 0.16, 0.23, 0.32]),
        ("ring", 0.05, [0.08, 0.14, 0.20, 0.28]),
        ("pinky", 0.10, [0.06, 0.11, 0.16, 0.22]),
    ]
    for name, x_off, offsets in fingers:
        up = finger_states.get(name, "down") == "up"
        mcp, pip, dip, tip = offsets
        if not up:
            dip, tip = pip - 0.02, pip - 0.04
        for y_off in (mcp, pip, dip, tip):
            landmarks.append(Landmark(x=base_x + x_off, y=base_y - y_off, z=0.0))

    return HandLandmarks(landmarks=landmarks, handedness="Right", confidence=0.95)


def raised(*fingers: str) -> dict:
    """finger_states with the named fingers up."""
    return {name: "up" for name in fingers}


class StripeRasterizer:
    """Draws a fixed bright rectangle; no fonts needed."""

    def __init__(self, lit: bool = True):
        self.lit = lit
        self.calls = []

    def rasterize(self, text, size):
        self.calls.append(text)
        canvas = np.zeros((size, size), dtype=np.uint8)
        if self.lit:
            canvas[size // 2 - 16:size // 2 + 16, size // 4:3 * size // 4] = 255
        return canvas


class BrokenRasterizer:
    """A rasterizer with no drawing surface."""

    def rasterize(self, text, size):
        return None


@pytest.fixture
def make_hand():
    """Factory fixture: ``make_hand("index", "middle")``."""
    def _make(*fingers, center=(0.5, 0.6)):
        return create_mock_landmarks(raised(*fingers), center=center)
    return _make


@pytest.fixture
def stripe_rasterizer():
    return StripeRasterizer()
