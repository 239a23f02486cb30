"""
Tests for interpolation helpers.
"""

import numpy as np
import pytest

from utils.interpolation import clamp, lerp, lerp_toward, map_range


def test_lerp():
    assert lerp(0.0, 10.0, 0.1) == pytest.approx(1.0)
    assert lerp(2.0, 4.0, 0.0) == 2.0
    assert lerp(2.0, 4.0, 1.0) == 4.0


def test_lerp_toward_in_place():
    current = np.zeros((2, 3), dtype=np.float32)
    target = np.full((2, 3), 10.0, dtype=np.float32)
    result = lerp_toward(current, target, 0.5)
    assert result is current
    np.testing.assert_allclose(current, 5.0)


def test_clamp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(1.5, 0, 3) == 1.5


def test_map_range():
    assert map_range(0.5, 0.0, 1.0, -2.0, 2.0) == 0.0
    assert map_range(2.0, 0.0, 1.0, 0.0, 10.0) == 20.0  # No clamping
