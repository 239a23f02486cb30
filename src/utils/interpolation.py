"""
Interpolation helpers for per-frame smoothing.

``lerp_toward`` is the workhorse of the morph engine: exponential smoothing
of a whole particle array in place, one step per frame. Convergence is
asymptotic; there is no "arrived" state.
"""

import numpy as np


def lerp(start: float, end: float, factor: float) -> float:
    """Linear interpolation: factor 0 -> start, 1 -> end."""
    return start + (end - start) * factor


def lerp_toward(current: np.ndarray, target: np.ndarray, factor: float) -> np.ndarray:
    """
    Move ``current`` a fraction ``factor`` of the way to ``target``, in place.

    Args:
        current: Array mutated in place (e.g. N x 3 positions)
        target: Array of the same shape
        factor: Fraction of the remaining distance closed this step

    Returns:
        ``current`` (same object)
    """
    current += (target - current) * factor
    return current


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value to [low, high]."""
    return min(max(value, low), high)


def map_range(value: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Map value from one range to another (no clamping)."""
    return (value - in_min) * (out_max - out_min) / (in_max - in_min) + out_min
