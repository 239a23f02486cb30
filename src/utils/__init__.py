"""Utility modules: config, logging, interpolation, performance and rendering."""
from .interpolation import clamp, lerp, lerp_toward, map_range
from .performance import PerformanceMonitor, Timer

__all__ = ["clamp", "lerp", "lerp_toward", "map_range", "PerformanceMonitor", "Timer"]
