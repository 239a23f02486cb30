"""
Morph Engine
=============

Owns the live particle arrays and eases them toward the active shape.

The engine is driven by its host:
- ``set_target(shape_id)`` whenever the chosen shape may have changed
- ``tick()`` once per rendered frame

Arrays are allocated once and mutated in place, so ``position_buffer`` and
``color_buffer`` stay valid views for the renderer across frames.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from utils.interpolation import lerp_toward
from .shape_library import ShapeId, ShapeLibrary, scatter_points
from .text_points import ShapeGenerationError

logger = logging.getLogger(__name__)

FALLBACK_SHAPE = ShapeId.SPHERE


class EngineState(Enum):
    IDLE = "idle"          # No target yet; tick does nothing
    MORPHING = "morphing"  # Easing toward the active shape


@dataclass
class MorphEngineConfig:
    """Particle population and easing factors."""
    particle_count: int = 10000
    initial_range: float = 100.0  # Start positions uniform in [-range, range]
    initial_color: Tuple[float, float, float] = (0.0, 1.0, 1.0)
    default_lerp: float = 0.05
    scatter_lerp: float = 0.1
    color_lerp: float = 0.05

    @classmethod
    def from_dict(cls, particles: dict, animation: Optional[dict] = None) -> "MorphEngineConfig":
        """Create config from the ``particles`` and ``animation`` sections."""
        animation = animation or {}
        return cls(
            particle_count=particles.get("count", 10000),
            initial_range=particles.get("initial_range", 100.0),
            initial_color=tuple(particles.get("initial_color", (0.0, 1.0, 1.0))),
            default_lerp=animation.get("default_lerp", 0.05),
            scatter_lerp=animation.get("scatter_lerp", 0.1),
            color_lerp=animation.get("color_lerp", 0.05),
        )


class MorphEngine:
    """
    Particle state plus per-frame interpolation toward a target shape.

    Target construction wraps the shape's points over the particle count
    (``target[i] = points[i % M]``). A shape that failed to generate or has
    no points is replaced by the fallback shape's points; its colour is
    still the requested shape's.

    Example:
        >>> engine = MorphEngine(MorphEngineConfig(particle_count=10000), library)
        >>> engine.set_target(ShapeId.SPHERE)
        True
        >>> engine.tick()
        >>> renderer.render(engine.position_buffer, engine.color_buffer)
    """

    def __init__(
        self,
        config: Optional[MorphEngineConfig] = None,
        library: Optional[ShapeLibrary] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or MorphEngineConfig()
        self.library = library or ShapeLibrary()

        n = self.config.particle_count
        rng = rng or np.random.default_rng()

        self.positions = scatter_points(n, 2.0 * self.config.initial_range, rng)
        self.colors = np.empty((n, 3), dtype=np.float32)
        self.colors[:] = self.config.initial_color

        self.target_positions: Optional[np.ndarray] = None
        self.target_colors: Optional[np.ndarray] = None
        self._active: Optional[ShapeId] = None
        self._indices = np.arange(n)

        # Each fallback is warned about once
        self._warned: List[ShapeId] = []

    @property
    def particle_count(self) -> int:
        return self.config.particle_count

    @property
    def active_shape(self) -> Optional[ShapeId]:
        return self._active

    @property
    def state(self) -> EngineState:
        return EngineState.IDLE if self._active is None else EngineState.MORPHING

    @property
    def position_buffer(self) -> np.ndarray:
        """Flat (3N,) float32 view of the live positions."""
        return self.positions.reshape(-1)

    @property
    def color_buffer(self) -> np.ndarray:
        """Flat (3N,) float32 view of the live colours."""
        return self.colors.reshape(-1)

    def set_target(self, shape_id: ShapeId) -> bool:
        """
        Make ``shape_id`` the active shape.

        Returns:
            False if it was already active (targets untouched), True otherwise
        """
        if shape_id is self._active:
            return False

        points = self._resolve_points(shape_id)
        n = self.config.particle_count

        self.target_positions = np.take(points, self._indices % len(points), axis=0)
        self.target_colors = np.empty((n, 3), dtype=np.float32)
        self.target_colors[:] = self.library.color(shape_id)

        previous = self._active
        self._active = shape_id
        logger.debug("Target %s -> %s (%d source points)",
                     previous.value if previous else None, shape_id.value, len(points))
        return True

    def tick(self) -> None:
        """Advance one frame. No-op until a target is set."""
        if self.target_positions is None:
            return

        factor = (self.config.scatter_lerp if self._active is ShapeId.SCATTER
                  else self.config.default_lerp)
        lerp_toward(self.positions, self.target_positions, factor)
        lerp_toward(self.colors, self.target_colors, self.config.color_lerp)

    def _resolve_points(self, shape_id: ShapeId) -> np.ndarray:
        try:
            points = self.library.points(shape_id)
        except ShapeGenerationError as e:
            self._warn_fallback(shape_id, f"unavailable ({e})")
            return self.library.points(FALLBACK_SHAPE)

        if len(points) == 0:
            self._warn_fallback(shape_id, "has no points")
            return self.library.points(FALLBACK_SHAPE)
        return points

    def _warn_fallback(self, shape_id: ShapeId, reason: str) -> None:
        if shape_id not in self._warned:
            self._warned.append(shape_id)
            logger.warning("Shape '%s' %s; using %s points",
                           shape_id.value, reason, FALLBACK_SHAPE.value)
