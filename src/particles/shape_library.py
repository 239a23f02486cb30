"""
Shape Library
==============

Named target point sets for the particle cloud.

Every ``ShapeId`` maps to one point set and one colour. Point counts are a
property of the shape (a word yields as many points as its glyphs cover),
not of the particle population; the morph engine wraps or truncates.

Cache policy:
- sphere and text shapes are generated once (first use or ``preload()``)
- scatter is regenerated on every request so repeated blasts differ
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np

from utils.performance import Timer
from .text_points import (
    OpenCVTextRasterizer,
    ShapeGenerationError,
    TextRasterizer,
    TextSamplingConfig,
    text_to_points,
)

logger = logging.getLogger(__name__)


class ShapeId(Enum):
    """Target shapes the particle cloud can morph into."""
    SPHERE = "sphere"
    HELLO = "hello"
    GEMINI = "gemini"
    GREAT_WORD = "great-word"
    GREETING_WORD = "greeting-word"
    SCATTER = "scatter"

    @classmethod
    def from_string(cls, name: str) -> "ShapeId":
        """Convert a shape name to ShapeId, SPHERE when unknown."""
        try:
            return cls(name)
        except ValueError:
            return cls.SPHERE

    @property
    def is_text(self) -> bool:
        return self in SHAPE_TEXTS

    @property
    def is_dynamic(self) -> bool:
        """Regenerated on every selection instead of cached."""
        return self is ShapeId.SCATTER


# RGB in [0, 1]
SHAPE_COLORS: Dict[ShapeId, Tuple[float, float, float]] = {
    ShapeId.SPHERE: (1.0, 0.6, 0.0),         # Orange/gold
    ShapeId.HELLO: (0.0, 1.0, 1.0),          # Cyan
    ShapeId.GEMINI: (1.0, 0.0, 1.0),         # Magenta
    ShapeId.GREAT_WORD: (0.0, 1.0, 0.5),     # Green
    ShapeId.GREETING_WORD: (0.5, 0.0, 1.0),  # Purple
    ShapeId.SCATTER: (1.0, 0.2, 0.2),        # Red
}

SHAPE_TEXTS: Dict[ShapeId, str] = {
    ShapeId.HELLO: "Hello",
    ShapeId.GEMINI: "Gemini",
    ShapeId.GREAT_WORD: "නියමයි",
    ShapeId.GREETING_WORD: "ආයුබෝවන්",
}


# =============================================================================
# Generators
# =============================================================================

def sphere_points(count: int, radius: float = 30.0) -> np.ndarray:
    """
    Evenly spread points on a sphere surface (golden spiral).

    For i in [0, count): phi = acos(-1 + 2i/count), theta = sqrt(count*pi)*phi.
    Deterministic for a given count and radius.
    """
    if count <= 0:
        return np.zeros((0, 3), dtype=np.float32)

    i = np.arange(count, dtype=np.float64)
    phi = np.arccos(-1.0 + 2.0 * i / count)
    theta = np.sqrt(count * np.pi) * phi

    points = np.empty((count, 3), dtype=np.float64)
    points[:, 0] = radius * np.cos(theta) * np.sin(phi)
    points[:, 1] = radius * np.sin(theta) * np.sin(phi)
    points[:, 2] = radius * np.cos(phi)
    return points.astype(np.float32)


def scatter_points(
    count: int,
    spread: float = 300.0,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Points uniformly random in a cube of side ``spread`` centred on the origin."""
    rng = rng or np.random.default_rng()
    return ((rng.random((count, 3)) - 0.5) * spread).astype(np.float32)


def cube_points(count: int, size: float = 40.0) -> np.ndarray:
    """Grid points on the six faces of a cube of half-width ``size``.

    The result has 6 * ceil(sqrt(count / 6))**2 points, roughly ``count``.
    """
    per_side = max(2, int(np.ceil(np.sqrt(max(count // 6, 1)))))
    u, v = np.meshgrid(np.linspace(-1.0, 1.0, per_side), np.linspace(-1.0, 1.0, per_side),
                       indexing="ij")
    u, v = u.ravel() * size, v.ravel() * size
    full = np.full_like(u, size)

    faces = [
        (u, v, full), (u, v, -full),      # front / back
        (u, full, v), (u, -full, v),      # top / bottom
        (full, u, v), (-full, u, v),      # right / left
    ]
    return np.concatenate([np.stack(f, axis=1) for f in faces]).astype(np.float32)


def torus_points(count: int, major_radius: float = 30.0, minor_radius: float = 10.0) -> np.ndarray:
    """Points on a torus; the tube angle steps by a prime stride for spread."""
    i = np.arange(count)
    u = i / count * 2.0 * np.pi
    v = ((i * 7) % count) / count * 2.0 * np.pi

    ring = major_radius + minor_radius * np.cos(v)
    return np.stack([ring * np.cos(u), ring * np.sin(u), minor_radius * np.sin(v)],
                    axis=1).astype(np.float32)


# =============================================================================
# Library
# =============================================================================

@dataclass
class ShapeLibraryConfig:
    """Shape generation settings."""
    particle_count: int = 10000  # Sphere/scatter resolution
    sphere_radius: float = 30.0
    scatter_range: float = 300.0
    text: TextSamplingConfig = field(default_factory=TextSamplingConfig)

    @classmethod
    def from_dict(cls, config: dict, particle_count: int = 10000) -> "ShapeLibraryConfig":
        """Create config from the ``shapes`` config section."""
        return cls(
            particle_count=particle_count,
            sphere_radius=config.get("sphere_radius", 30.0),
            scatter_range=config.get("scatter_range", 300.0),
            text=TextSamplingConfig.from_dict(config),
        )


class ShapeLibrary:
    """
    Generates and caches shape point sets.

    Text shapes need a rasterizer; if it cannot produce a surface the
    failure is remembered and re-raised for that shape only. Call
    ``preload()`` at startup to surface every failure at once.

    Example:
        >>> library = ShapeLibrary(ShapeLibraryConfig())
        >>> failures = library.preload()
        >>> for shape_id, error in failures.items():
        ...     print(f"{shape_id.value} unavailable: {error}")
        >>> points = library.points(ShapeId.HELLO)  # (M, 3) float32
    """

    def __init__(
        self,
        config: Optional[ShapeLibraryConfig] = None,
        rasterizer: Optional[TextRasterizer] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or ShapeLibraryConfig()
        self._rasterizer = rasterizer or OpenCVTextRasterizer(
            self.config.text.font_path, self.config.text.font_height
        )
        self._rng = rng or np.random.default_rng()
        self._cache: Dict[ShapeId, np.ndarray] = {}
        self._failed: Dict[ShapeId, ShapeGenerationError] = {}

    def points(self, shape_id: ShapeId) -> np.ndarray:
        """
        Point set for a shape.

        Cached arrays are read-only and shared; scatter is a fresh array.

        Raises:
            ShapeGenerationError: the shape's generator failed
        """
        if shape_id.is_dynamic:
            return scatter_points(self.config.particle_count, self.config.scatter_range, self._rng)

        if shape_id in self._failed:
            raise self._failed[shape_id]

        cached = self._cache.get(shape_id)
        if cached is None:
            try:
                cached = self._generate(shape_id)
            except ShapeGenerationError as e:
                self._failed[shape_id] = e
                raise
            cached.setflags(write=False)
            self._cache[shape_id] = cached
        return cached

    def color(self, shape_id: ShapeId) -> np.ndarray:
        """The shape's RGB colour as a float32 array of shape (3,)."""
        return np.array(SHAPE_COLORS[shape_id], dtype=np.float32)

    def preload(self) -> Dict[ShapeId, ShapeGenerationError]:
        """
        Generate every cached shape now.

        Returns:
            Failures by shape (empty when everything generated)
        """
        failures = {}
        for shape_id in ShapeId:
            if shape_id.is_dynamic:
                continue
            with Timer(shape_id.value) as t:
                try:
                    points = self.points(shape_id)
                except ShapeGenerationError as e:
                    failures[shape_id] = e
                    logger.error("Shape '%s' unavailable: %s", shape_id.value, e)
                    continue
            logger.info("Shape '%s': %d points (%.1fms)", shape_id.value, len(points), t.elapsed_ms)
        return failures

    def is_available(self, shape_id: ShapeId) -> bool:
        """False once a shape's generator has failed."""
        return shape_id not in self._failed

    def _generate(self, shape_id: ShapeId) -> np.ndarray:
        if shape_id is ShapeId.SPHERE:
            return sphere_points(self.config.particle_count, self.config.sphere_radius)
        return text_to_points(SHAPE_TEXTS[shape_id], self._rasterizer, self.config.text)
