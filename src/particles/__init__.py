"""Particle shapes, morphing and rotation."""
from .morph_engine import EngineState, MorphEngine, MorphEngineConfig
from .rotation import RotationConfig, RotationController
from .shape_library import (
    SHAPE_COLORS,
    SHAPE_TEXTS,
    ShapeId,
    ShapeLibrary,
    ShapeLibraryConfig,
    cube_points,
    scatter_points,
    sphere_points,
    torus_points,
)
from .text_points import (
    OpenCVTextRasterizer,
    RasterizerUnavailableError,
    ShapeGenerationError,
    TextRasterizer,
    TextSamplingConfig,
    sample_raster,
    text_to_points,
)

__all__ = [
    "EngineState",
    "MorphEngine",
    "MorphEngineConfig",
    "RotationConfig",
    "RotationController",
    "SHAPE_COLORS",
    "SHAPE_TEXTS",
    "ShapeId",
    "ShapeLibrary",
    "ShapeLibraryConfig",
    "cube_points",
    "scatter_points",
    "sphere_points",
    "torus_points",
    "OpenCVTextRasterizer",
    "RasterizerUnavailableError",
    "ShapeGenerationError",
    "TextRasterizer",
    "TextSamplingConfig",
    "sample_raster",
    "text_to_points",
]
