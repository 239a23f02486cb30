"""
Tests for the particle morph engine.
"""

import numpy as np
import pytest

from particles.morph_engine import EngineState, MorphEngine, MorphEngineConfig
from particles.shape_library import SHAPE_COLORS, ShapeId, ShapeLibrary, ShapeLibraryConfig

from conftest import BrokenRasterizer, StripeRasterizer


def make_library(count=500, rasterizer=None):
    config = ShapeLibraryConfig(particle_count=count)
    config.text.canvas_size = 128
    config.text.step = 4
    return ShapeLibrary(config, rasterizer or StripeRasterizer(), np.random.default_rng(3))


class FixedLibrary(ShapeLibrary):
    """Library whose sphere is a fixed point set."""

    def __init__(self, points):
        super().__init__(ShapeLibraryConfig(particle_count=len(points)), StripeRasterizer())
        self._fixed = np.asarray(points, dtype=np.float32)

    def points(self, shape_id):
        return self._fixed


class TestMorphEngine:

    @pytest.fixture
    def engine(self):
        return MorphEngine(MorphEngineConfig(particle_count=500), make_library(),
                           np.random.default_rng(0))

    def test_initial_state(self, engine):
        assert engine.state == EngineState.IDLE
        assert engine.active_shape is None
        assert engine.positions.shape == (500, 3)
        assert np.all(np.abs(engine.positions) <= 100.0)
        np.testing.assert_array_equal(engine.colors, np.tile([0.0, 1.0, 1.0], (500, 1)))

    def test_untargeted_tick_is_noop(self, engine):
        before = engine.positions.copy()
        engine.tick()
        np.testing.assert_array_equal(engine.positions, before)

    def test_set_target(self, engine):
        assert engine.set_target(ShapeId.SPHERE) is True
        assert engine.state == EngineState.MORPHING
        assert engine.active_shape is ShapeId.SPHERE
        assert engine.target_positions.shape == (500, 3)
        np.testing.assert_allclose(engine.target_colors[0], SHAPE_COLORS[ShapeId.SPHERE])

    def test_set_same_target_is_noop(self, engine):
        engine.set_target(ShapeId.SPHERE)
        targets, colors = engine.target_positions, engine.target_colors
        assert engine.set_target(ShapeId.SPHERE) is False
        assert engine.target_positions is targets
        assert engine.target_colors is colors

    def test_targets_wrap_short_shapes(self):
        points = [[1, 0, 0], [2, 0, 0], [3, 0, 0]]
        engine = MorphEngine(MorphEngineConfig(particle_count=7), FixedLibrary(points))
        engine.set_target(ShapeId.SPHERE)
        np.testing.assert_array_equal(engine.target_positions[:, 0], [1, 2, 3, 1, 2, 3, 1])

    def test_targets_truncate_long_shapes(self):
        points = np.arange(30, dtype=np.float32).reshape(10, 3)
        engine = MorphEngine(MorphEngineConfig(particle_count=4), FixedLibrary(points))
        engine.set_target(ShapeId.SPHERE)
        np.testing.assert_array_equal(engine.target_positions, points[:4])

    def test_tick_convergence(self):
        engine = MorphEngine(MorphEngineConfig(particle_count=1, scatter_lerp=0.1),
                             FixedLibrary([[10.0, 10.0, 10.0]]))
        engine.positions[:] = 0.0
        engine.set_target(ShapeId.SCATTER)

        engine.tick()
        np.testing.assert_allclose(engine.positions[0], [1.0, 1.0, 1.0], rtol=1e-5)

        distance = np.abs(10.0 - engine.positions[0, 0])
        for _ in range(50):
            engine.tick()
            new_distance = np.abs(10.0 - engine.positions[0, 0])
            assert new_distance < distance
            distance = new_distance

    def test_default_factor_for_non_scatter(self):
        engine = MorphEngine(MorphEngineConfig(particle_count=1),
                             FixedLibrary([[20.0, 0.0, 0.0]]))
        engine.positions[:] = 0.0
        engine.set_target(ShapeId.SPHERE)
        engine.tick()
        assert engine.positions[0, 0] == pytest.approx(1.0)

    def test_colors_ease(self, engine):
        engine.set_target(ShapeId.SPHERE)
        engine.tick()
        # Cyan -> orange at 0.05 per tick
        np.testing.assert_allclose(engine.colors[0], [0.05, 0.98, 0.95], rtol=1e-5)

    def test_buffers_are_live_views(self, engine):
        buf = engine.position_buffer
        assert buf.shape == (1500,)
        assert buf.dtype == np.float32
        engine.set_target(ShapeId.SPHERE)
        engine.tick()
        np.testing.assert_array_equal(buf, engine.positions.reshape(-1))
        assert np.shares_memory(engine.color_buffer, engine.colors)

    def test_arrays_not_reallocated(self, engine):
        positions, colors = engine.positions, engine.colors
        for shape in (ShapeId.SPHERE, ShapeId.HELLO, ShapeId.SCATTER):
            engine.set_target(shape)
            engine.tick()
        assert engine.positions is positions
        assert engine.colors is colors

    def test_scatter_targets_fresh_each_time(self, engine):
        engine.set_target(ShapeId.SCATTER)
        first = engine.target_positions.copy()
        engine.set_target(ShapeId.SPHERE)
        engine.set_target(ShapeId.SCATTER)
        assert not np.array_equal(first, engine.target_positions)

    def test_failed_shape_falls_back_to_sphere(self):
        library = make_library(rasterizer=BrokenRasterizer())
        engine = MorphEngine(MorphEngineConfig(particle_count=500), library)
        assert engine.set_target(ShapeId.HELLO) is True
        assert engine.active_shape is ShapeId.HELLO
        np.testing.assert_array_equal(engine.target_positions, library.points(ShapeId.SPHERE))
        # Colour stays the requested shape's
        np.testing.assert_allclose(engine.target_colors[0], SHAPE_COLORS[ShapeId.HELLO])
        engine.tick()

    def test_empty_shape_falls_back_to_sphere(self):
        library = make_library(rasterizer=StripeRasterizer(lit=False))
        engine = MorphEngine(MorphEngineConfig(particle_count=500), library)
        engine.set_target(ShapeId.GEMINI)
        assert np.all(np.isfinite(engine.target_positions))
        np.testing.assert_array_equal(engine.target_positions, library.points(ShapeId.SPHERE))

    def test_config_from_dict(self):
        config = MorphEngineConfig.from_dict(
            {"count": 42, "initial_color": [1, 0, 0]},
            {"scatter_lerp": 0.2},
        )
        assert config.particle_count == 42
        assert config.initial_color == (1, 0, 0)
        assert config.scatter_lerp == 0.2
        assert config.default_lerp == 0.05
