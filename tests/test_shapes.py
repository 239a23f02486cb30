"""
Tests for shape generation and the shape library.
"""

import numpy as np
import pytest

from particles.shape_library import (
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
from particles.text_points import RasterizerUnavailableError, ShapeGenerationError

from conftest import BrokenRasterizer, StripeRasterizer


class TestGenerators:

    def test_sphere_radius(self):
        points = sphere_points(1000, 30.0)
        assert points.shape == (1000, 3)
        assert points.dtype == np.float32
        np.testing.assert_allclose(np.linalg.norm(points, axis=1), 30.0, rtol=1e-4)

    def test_sphere_points_distinct(self):
        points = sphere_points(1000, 30.0)
        assert len(np.unique(points.round(4), axis=0)) == 1000

    def test_sphere_deterministic(self):
        np.testing.assert_array_equal(sphere_points(500), sphere_points(500))

    def test_sphere_empty(self):
        assert sphere_points(0).shape == (0, 3)

    def test_sphere_starts_at_south_pole(self):
        z = sphere_points(1000, 30.0)[:, 2]
        assert z[0] == pytest.approx(-30.0)
        assert z.max() < 30.0

    def test_scatter_range(self):
        points = scatter_points(5000, 300.0, np.random.default_rng(1))
        assert points.shape == (5000, 3)
        assert np.all(np.abs(points) <= 150.0)

    def test_scatter_differs_between_calls(self):
        rng = np.random.default_rng(7)
        assert not np.array_equal(scatter_points(100, rng=rng), scatter_points(100, rng=rng))

    def test_cube_on_faces(self):
        points = cube_points(600, size=40.0)
        assert points.shape[1] == 3
        # Every point lies on at least one face
        assert np.all(np.isclose(np.abs(points), 40.0).any(axis=1))

    def test_torus_radii(self):
        points = torus_points(1000, 30.0, 10.0)
        ring = np.hypot(points[:, 0], points[:, 1])
        tube = np.hypot(ring - 30.0, points[:, 2])
        np.testing.assert_allclose(tube, 10.0, rtol=1e-4)


class TestShapeId:

    def test_values(self):
        assert ShapeId("great-word") is ShapeId.GREAT_WORD
        assert ShapeId.from_string("nope") is ShapeId.SPHERE

    def test_tables_are_total(self):
        assert set(SHAPE_COLORS) == set(ShapeId)
        assert set(SHAPE_TEXTS) == {s for s in ShapeId if s.is_text}

    def test_only_scatter_dynamic(self):
        assert [s for s in ShapeId if s.is_dynamic] == [ShapeId.SCATTER]


class TestShapeLibrary:

    @pytest.fixture
    def library(self, stripe_rasterizer):
        config = ShapeLibraryConfig(particle_count=2000)
        config.text.canvas_size = 256
        config.text.step = 4
        return ShapeLibrary(config, stripe_rasterizer, np.random.default_rng(0))

    def test_sphere_cached(self, library):
        first = library.points(ShapeId.SPHERE)
        assert first.shape == (2000, 3)
        assert library.points(ShapeId.SPHERE) is first

    def test_cached_points_read_only(self, library):
        points = library.points(ShapeId.SPHERE)
        with pytest.raises(ValueError):
            points[0, 0] = 1.0

    def test_text_rasterized_once(self, library, stripe_rasterizer):
        library.points(ShapeId.HELLO)
        library.points(ShapeId.HELLO)
        assert stripe_rasterizer.calls == ["Hello"]

    def test_text_points_flat(self, library):
        points = library.points(ShapeId.GEMINI)
        assert len(points) > 0
        assert np.all(points[:, 2] == 0.0)

    def test_scatter_fresh(self, library):
        a = library.points(ShapeId.SCATTER)
        b = library.points(ShapeId.SCATTER)
        assert a is not b
        assert not np.array_equal(a, b)
        assert a.shape == (2000, 3)

    def test_color(self, library):
        np.testing.assert_allclose(library.color(ShapeId.SPHERE), [1.0, 0.6, 0.0], rtol=1e-6)
        assert library.color(ShapeId.SCATTER).dtype == np.float32

    def test_preload_ok(self, library):
        assert library.preload() == {}
        assert all(library.is_available(s) for s in ShapeId)

    def test_failure_remembered(self):
        library = ShapeLibrary(ShapeLibraryConfig(particle_count=100), BrokenRasterizer())
        with pytest.raises(RasterizerUnavailableError):
            library.points(ShapeId.HELLO)
        assert not library.is_available(ShapeId.HELLO)
        with pytest.raises(ShapeGenerationError):
            library.points(ShapeId.HELLO)
        # Non-text shapes are unaffected
        assert library.points(ShapeId.SPHERE).shape == (100, 3)

    def test_preload_reports_failures(self):
        library = ShapeLibrary(ShapeLibraryConfig(particle_count=100), BrokenRasterizer())
        failures = library.preload()
        assert set(failures) == {ShapeId.HELLO, ShapeId.GEMINI,
                                 ShapeId.GREAT_WORD, ShapeId.GREETING_WORD}
        assert all(isinstance(e, RasterizerUnavailableError) for e in failures.values())

    def test_empty_text_is_not_failure(self):
        config = ShapeLibraryConfig(particle_count=100)
        config.text.canvas_size = 64
        library = ShapeLibrary(config, StripeRasterizer(lit=False))
        assert library.preload() == {}
        assert library.points(ShapeId.HELLO).shape == (0, 3)

    def test_config_from_dict(self):
        config = ShapeLibraryConfig.from_dict(
            {"sphere_radius": 12, "text_step": 2, "font_path": "/tmp/font.ttf"},
            particle_count=50,
        )
        assert config.particle_count == 50
        assert config.sphere_radius == 12
        assert config.scatter_range == 300.0
        assert config.text.step == 2
        assert config.text.font_path == "/tmp/font.ttf"
