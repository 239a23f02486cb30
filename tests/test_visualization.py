"""
Tests for the particle renderer.
"""

import numpy as np
import pytest

from utils.visualization import (
    HudInfo,
    ParticleRenderer,
    RendererConfig,
    hud_text,
    rotation_matrix,
)


@pytest.fixture
def renderer():
    config = RendererConfig(width=320, height=240, starfield_count=0, show_preview=True)
    return ParticleRenderer(config, np.random.default_rng(0))


class TestProjection:

    def test_origin_projects_to_centre(self, renderer):
        cols, rows, visible = renderer.project(np.zeros((1, 3)))
        assert visible[0]
        assert (cols[0], rows[0]) == (160, 120)

    def test_up_is_up(self, renderer):
        cols, rows, _ = renderer.project(np.array([[0.0, 10.0, 0.0]]))
        assert rows[0] < 120

    def test_behind_camera_hidden(self, renderer):
        _, _, visible = renderer.project(np.array([[0.0, 0.0, 150.0]]))
        assert not visible[0]

    def test_flat_buffer_accepted(self, renderer):
        cols, rows, visible = renderer.project(np.zeros(9, dtype=np.float32))
        assert len(cols) == 3 and visible.all()

    def test_rotation_matrix(self):
        rot = rotation_matrix(0.0, np.pi / 2)
        np.testing.assert_allclose(np.array([1.0, 0.0, 0.0]) @ rot.T, [0.0, 0.0, -1.0], atol=1e-6)
        np.testing.assert_allclose(rotation_matrix(0.3, -0.2) @ rotation_matrix(0.3, -0.2).T,
                                   np.eye(3), atol=1e-6)


class TestRender:

    def test_blank_frame(self, renderer):
        image = renderer.render(np.zeros((0, 3)), np.zeros((0, 3)))
        assert image.shape == (240, 320, 3)
        assert image.dtype == np.uint8
        assert image.max() == 0

    def test_particle_colour(self, renderer):
        # Pure red particle at the origin lands in the red channel (BGR index 2)
        image = renderer.render(np.zeros(3, dtype=np.float32),
                                np.array([1.0, 0.0, 0.0], dtype=np.float32))
        assert image[120, 160, 2] > 0
        assert image[120, 160, 0] == 0

    def test_starfield_turns(self):
        renderer = ParticleRenderer(RendererConfig(width=64, height=48, starfield_count=10))
        renderer.render(np.zeros((0, 3)), np.zeros((0, 3)))
        renderer.render(np.zeros((0, 3)), np.zeros((0, 3)))
        assert renderer.starfield.rotation_y == pytest.approx(0.001)
        assert renderer.starfield.rotation_x == pytest.approx(0.0004)

    def test_hud_and_preview(self, renderer):
        preview = np.full((72, 128, 3), 200, dtype=np.uint8)
        image = renderer.render(np.zeros((0, 3)), np.zeros((0, 3)),
                                hud=HudInfo(label="Hello", gesture="index", fps=60.0),
                                preview=preview)
        assert image.max() > 0
        # Preview occupies the bottom-right corner
        assert image[-15, -15].tolist() == [200, 200, 200]

    def test_hud_disabled(self, renderer):
        renderer.config.show_hud = False
        renderer.config.show_preview = False
        image = renderer.render(np.zeros((0, 3)), np.zeros((0, 3)), hud=HudInfo(label="Hello"),
                                preview=np.full((10, 10, 3), 255, dtype=np.uint8))
        assert image.max() == 0


class TestHudText:

    def test_sinhala_label(self):
        assert hud_text("නියමයි (Great)") == "(Great)"

    def test_ascii_unchanged(self):
        assert hud_text("BLAST!") == "BLAST!"

    def test_all_non_ascii(self):
        assert hud_text("ආයුබෝවන්") == ""


class TestRendererConfig:

    def test_from_dict(self):
        config = RendererConfig.from_dict({"fov": 60, "starfield_count": 10},
                                          {"size": 2.0, "opacity": 0.5})
        assert config.fov == 60
        assert config.starfield_count == 10
        assert config.point_size == 2.0
        assert config.opacity == 0.5
        assert config.camera_distance == 100.0
