"""
Tests for configuration loading and component config construction.
"""

import logging

import pytest
import yaml

from utils.config import (
    DEFAULT_CONFIG,
    DEFAULT_CONFIG_PATH,
    _deep_merge,
    get_value,
    load_config,
    validate_config,
)
from particles.morph_engine import MorphEngineConfig
from particles.shape_library import ShapeLibraryConfig
from recognition.gesture_throttle import ThrottleGateConfig
from utils.visualization import RendererConfig


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            config = load_config(str(tmp_path / "nope.yaml"))
        assert config == DEFAULT_CONFIG
        assert "not found" in caplog.text

    def test_defaults_not_mutated(self, tmp_path):
        config = load_config(str(tmp_path / "nope.yaml"))
        config["particles"]["count"] = 1
        assert DEFAULT_CONFIG["particles"]["count"] == 10000

    def test_partial_file_merged(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"particles": {"count": 2000},
                                        "recognition": {"throttle_ms": 250}}))
        config = load_config(str(path))
        assert config["particles"]["count"] == 2000
        assert config["particles"]["size"] == 1.2
        assert config["recognition"]["throttle_ms"] == 250
        assert config["animation"]["scatter_lerp"] == 0.1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_non_mapping_root(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")
        with caplog.at_level(logging.WARNING):
            assert load_config(str(path)) == DEFAULT_CONFIG
        assert "mapping" in caplog.text

    def test_invalid_type_warns(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"particles": {"count": "lots"}}))
        with caplog.at_level(logging.WARNING):
            config = load_config(str(path))
        assert config["particles"]["count"] == "lots"
        assert "particles.count" in caplog.text

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("particles: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(str(path))

    def test_shipped_config_is_valid(self):
        config = load_config(DEFAULT_CONFIG_PATH)
        assert validate_config(config) == []
        assert config["particles"]["count"] == 10000


class TestValidation:

    def test_defaults_valid(self):
        assert validate_config(DEFAULT_CONFIG) == []

    def test_int_accepted_for_float(self):
        data = _deep_merge(DEFAULT_CONFIG, {"animation": {"default_lerp": 1}})
        assert validate_config(data) == []

    def test_bool_rejected_for_int(self):
        data = _deep_merge(DEFAULT_CONFIG, {"particles": {"count": True}})
        assert any("particles.count" in p for p in validate_config(data))

    def test_missing_section(self):
        problems = validate_config({})
        assert "Missing config section: 'particles'" in problems

    def test_section_not_dict(self):
        data = _deep_merge(DEFAULT_CONFIG, {"camera": 3})
        assert any("'camera' should be a dict" in p for p in validate_config(data))


class TestHelpers:

    def test_deep_merge(self):
        merged = _deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": 4}

    def test_get_value(self):
        assert get_value(DEFAULT_CONFIG, "camera.width") == 1280
        assert get_value(DEFAULT_CONFIG, "camera.missing", 5) == 5


class TestComponentConfigs:

    def test_sections_build_components(self):
        config = DEFAULT_CONFIG
        engine = MorphEngineConfig.from_dict(config["particles"], config["animation"])
        shapes = ShapeLibraryConfig.from_dict(config["shapes"], config["particles"]["count"])
        throttle = ThrottleGateConfig.from_dict(config["recognition"])
        renderer = RendererConfig.from_dict(config["visualization"], config["particles"])

        assert engine.particle_count == shapes.particle_count == 10000
        assert engine.initial_color == (0.0, 1.0, 1.0)
        assert shapes.text.canvas_size == 2048
        assert throttle.min_interval_ms == 100.0
        assert renderer.fov == 75.0
        assert renderer.point_size == 1.2
        assert renderer.starfield_count == 2000
