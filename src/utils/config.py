"""
Configuration loading.

Reads ``config/config.yaml`` with PyYAML and deep-merges it over the
built-in defaults, so a partial file only needs the keys it changes.
Values of the wrong type are reported as warnings; they are not fatal.
"""

import copy
import os
import logging
from typing import Any, List, Optional

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")
DEFAULT_CONFIG_PATH = os.path.join(_CONFIG_DIR, "config.yaml")

DEFAULT_CONFIG = {
    "particles": {
        "count": 10000,
        "size": 1.2,
        "opacity": 0.9,
        "initial_range": 100.0,
        "initial_color": [0.0, 1.0, 1.0],
    },
    "shapes": {
        "sphere_radius": 30.0,
        "scatter_range": 300.0,
        "text_canvas_size": 2048,
        "text_step": 8,
        "text_scale": 0.12,
        "text_threshold": 128,
        "font_path": None,
        "font_height": 350,
    },
    "animation": {
        "default_lerp": 0.05,
        "scatter_lerp": 0.1,
        "color_lerp": 0.05,
        "rotation_lerp": 0.05,
        "scatter_rotation_increment": 0.02,
        "hand_rotation_multiplier": 4.0,
    },
    "recognition": {
        "throttle_ms": 100,
        "open_palm_finger_count": 4,
        "threaded": False,
    },
    "mediapipe": {
        "model_path": None,
        "max_num_hands": 1,
        "min_detection_confidence": 0.5,
        "min_presence_confidence": 0.5,
        "min_tracking_confidence": 0.5,
    },
    "camera": {
        "device_id": 0,
        "width": 1280,
        "height": 720,
        "mirror": True,
    },
    "visualization": {
        "window_name": "Particle Morph",
        "width": 1280,
        "height": 720,
        "camera_distance": 100.0,
        "fov": 75.0,
        "show_hud": True,
        "show_preview": True,
        "preview_scale": 0.25,
        "starfield_count": 2000,
        "starfield_range": 400.0,
        "starfield_opacity": 0.4,
        "starfield_speed_y": 0.0005,
        "starfield_speed_x": 0.0002,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
    },
    "performance": {
        "target_fps": 60,
        "report_interval_s": 10.0,
    },
}

# Expected types of the fields worth checking
_CONFIG_SCHEMA = {
    "particles": {
        "count": int,
        "size": float,
        "opacity": float,
        "initial_range": float,
        "initial_color": list,
    },
    "shapes": {
        "sphere_radius": float,
        "scatter_range": float,
        "text_canvas_size": int,
        "text_step": int,
        "text_scale": float,
        "text_threshold": int,
        "font_height": int,
    },
    "animation": {
        "default_lerp": float,
        "scatter_lerp": float,
        "color_lerp": float,
        "rotation_lerp": float,
    },
    "recognition": {
        "throttle_ms": float,
        "open_palm_finger_count": int,
    },
    "mediapipe": {
        "max_num_hands": int,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
    },
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
        "mirror": bool,
    },
    "visualization": {
        "camera_distance": float,
        "fov": float,
        "starfield_count": int,
    },
    "performance": {
        "target_fps": float,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> List[str]:
    """
    Check field types against the schema.

    Returns:
        One message per problem (empty when valid)
    """
    problems = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if section is None:
            problems.append(f"Missing config section: '{section_name}'")
            continue
        if not isinstance(section, dict):
            problems.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            # bool is an int subclass; only accept it where bool is expected
            if isinstance(value, bool) and expected_type is not bool:
                ok = False
            elif expected_type is float:
                ok = isinstance(value, (int, float))
            else:
                ok = isinstance(value, expected_type)
            if not ok:
                problems.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )
    return problems


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load the YAML config merged over ``DEFAULT_CONFIG``.

    A missing file yields the defaults with a warning. Malformed YAML raises
    ``yaml.YAMLError``.
    """
    config_path = config_path or DEFAULT_CONFIG_PATH
    data = {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)

    if not isinstance(data, dict):
        logger.warning("Config root should be a mapping, got %s; using defaults",
                       type(data).__name__)
        data = {}

    merged = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)

    problems = validate_config(merged)
    for problem in problems:
        logger.warning("Config validation: %s", problem)
    if not problems:
        logger.debug("Config validation passed")

    return merged


def get_value(data: dict, key_path: str, default: Any = None) -> Any:
    """Nested lookup with dot notation: ``get_value(cfg, "camera.width")``."""
    value = data
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
