"""Tests for the JSON configuration service."""

import json

from easycrop.services.config_service import DEFAULT_CONFIG, ConfigService


def test_missing_file_is_created_with_defaults(tmp_path):
    path = tmp_path / "easycrop" / "config.json"

    config = ConfigService(path)

    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert config.minimum_stroke_length == 10.0
    assert config.edge_clamp_policy == "single_axis"
    assert config.default_crop_mode is None
    assert config.log_level == "INFO"


def test_user_values_are_merged_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"lasso_alpha": 120, "edge_gesture_margin": 0}), encoding="utf-8")

    config = ConfigService(path)

    assert config.lasso_alpha == 120
    assert config.edge_gesture_margin == 0
    assert config.crop_dash_pattern == [10, 20]
    # New default keys are written back
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["background_color"] == "#ffffff"
    assert saved["lasso_alpha"] == 120


def test_corrupted_file_is_recreated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    config = ConfigService(path)

    assert config.crop_stroke_width == 5
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_CONFIG


def test_non_object_file_is_recreated(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    config = ConfigService(path)

    assert config.get("lasso_alpha") == 80


def test_set_is_in_memory_until_saved(tmp_path):
    path = tmp_path / "config.json"
    config = ConfigService(path)

    config.set("default_crop_mode", "freehand")
    assert config.default_crop_mode == "freehand"
    assert json.loads(path.read_text(encoding="utf-8"))["default_crop_mode"] is None

    config.save()
    assert json.loads(path.read_text(encoding="utf-8"))["default_crop_mode"] == "freehand"
