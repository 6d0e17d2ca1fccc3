"""Tests for the pyramid configuration."""

import json

import pytest

from panopyramid.config import (
    DEFAULT_PYRAMID,
    LOW_MEMORY_PYRAMID,
    PyramidConfig,
    load_config,
    save_config,
)


class TestPyramidConfig:

    def test_defaults(self):
        assert DEFAULT_PYRAMID.level_min == 0
        assert DEFAULT_PYRAMID.level_max == 10
        assert DEFAULT_PYRAMID.cube_size == 2000.0
        assert DEFAULT_PYRAMID.max_tiles_per_level is None

    def test_low_memory_preset(self):
        assert LOW_MEMORY_PYRAMID.level_max < DEFAULT_PYRAMID.level_max
        assert LOW_MEMORY_PYRAMID.max_tiles_per_level is not None

    @pytest.mark.parametrize("kwargs", [
        {"level_min": -1},
        {"level_min": 5, "level_max": 4},
        {"depth_far": 0.0},
        {"max_tiles_per_level": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            PyramidConfig(**kwargs)

    def test_with_overrides_validates(self):
        cfg = DEFAULT_PYRAMID.with_overrides(level_max=4)
        assert cfg.level_max == 4
        assert DEFAULT_PYRAMID.level_max == 10
        with pytest.raises(ValueError):
            DEFAULT_PYRAMID.with_overrides(level_max=-3)

    def test_from_dict_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown"):
            PyramidConfig.from_dict({"levelMax": 3})


class TestSerialisation:

    def test_round_trip(self, tmp_path):
        cfg = PyramidConfig(level_max=6, depth_far=10.0, max_tiles_per_level=64)
        path = tmp_path / "sub" / "pyramid.json"
        save_config(cfg, path)
        assert load_config(path) == cfg

    def test_partial_file_uses_defaults(self, tmp_path):
        path = tmp_path / "pyramid.json"
        path.write_text(json.dumps({"level_max": 3}))
        cfg = load_config(path)
        assert cfg.level_max == 3
        assert cfg.depth_far == DEFAULT_PYRAMID.depth_far
