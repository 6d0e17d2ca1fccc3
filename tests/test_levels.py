"""Tests for field-of-view to level mapping and the level selector."""

import logging

import pytest

from panopyramid.config import PyramidConfig
from panopyramid.errors import LevelOutOfRange
from panopyramid.levels import LevelSelector, clamp_level, fov_to_level, level_to_fov


class TestFovToLevel:

    @pytest.mark.parametrize("fov, level", [
        (90.0, 1),
        (45.0, 2),
        (180.0, 0),
        (0.1, 10),
        (120.0, 0),
        (60.0, 1),
        (20.0, 3),
    ])
    def test_known_values(self, fov, level):
        assert fov_to_level(fov) == level

    def test_monotonic_non_increasing(self):
        fovs = [0.01 * 1.07 ** i for i in range(160)]
        levels = [fov_to_level(f) for f in fovs]
        for finer, coarser in zip(levels, levels[1:]):
            assert finer >= coarser

    def test_custom_bounds(self):
        assert fov_to_level(0.1, 0, 6) == 6
        assert fov_to_level(170.0, 2, 6) == 2

    @pytest.mark.parametrize("fov", [0.0, -10.0])
    def test_non_positive_fov_raises(self, fov):
        with pytest.raises(ValueError):
            fov_to_level(fov)


class TestLevelToFov:

    def test_values(self):
        assert level_to_fov(0) == 90.0
        assert level_to_fov(1) == 45.0
        assert level_to_fov(2) == 22.5

    def test_threshold_reaches_next_level(self):
        for level in range(10):
            assert fov_to_level(level_to_fov(level)) == level + 1


class TestClampLevel:

    def test_in_range_unchanged(self):
        assert clamp_level(4, 0, 10) == 4

    def test_clamps(self):
        assert clamp_level(-2, 0, 10) == 0
        assert clamp_level(13, 0, 10) == 10

    def test_strict_raises(self):
        with pytest.raises(LevelOutOfRange):
            clamp_level(13, 0, 10, strict=True)


class TestLevelSelector:

    def test_initial_level_defaults_to_min(self):
        selector = LevelSelector(PyramidConfig(level_min=1, level_max=5))
        assert selector.level == 1

    def test_select_level_clamps_silently(self):
        selector = LevelSelector(PyramidConfig())
        assert selector.select_level(42) == 10
        assert selector.level == 10
        assert selector.select_level(-1) == 0
        assert selector.level == 0

    def test_on_fov_change_updates_level(self):
        selector = LevelSelector(PyramidConfig(), level=1)
        assert selector.on_fov_change(45.0) is True
        assert selector.level == 2

    def test_on_fov_change_same_level(self):
        selector = LevelSelector(PyramidConfig(), level=1)
        assert selector.on_fov_change(80.0) is False
        assert selector.level == 1

    def test_level_change_logged(self, caplog):
        selector = LevelSelector(PyramidConfig(), level=1)
        with caplog.at_level(logging.INFO, logger="panopyramid.levels"):
            selector.on_fov_change(10.0)
        assert "Select new level: 4" in caplog.text

    def test_state_properties(self):
        selector = LevelSelector(PyramidConfig(level_min=1, level_max=7, depth_far=50.0))
        assert selector.level_min == 1
        assert selector.level_max == 7
        assert selector.cube_size == 100.0
