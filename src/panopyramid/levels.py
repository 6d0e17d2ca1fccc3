"""Level selection — camera field of view to pyramid level.

A level-1 tile spans 90° of a face edge at 90° field of view; every halving
of the field of view needs one level finer::

    level = clamp(floor(1 - log2(fov / 90)), level_min, level_max)
"""

from __future__ import annotations

import logging
import math

from .addressing import DEFAULT_LEVEL_MAX, DEFAULT_LEVEL_MIN
from .config import PyramidConfig
from .errors import LevelOutOfRange

logger = logging.getLogger(__name__)


def clamp_level(level: int, level_min: int, level_max: int, *, strict: bool = False) -> int:
    """Clamp *level* into ``[level_min, level_max]``.

    With *strict* an out-of-range level raises :class:`LevelOutOfRange`.
    """
    if level_min <= level <= level_max:
        return level
    if strict:
        raise LevelOutOfRange(
            f"Level {level} outside [{level_min}, {level_max}]"
        )
    return max(level_min, min(level_max, level))


def fov_to_level(
    fov: float,
    level_min: int = DEFAULT_LEVEL_MIN,
    level_max: int = DEFAULT_LEVEL_MAX,
) -> int:
    """Pyramid level for a camera field of view in degrees."""
    if fov <= 0:
        raise ValueError(f"Field of view must be > 0, got {fov}")
    level = math.floor(1 - math.log2(fov / 90.0))
    return clamp_level(level, level_min, level_max)


def level_to_fov(level: int) -> float:
    """Field of view threshold at which *level* is reached.

    Only an approximate inverse of :func:`fov_to_level` (floor and clamp).
    """
    return 90.0 / 2 ** level


class LevelSelector:
    """Holds the pyramid state and follows camera field of view changes.

    Parameters
    ----------
    config : PyramidConfig
        Level bounds and cube size.
    level : int, optional
        Initial level; defaults to ``config.level_min``.
    """

    def __init__(self, config: PyramidConfig, level: int | None = None) -> None:
        self._config = config
        self._level = clamp_level(
            config.level_min if level is None else level,
            config.level_min,
            config.level_max,
        )

    @property
    def level(self) -> int:
        return self._level

    @property
    def level_min(self) -> int:
        return self._config.level_min

    @property
    def level_max(self) -> int:
        return self._config.level_max

    @property
    def cube_size(self) -> float:
        return self._config.cube_size

    def level_for_fov(self, fov: float) -> int:
        return fov_to_level(fov, self.level_min, self.level_max)

    def select_level(self, level: int) -> int:
        """Make *level* current, clamping it silently into range."""
        clamped = clamp_level(level, self.level_min, self.level_max)
        if clamped != level:
            logger.debug("Level %d clamped to %d", level, clamped)
        if clamped != self._level:
            logger.info("Select new level: %d", clamped)
        self._level = clamped
        return clamped

    def on_fov_change(self, fov: float) -> bool:
        """Camera callback.  Returns ``True`` if the level changed."""
        level = self.level_for_fov(fov)
        if level == self._level:
            return False
        self.select_level(level)
        return True

    def __repr__(self) -> str:
        return (
            f"LevelSelector(level={self._level}, "
            f"range=[{self.level_min}, {self.level_max}])"
        )
