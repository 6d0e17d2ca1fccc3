"""Pyramid configuration.

:class:`PyramidConfig` collects the tuneable parameters of the tile pyramid.
Presets are provided for common cases:

>>> from panopyramid.config import DEFAULT_PYRAMID, LOW_MEMORY_PYRAMID
>>> DEFAULT_PYRAMID.cube_size
2000.0

Configurations round-trip through JSON with :func:`save_config` /
:func:`load_config`.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

# Far render boundary of the scene.  The background cube is twice as wide so
# that it always encloses the foreground content.
DEPTH_FAR = 1000.0


@dataclass(frozen=True)
class PyramidConfig:
    """All tuneable parameters of the tile pyramid.

    Attributes
    ----------
    level_min : int
        Coarsest pyramid level (one tile per face at level 0).
    level_max : int
        Finest pyramid level.
    depth_far : float
        Far render boundary; the cube edge is ``2 * depth_far``.
    preload : bool
        Create the full tile set of the initial level at boot.
    prefetch : bool
        Request the children of every substitute ancestor so finer
        textures start streaming before they are needed.
    max_tiles_per_level : int or None
        Per-level cache cap.  ``None`` keeps every tile for the renderer's
        lifetime; otherwise tiles that are neither drawn nor on the path
        of a visible cell are evicted oldest first.
    """

    level_min: int = 0
    level_max: int = 10
    depth_far: float = DEPTH_FAR
    preload: bool = True
    prefetch: bool = True
    max_tiles_per_level: Optional[int] = None

    def __post_init__(self) -> None:
        if self.level_min < 0:
            raise ValueError("level_min must be >= 0")
        if self.level_max < self.level_min:
            raise ValueError("level_max must be >= level_min")
        if self.depth_far <= 0:
            raise ValueError("depth_far must be > 0")
        if self.max_tiles_per_level is not None and self.max_tiles_per_level < 1:
            raise ValueError("max_tiles_per_level must be >= 1 or None")

    @property
    def cube_size(self) -> float:
        return 2.0 * self.depth_far

    def with_overrides(self, **changes: Any) -> "PyramidConfig":
        """Copy with *changes* applied (validated again)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PyramidConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown pyramid config keys: {unknown}")
        return cls(**data)


# ═══════════════════════════════════════════════════════════════════
# Presets
# ═══════════════════════════════════════════════════════════════════

DEFAULT_PYRAMID = PyramidConfig()

LOW_MEMORY_PYRAMID = PyramidConfig(
    level_max=6,
    prefetch=False,
    max_tiles_per_level=256,
)


# ═══════════════════════════════════════════════════════════════════
# Serialisation
# ═══════════════════════════════════════════════════════════════════

def save_config(config: PyramidConfig, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")


def load_config(path: Union[str, Path]) -> PyramidConfig:
    """Load a :class:`PyramidConfig` from JSON; missing keys take defaults."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return PyramidConfig.from_dict(data)
