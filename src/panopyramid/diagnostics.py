from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List

from .config import PyramidConfig
from .geometry import nb_tiles, nb_tiles_per_axis, tile_size
from .levels import level_to_fov
from .tile import TextureState
from .tile_cache import TileCache


@dataclass(frozen=True)
class LevelRow:
    level: int
    fov: float
    tiles_per_axis: int
    tiles_per_face: int
    tiles_total: int
    tile_size: float


def level_table(config: PyramidConfig) -> List[LevelRow]:
    """One row per pyramid level with its fov threshold and tile counts."""
    rows = []
    for level in range(config.level_min, config.level_max + 1):
        rows.append(LevelRow(
            level=level,
            fov=level_to_fov(level),
            tiles_per_axis=nb_tiles_per_axis(level),
            tiles_per_face=nb_tiles(level),
            tiles_total=6 * nb_tiles(level),
            tile_size=tile_size(level, config.cube_size),
        ))
    return rows


def format_level_table(rows: List[LevelRow]) -> str:
    header = f"{'level':>5}  {'fov<=':>9}  {'tiles/axis':>10}  {'tiles':>9}  {'tile size':>10}"
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(
            f"{row.level:>5}  {row.fov:>9.4f}  {row.tiles_per_axis:>10}  "
            f"{row.tiles_total:>9}  {row.tile_size:>10.3f}"
        )
    return "\n".join(lines)


def level_table_dicts(rows: List[LevelRow]) -> List[Dict[str, float]]:
    return [asdict(row) for row in rows]


def cache_report(cache: TileCache) -> Dict[int, Dict[str, int]]:
    """Per-level tile counts by texture state."""
    report: Dict[int, Dict[str, int]] = {}
    for level in cache.levels():
        counts = {state.value: 0 for state in TextureState}
        for tile in cache.tiles(level):
            counts[tile.state.value] += 1
        counts["total"] = cache.level_size(level)
        report[level] = counts
    return report
