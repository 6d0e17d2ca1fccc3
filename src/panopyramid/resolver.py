"""Tile resolution — which tiles to draw for the current level.

For every visible cell of the selected level the resolver picks the best
tile whose texture is ready:

1. the cell's own tile;
2. failing that, the coarsest ready tiles of its cached subtree, if together
   they cover the cell (left over from finer levels, e.g. after zooming out);
3. failing that, the nearest ready ancestor, with any ready finer tiles
   drawn over it;
4. failing that, whatever ready finer tiles the subtree holds;
5. nothing, if no tile on or below the cell is ready yet.

Every tile on the way that has never been asked for is requested from the
texture store, and the children of each substitute ancestor are prefetched
so the next level of refinement starts streaming.  A substitute therefore
stays in the draw set exactly as long as some visible cell still needs it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .addressing import ancestors, children, parent, tile_name
from .config import PyramidConfig
from .frustum import VisibilityFilter
from .models import TileAddress
from .texture_store import TextureStore
from .tile import Tile
from .tile_cache import TileCache

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Outcome of one resolution pass.

    Attributes
    ----------
    level : int
        Level the pass resolved.
    tiles : dict[TileAddress, Tile]
        Render-eligible tiles, in the order they were chosen.
    candidates : list[TileAddress]
        Visible cells of *level*.
    ready, refined, substituted, partial, missing : int
        How each visible cell was served: by its own tile, by finer tiles
        covering it, by a coarser ancestor, by finer tiles covering only part
        of it, or not at all.
    requested : int
        Texture queries issued during the pass.
    """

    level: int
    tiles: Dict[TileAddress, Tile] = field(default_factory=dict)
    candidates: List[TileAddress] = field(default_factory=list)
    ready: int = 0
    refined: int = 0
    substituted: int = 0
    partial: int = 0
    missing: int = 0
    requested: int = 0

    def add(self, tile: Tile) -> None:
        self.tiles.setdefault(tile.address, tile)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Tile):
            return self.tiles.get(item.address) is item
        return item in self.tiles

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.tiles.values())

    def __len__(self) -> int:
        return len(self.tiles)

    @property
    def visible(self) -> int:
        return len(self.candidates)

    @property
    def complete(self) -> bool:
        """``True`` when every visible cell is drawn at the resolved level."""
        return self.ready == self.visible

    def summary(self) -> Dict[str, int]:
        return {
            "level": self.level,
            "visible": self.visible,
            "drawn": len(self.tiles),
            "ready": self.ready,
            "refined": self.refined,
            "substituted": self.substituted,
            "partial": self.partial,
            "missing": self.missing,
            "requested": self.requested,
        }


class TileResolver:
    """Per-frame resolution of visible cells to drawable tiles."""

    def __init__(
        self,
        cache: TileCache,
        store: TextureStore,
        visibility: VisibilityFilter,
        config: PyramidConfig,
    ) -> None:
        self._cache = cache
        self._store = store
        self._visibility = visibility
        self._config = config

    def tile_for(self, address: TileAddress) -> Tile:
        """Cached tile for *address*, creating it (and its ancestors) if needed."""
        tile = self._cache.get(address, touch=True)
        if tile is not None:
            return tile
        parent_tile: Optional[Tile] = None
        if address.level > self._config.level_min:
            parent_tile = self.tile_for(parent(address, self._config.level_min))
        return self._cache.get_or_create(parent_tile, address, tile_name(address))

    def _request(self, tile: Tile, result: Resolution) -> None:
        if tile.request_texture(self._store):
            result.requested += 1

    def _ready_cover(self, address: TileAddress) -> Tuple[List[Tile], bool]:
        """Coarsest ready cached tiles below *address*, and whether they cover it.

        Descends through every tile that is not ready.  A subtree stops at
        the first uncached tile: the cache creates parents before children.
        """
        if address.level >= self._config.level_max:
            return [], False
        found: List[Tile] = []
        covered = True
        for child in children(address, self._config.level_max):
            tile = self._cache.get(child)
            if tile is None:
                covered = False
            elif tile.ready:
                found.append(tile)
            else:
                below, child_covered = self._ready_cover(child)
                found.extend(below)
                covered = covered and child_covered
        return found, covered

    def _ready_ancestor(self, address: TileAddress, result: Resolution) -> Optional[Tile]:
        for ancestor in ancestors(address, self._config.level_min):
            tile = self.tile_for(ancestor)
            if not tile.ready:
                self._request(tile, result)
            if tile.ready:
                return tile
        return None

    def resolve(self, level: int, camera) -> Resolution:
        result = Resolution(level)
        result.candidates = self._visibility.visible_addresses(level, camera)
        substitutes: Dict[TileAddress, Tile] = {}

        for address in result.candidates:
            tile = self.tile_for(address)
            if not tile.ready:
                self._request(tile, result)
            if tile.ready:
                result.add(tile)
                result.ready += 1
                continue

            kids, covered = self._ready_cover(address)
            if covered:
                for kid in kids:
                    result.add(kid)
                result.refined += 1
                continue

            ancestor = self._ready_ancestor(address, result)
            if ancestor is not None:
                result.add(ancestor)
                substitutes[ancestor.address] = ancestor
                result.substituted += 1
            elif kids:
                result.partial += 1
            else:
                result.missing += 1
            # Partially loaded finer tiles are drawn, over the substitute if any.
            for kid in kids:
                result.add(kid)

        if self._config.prefetch:
            for ancestor in substitutes.values():
                for child in children(ancestor.address, self._config.level_max):
                    self._request(self.tile_for(child), result)

        logger.debug("Resolved level %d: %s", level, result.summary())
        return result
