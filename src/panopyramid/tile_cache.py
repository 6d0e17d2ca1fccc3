"""Tile cache — the single place tiles are created.

Tiles are memoized per level: ``level -> {address -> Tile}``.  A second
request for the same address returns the same instance and does not
register it with the draw target again.  Entries persist for the cache's
lifetime unless :meth:`TileCache.evict` is used to enforce a per-level cap.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Collection, Dict, Iterator, List, Optional

from .errors import UseAfterDestroy
from .models import TileAddress
from .scene import DrawTarget
from .tile import Tile

logger = logging.getLogger(__name__)


class TileCache:
    """Per-level memo of :class:`Tile` instances.

    Parameters
    ----------
    scene : DrawTarget
        Every created tile is registered with it; evicted and destroyed
        tiles are unregistered.
    cube_size : float
        Passed to each tile for its size and bounds.
    """

    def __init__(self, scene: DrawTarget, cube_size: float) -> None:
        self._scene = scene
        self._cube_size = cube_size
        self._levels: Optional[Dict[int, "OrderedDict[TileAddress, Tile]"]] = {}

    def _require_alive(self) -> Dict[int, "OrderedDict[TileAddress, Tile]"]:
        if self._levels is None:
            raise UseAfterDestroy("TileCache used after destroy()")
        return self._levels

    # ── lookup / creation ───────────────────────────────────────────

    def get_or_create(
        self,
        parent: Optional[Tile],
        address: TileAddress,
        name: str,
    ) -> Tile:
        """Return the cached tile for *address*, creating it on first use."""
        levels = self._require_alive()
        level_map = levels.get(address.level)
        if level_map is None:
            level_map = levels[address.level] = OrderedDict()

        tile = level_map.get(address)
        if tile is not None:
            level_map.move_to_end(address)
            return tile

        if parent is not None and (
            parent.level != address.level - 1
            or parent.address.face is not address.face
            or (parent.address.x, parent.address.y) != (address.x // 2, address.y // 2)
        ):
            raise ValueError(f"{parent} is not the parent of {address}")

        tile = Tile(parent, address, name, self._cube_size)
        level_map[address] = tile
        self._scene.register(tile)
        return tile

    def get(self, address: TileAddress, *, touch: bool = False) -> Optional[Tile]:
        """Cached tile for *address* or ``None``; never creates.

        With *touch* a hit counts as a use for eviction order.
        """
        level_map = self._require_alive().get(address.level)
        if level_map is None:
            return None
        tile = level_map.get(address)
        if tile is not None and touch:
            level_map.move_to_end(address)
        return tile

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, TileAddress):
            return False
        return self.get(address) is not None

    def __len__(self) -> int:
        return sum(len(m) for m in self._require_alive().values())

    def level_size(self, level: int) -> int:
        return len(self._require_alive().get(level, ()))

    def levels(self) -> List[int]:
        return sorted(self._require_alive())

    def tiles(self, level: Optional[int] = None) -> Iterator[Tile]:
        levels = self._require_alive()
        if level is not None:
            yield from list(levels.get(level, {}).values())
            return
        for lvl in sorted(levels):
            yield from list(levels[lvl].values())

    # ── eviction / teardown ─────────────────────────────────────────

    def evict(self, level: int, cap: int, protected: Collection[TileAddress]) -> int:
        """Drop least recently used tiles of *level* until at most *cap* remain.

        Tiles whose address is in *protected* are kept even if the cap is
        exceeded.  Returns the number of evicted tiles.
        """
        level_map = self._require_alive().get(level)
        if level_map is None or len(level_map) <= cap:
            return 0
        excess = len(level_map) - cap
        victims: List[TileAddress] = []
        for address in level_map:
            if len(victims) >= excess:
                break
            if address not in protected:
                victims.append(address)
        for address in victims:
            self._scene.unregister(level_map.pop(address))
        if victims:
            logger.debug("Evicted %d tiles from level %d", len(victims), level)
        return len(victims)

    @property
    def destroyed(self) -> bool:
        return self._levels is None

    def destroy(self) -> None:
        """Unregister and drop every tile; later use raises :class:`UseAfterDestroy`."""
        levels = self._require_alive()
        for level_map in levels.values():
            for tile in level_map.values():
                self._scene.unregister(tile)
        self._levels = None

    def __repr__(self) -> str:
        if self._levels is None:
            return "TileCache(destroyed)"
        sizes = {lvl: len(m) for lvl, m in sorted(self._levels.items())}
        return f"TileCache({sizes})"
