"""Drawing targets — where resolved tiles are handed over for display.

The pyramid never issues draw calls.  It registers every tile it creates,
and then adds and removes tiles from the draw set as the resolution
changes.  A target is passed to the renderer explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, runtime_checkable

from .tile import Tile


@runtime_checkable
class DrawTarget(Protocol):
    def register(self, tile: Tile) -> None:
        """Called once per tile when the cache creates it."""
        ...

    def unregister(self, tile: Tile) -> None:
        """Called when the cache drops a tile."""
        ...

    def add(self, tile: Tile) -> None:
        ...

    def remove(self, tile: Tile) -> None:
        ...

    def draw(self, camera: Any) -> Any:
        ...


class Scene:
    """Headless draw target keeping registered and drawn tiles.

    :meth:`draw` returns the draw list coarse to fine, so finer tiles are
    painted over the ancestors they refine.
    """

    def __init__(self) -> None:
        self._registered: Dict[int, Tile] = {}
        self._drawn: Dict[int, Tile] = {}
        self.frames = 0
        self.adds = 0
        self.removes = 0

    # ── registration ────────────────────────────────────────────────

    def register(self, tile: Tile) -> None:
        if id(tile) in self._registered:
            raise ValueError(f"{tile} registered twice")
        self._registered[id(tile)] = tile

    def unregister(self, tile: Tile) -> None:
        self._drawn.pop(id(tile), None)
        self._registered.pop(id(tile), None)

    @property
    def registered(self) -> List[Tile]:
        return list(self._registered.values())

    # ── draw set ────────────────────────────────────────────────────

    def add(self, tile: Tile) -> None:
        if id(tile) not in self._registered:
            raise ValueError(f"{tile} added before registration")
        if id(tile) not in self._drawn:
            self._drawn[id(tile)] = tile
            self.adds += 1

    def remove(self, tile: Tile) -> None:
        if self._drawn.pop(id(tile), None) is not None:
            self.removes += 1

    def __contains__(self, tile: object) -> bool:
        return id(tile) in self._drawn

    @property
    def drawn(self) -> List[Tile]:
        return sorted(self._drawn.values(), key=lambda t: (t.level, str(t.address)))

    def draw(self, camera: Any) -> List[Tile]:
        self.frames += 1
        return self.drawn

    def clear(self) -> None:
        self._drawn.clear()
        self._registered.clear()
