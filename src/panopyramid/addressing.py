"""Tile addressing — keys, parents and children in the quadtree.

Every face is an independent quadtree: tile ``(level, face, x, y)`` has the
parent ``(level - 1, face, x // 2, y // 2)`` and the four children
``(level + 1, face, 2x + i, 2y + j)``.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

from .errors import LevelOutOfRange
from .models import FACES, Face, TileAddress

DEFAULT_LEVEL_MIN = 0
DEFAULT_LEVEL_MAX = 10


def key(level: int, face: Face | str, x: int, y: int) -> TileAddress:
    """Canonical, collision-free key of a tile."""
    return TileAddress(level, Face.parse(face), x, y)


def parent(address: TileAddress, level_min: int = DEFAULT_LEVEL_MIN) -> TileAddress:
    """Address one level coarser covering *address*.

    Raises :class:`LevelOutOfRange` at *level_min*.
    """
    if address.level <= level_min:
        raise LevelOutOfRange(
            f"{address} is at the coarsest level {level_min} and has no parent"
        )
    return TileAddress(address.level - 1, address.face, address.x // 2, address.y // 2)


def children(
    address: TileAddress, level_max: int = DEFAULT_LEVEL_MAX
) -> Tuple[TileAddress, TileAddress, TileAddress, TileAddress]:
    """The four addresses one level finer, row-major.

    Raises :class:`LevelOutOfRange` at *level_max*.
    """
    if address.level >= level_max:
        raise LevelOutOfRange(
            f"{address} is at the finest level {level_max} and has no children"
        )
    level = address.level + 1
    x0, y0 = 2 * address.x, 2 * address.y
    return (
        TileAddress(level, address.face, x0, y0),
        TileAddress(level, address.face, x0 + 1, y0),
        TileAddress(level, address.face, x0, y0 + 1),
        TileAddress(level, address.face, x0 + 1, y0 + 1),
    )


def ancestors(address: TileAddress, level_min: int = DEFAULT_LEVEL_MIN) -> List[TileAddress]:
    """All ancestors down to *level_min*, nearest first."""
    chain: List[TileAddress] = []
    current = address
    while current.level > level_min:
        current = parent(current, level_min)
        chain.append(current)
    return chain


def level_addresses(level: int) -> Iterator[TileAddress]:
    """Every address of *level*: faces in :data:`FACES` order, rows, columns."""
    tpa = 1 << level
    for face in FACES:
        for y in range(tpa):
            for x in range(tpa):
                yield TileAddress(level, face, x, y)


def tile_name(address: TileAddress) -> str:
    """Display name of a tile, e.g. ``"f-0"`` for a front tile at level 0."""
    return f"{address.face.code}-{address.level}"
