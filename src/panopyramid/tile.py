"""Pyramid tile and its texture readiness state.

A :class:`Tile` does not own a texture.  It remembers the verdict of the
texture store and borrows the handle the store passed along with it.

State machine::

    UNREQUESTED --request_texture()--> REQUESTED --callback--> READY
                                                          \\--> FAILED

``FAILED`` is terminal until :meth:`Tile.reset_texture` is called from
outside (manual retry).
"""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import Any, Optional, Tuple

import numpy as np

from .errors import TextureLoadFailed
from .geometry import tile_bounds, tile_size
from .models import TileAddress
from .texture_store import TextureStatus, TextureStore

logger = logging.getLogger(__name__)


class TextureState(Enum):
    UNREQUESTED = "unrequested"
    REQUESTED = "requested"
    READY = "ready"
    FAILED = "failed"


class Tile:
    """One grid cell of one face at one level.

    Parameters
    ----------
    parent : Tile or None
        Coarser tile covering this one.  Held through a weak reference:
        the cache owns tiles, children never keep their parent alive.
    address : TileAddress
    name : str
        Display name.
    cube_size : float
        Edge length of the background cube.
    """

    def __init__(
        self,
        parent: Optional["Tile"],
        address: TileAddress,
        name: str,
        cube_size: float,
    ) -> None:
        self.address = address
        self.name = name
        self.size = tile_size(address.level, cube_size)
        self._cube_size = cube_size
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._bounds: Optional[Tuple[np.ndarray, np.ndarray]] = None
        self.state = TextureState.UNREQUESTED
        self.texture: Any = None
        self.failure: Optional[TextureLoadFailed] = None

    # ── identity ────────────────────────────────────────────────────

    @property
    def level(self) -> int:
        return self.address.level

    @property
    def parent(self) -> Optional["Tile"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Axis-aligned box ``(lo, hi)`` of the tile quad."""
        if self._bounds is None:
            self._bounds = tile_bounds(self.address, self._cube_size)
        return self._bounds

    # ── texture ─────────────────────────────────────────────────────

    @property
    def ready(self) -> bool:
        return self.state is TextureState.READY

    def request_texture(self, store: TextureStore) -> bool:
        """Query *store* once.  Returns ``True`` if a query was issued."""
        if self.state is not TextureState.UNREQUESTED:
            return False
        self.state = TextureState.REQUESTED
        store.query(self.address, self.on_texture)
        return True

    def on_texture(self, address: TileAddress, status: TextureStatus, handle: Any) -> None:
        """Texture store callback.

        Only updates this tile's state; drawing happens on the next frame.
        """
        if address != self.address:
            raise ValueError(f"Callback for {address} delivered to {self.address}")
        if status is TextureStatus.READY:
            self.state = TextureState.READY
            self.texture = handle
            self.failure = None
        elif status is TextureStatus.FAILED:
            self.state = TextureState.FAILED
            self.texture = None
            self.failure = TextureLoadFailed(address, handle or "")
            logger.warning("%s", self.failure)
        elif status is TextureStatus.PENDING:
            self.state = TextureState.REQUESTED

    def reset_texture(self) -> None:
        """Forget a failure so the next frame requests the texture again."""
        if self.state is TextureState.FAILED:
            self.state = TextureState.UNREQUESTED
            self.failure = None

    def __repr__(self) -> str:
        return f"Tile({self.address}, name={self.name!r}, state={self.state.value})"
