"""Background renderers — the pyramid orchestrator and its siblings.

A background renderer is anything providing ``boot()``, ``render(camera)``
and ``destroy()`` (:class:`BackgroundRenderer`).  Variants are picked at
construction time with :func:`create_background_renderer`:

- ``"pyramid"`` — :class:`PyramidRenderer`, level of detail driven by the
  camera field of view with progressive refinement;
- ``"flat"`` — :class:`FlatRenderer`, the coarsest level only.

Usage
-----
>>> renderer = create_background_renderer("pyramid", camera, scene, store)
>>> renderer.boot()
>>> renderer.render(camera)     # once per frame
>>> renderer.destroy()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Set, runtime_checkable

from .addressing import ancestors, level_addresses, tile_name
from .camera import Camera, Subscription
from .config import DEFAULT_PYRAMID, PyramidConfig
from .errors import UseAfterDestroy
from .frustum import VisibilityFilter
from .levels import LevelSelector
from .models import TileAddress
from .resolver import Resolution, TileResolver
from .scene import DrawTarget
from .texture_store import TextureStore
from .tile import Tile
from .tile_cache import TileCache

logger = logging.getLogger(__name__)


@runtime_checkable
class BackgroundRenderer(Protocol):
    def boot(self) -> None:
        ...

    def render(self, camera: Optional[Camera] = None) -> Any:
        ...

    def destroy(self) -> None:
        ...


def _apply_draw_set(
    scene: DrawTarget,
    drawn: Dict[TileAddress, Tile],
    wanted: Dict[TileAddress, Tile],
) -> Dict[TileAddress, Tile]:
    """Move *scene* from *drawn* to *wanted*: additions first, then removals."""
    for address, tile in wanted.items():
        if address not in drawn:
            scene.add(tile)
    for address, tile in drawn.items():
        if address not in wanted:
            scene.remove(tile)
    return dict(wanted)


class _Lifecycle:
    """Boot/destroy bookkeeping shared by the renderer variants."""

    _booted = False
    _destroyed = False

    def _require_alive(self) -> None:
        if self._destroyed:
            raise UseAfterDestroy(f"{type(self).__name__} used after destroy()")

    def _require_booted(self) -> None:
        self._require_alive()
        if not self._booted:
            raise RuntimeError(f"{type(self).__name__}.boot() must be called first")


# ═══════════════════════════════════════════════════════════════════
# Pyramid renderer
# ═══════════════════════════════════════════════════════════════════


class PyramidRenderer(_Lifecycle):
    """Level-of-detail cube background.

    Parameters
    ----------
    camera : Camera
        Provides the field of view and view-projection matrix.
    scene : DrawTarget
        Receives tile registrations and draw-set changes.
    texture_store : TextureStore
        Asynchronous texture provider.
    config : PyramidConfig
        Level bounds, cube size and cache policy.
    """

    def __init__(
        self,
        camera: Camera,
        scene: DrawTarget,
        texture_store: TextureStore,
        config: PyramidConfig = DEFAULT_PYRAMID,
    ) -> None:
        self._camera = camera
        self._scene = scene
        self._texture_store = texture_store
        self._config = config
        self._selector = LevelSelector(config)
        self._cache = TileCache(scene, config.cube_size)
        self._visibility = VisibilityFilter(config.cube_size, config.level_min)
        self._resolver = TileResolver(self._cache, texture_store, self._visibility, config)
        self._subscription: Optional[Subscription] = None
        self._drawn: Dict[TileAddress, Tile] = {}
        self._last: Optional[Resolution] = None

    # ── lifecycle ───────────────────────────────────────────────────

    def boot(self) -> None:
        self._require_alive()
        if self._booted:
            raise RuntimeError("PyramidRenderer.boot() called twice")
        logger.info("boot")
        self.select_level(self._selector.level_for_fov(self._camera.fov))
        self._subscription = self._camera.subscribe(self._on_fov_change)
        if self._config.preload:
            for address in level_addresses(self.level):
                self._resolver.tile_for(address)
            logger.debug("Preloaded %d tiles at level %d", len(self._cache), self.level)
        self._booted = True

    def destroy(self) -> None:
        self._require_alive()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        for tile in self._drawn.values():
            self._scene.remove(tile)
        self._drawn = {}
        self._cache.destroy()
        self._last = None
        self._destroyed = True
        logger.info("destroy")

    # ── level ───────────────────────────────────────────────────────

    def _on_fov_change(self, fov: float) -> None:
        # Level bookkeeping only; the draw set changes on the next frame.
        self._selector.on_fov_change(fov)

    def select_level(self, level: int) -> int:
        self._require_alive()
        return self._selector.select_level(level)

    def update_after_view_change(self) -> None:
        """Re-derive the level from the camera's current field of view."""
        self._require_alive()
        self._selector.on_fov_change(self._camera.fov)

    # ── per frame ───────────────────────────────────────────────────

    def on_frame(self, camera: Optional[Camera] = None) -> Resolution:
        """Resolve the visible tiles and update the draw set incrementally."""
        self._require_booted()
        camera = camera or self._camera
        self._texture_store.dispatch()
        result = self._resolver.resolve(self.level, camera)
        self._drawn = _apply_draw_set(self._scene, self._drawn, result.tiles)
        if self._config.max_tiles_per_level is not None:
            self._evict(result)
        self._last = result
        return result

    def render(self, camera: Optional[Camera] = None) -> Any:
        camera = camera or self._camera
        self.on_frame(camera)
        return self._scene.draw(camera)

    def _evict(self, result: Resolution) -> None:
        protected: Set[TileAddress] = set(self._drawn)
        for address in result.candidates:
            protected.add(address)
            protected.update(ancestors(address, self._config.level_min))
        for level in self._cache.levels():
            self._cache.evict(level, self._config.max_tiles_per_level, protected)

    # ── properties ──────────────────────────────────────────────────

    @property
    def level(self) -> int:
        return self._selector.level

    @property
    def level_min(self) -> int:
        return self._selector.level_min

    @property
    def level_max(self) -> int:
        return self._selector.level_max

    @property
    def camera(self) -> Camera:
        return self._camera

    @property
    def texture_store(self) -> TextureStore:
        return self._texture_store

    @property
    def config(self) -> PyramidConfig:
        return self._config

    @property
    def cache(self) -> TileCache:
        self._require_alive()
        return self._cache

    @property
    def resolver(self) -> TileResolver:
        self._require_alive()
        return self._resolver

    @property
    def drawn(self) -> Dict[TileAddress, Tile]:
        return dict(self._drawn)

    @property
    def last_resolution(self) -> Optional[Resolution]:
        return self._last


# ═══════════════════════════════════════════════════════════════════
# Flat renderer
# ═══════════════════════════════════════════════════════════════════


class FlatRenderer(_Lifecycle):
    """Cube background at ``config.level_min`` with no refinement.

    A visible face is drawn once its texture is ready; until then the cell
    stays empty.
    """

    def __init__(
        self,
        camera: Camera,
        scene: DrawTarget,
        texture_store: TextureStore,
        config: PyramidConfig = DEFAULT_PYRAMID,
    ) -> None:
        self._camera = camera
        self._scene = scene
        self._texture_store = texture_store
        self._config = config
        self._cache = TileCache(scene, config.cube_size)
        self._visibility = VisibilityFilter(config.cube_size, config.level_min)
        self._drawn: Dict[TileAddress, Tile] = {}

    @property
    def level(self) -> int:
        return self._config.level_min

    def boot(self) -> None:
        self._require_alive()
        if self._booted:
            raise RuntimeError("FlatRenderer.boot() called twice")
        for address in level_addresses(self.level):
            tile = self._cache.get_or_create(None, address, tile_name(address))
            tile.request_texture(self._texture_store)
        self._booted = True

    def on_frame(self, camera: Optional[Camera] = None) -> Dict[TileAddress, Tile]:
        self._require_booted()
        camera = camera or self._camera
        self._texture_store.dispatch()
        wanted: Dict[TileAddress, Tile] = {}
        for address in self._visibility.visible_addresses(self.level, camera):
            tile = self._cache.get(address)
            if tile is not None and tile.ready:
                wanted[address] = tile
        self._drawn = _apply_draw_set(self._scene, self._drawn, wanted)
        return dict(self._drawn)

    def render(self, camera: Optional[Camera] = None) -> Any:
        camera = camera or self._camera
        self.on_frame(camera)
        return self._scene.draw(camera)

    def destroy(self) -> None:
        self._require_alive()
        for tile in self._drawn.values():
            self._scene.remove(tile)
        self._drawn = {}
        self._cache.destroy()
        self._destroyed = True

    @property
    def drawn(self) -> Dict[TileAddress, Tile]:
        return dict(self._drawn)


# ═══════════════════════════════════════════════════════════════════
# Variant selection
# ═══════════════════════════════════════════════════════════════════

RendererFactory = Callable[[Camera, DrawTarget, TextureStore, PyramidConfig], BackgroundRenderer]

_RENDERERS: Dict[str, RendererFactory] = {
    "pyramid": PyramidRenderer,
    "flat": FlatRenderer,
}


def renderer_kinds() -> Iterable[str]:
    return sorted(_RENDERERS)


def create_background_renderer(
    kind: str,
    camera: Camera,
    scene: DrawTarget,
    texture_store: TextureStore,
    config: PyramidConfig = DEFAULT_PYRAMID,
) -> BackgroundRenderer:
    """Build the background renderer variant named *kind*."""
    try:
        factory = _RENDERERS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown background renderer {kind!r}; expected one of {list(renderer_kinds())}"
        ) from None
    return factory(camera, scene, texture_store, config)
