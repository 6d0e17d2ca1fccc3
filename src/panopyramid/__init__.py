"""panopyramid — level-of-detail tile pyramid for cube panoramas.

Public API is organised into layers:

- **Addressing** — faces, tile addresses, parents/children, geometry
- **Levels** — field of view to pyramid level
- **Tiles** — tile texture state, the tile cache
- **Visibility & resolution** — frustum culling, progressive refinement
- **Renderers** — the pyramid orchestrator and its variants
- **Collaborators** — camera, texture stores, draw target
"""

# ── Addressing ──────────────────────────────────────────────────────
from .models import FACES, Face, TileAddress
from .addressing import ancestors, children, key, level_addresses, parent, tile_name
from .geometry import (
    nb_tiles,
    nb_tiles_per_axis,
    tile_bounds,
    tile_center,
    tile_corners,
    tile_size,
)

# ── Errors & configuration ─────────────────────────────────────────
from .errors import (
    InvalidTileCoordinate,
    LevelOutOfRange,
    PyramidError,
    TextureLoadFailed,
    UseAfterDestroy,
)
from .config import (
    DEFAULT_PYRAMID,
    DEPTH_FAR,
    LOW_MEMORY_PYRAMID,
    PyramidConfig,
    load_config,
    save_config,
)

# ── Levels ──────────────────────────────────────────────────────────
from .levels import LevelSelector, clamp_level, fov_to_level, level_to_fov

# ── Tiles ───────────────────────────────────────────────────────────
from .tile import TextureState, Tile
from .tile_cache import TileCache

# ── Visibility & resolution ─────────────────────────────────────────
from .frustum import Frustum, VisibilityFilter
from .resolver import Resolution, TileResolver

# ── Collaborators ───────────────────────────────────────────────────
from .camera import Camera, PerspectiveCamera, Subscription
from .scene import DrawTarget, Scene
from .texture_store import (
    MemoryTextureStore,
    TextureStatus,
    TextureStore,
    ThreadedTextureStore,
)

# ── Renderers ───────────────────────────────────────────────────────
from .renderer import (
    BackgroundRenderer,
    FlatRenderer,
    PyramidRenderer,
    create_background_renderer,
)

__all__ = [
    "FACES", "Face", "TileAddress",
    "ancestors", "children", "key", "level_addresses", "parent", "tile_name",
    "nb_tiles", "nb_tiles_per_axis", "tile_bounds", "tile_center",
    "tile_corners", "tile_size",
    "InvalidTileCoordinate", "LevelOutOfRange", "PyramidError",
    "TextureLoadFailed", "UseAfterDestroy",
    "DEFAULT_PYRAMID", "DEPTH_FAR", "LOW_MEMORY_PYRAMID", "PyramidConfig",
    "load_config", "save_config",
    "LevelSelector", "clamp_level", "fov_to_level", "level_to_fov",
    "TextureState", "Tile", "TileCache",
    "Frustum", "VisibilityFilter", "Resolution", "TileResolver",
    "Camera", "PerspectiveCamera", "Subscription",
    "DrawTarget", "Scene",
    "MemoryTextureStore", "TextureStatus", "TextureStore", "ThreadedTextureStore",
    "BackgroundRenderer", "FlatRenderer", "PyramidRenderer",
    "create_background_renderer",
]
