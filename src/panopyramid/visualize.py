"""Cube-net visualisation of a draw set.

Renders the six faces unfolded as a cross::

          [U]
     [L]  [F]  [R]  [B]
          [D]

Each drawn tile is filled with a colour for its level; the visible cells
of the resolved level are outlined.  Requires matplotlib, imported lazily.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from .models import Face, TileAddress
from .tile import Tile

# Column, row of each face in the net (row 0 at the top).
_NET_POSITION: Dict[Face, Tuple[int, int]] = {
    Face.UP: (1, 0),
    Face.LEFT: (0, 1),
    Face.FRONT: (1, 1),
    Face.RIGHT: (2, 1),
    Face.BACK: (3, 1),
    Face.DOWN: (1, 2),
}

_LEVEL_CMAP = "viridis"
_OUTLINE_COLOR = "#e63946"
_FACE_EDGE_COLOR = "#2b2b2b"


def _ensure_mpl():
    """Lazy-import matplotlib; raise helpful error if missing."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Rectangle
        return plt, Rectangle
    except ImportError as exc:
        raise RuntimeError(
            "matplotlib is required for visualisation. "
            "Install with `pip install matplotlib`."
        ) from exc


def tile_rect(address: TileAddress) -> Tuple[float, float, float]:
    """Lower-left corner and side of *address* in net coordinates."""
    col, row = _NET_POSITION[address.face]
    side = 1.0 / (1 << address.level)
    x = col + address.x * side
    # Net rows grow downwards; matplotlib y grows upwards.
    y = (2 - row) + 1.0 - (address.y + 1) * side
    return x, y, side


def render_draw_set_png(
    tiles: Iterable[Tile],
    output_path: Union[str, Path],
    *,
    candidates: Optional[Iterable[TileAddress]] = None,
    level_max: int = 10,
    title: Optional[str] = None,
    dpi: int = 120,
) -> None:
    """Save the cube net of *tiles* (and optional *candidates* outlines) as PNG."""
    plt, Rectangle = _ensure_mpl()
    cmap = plt.get_cmap(_LEVEL_CMAP)

    fig, ax = plt.subplots(figsize=(8, 6))

    for face, (col, row) in _NET_POSITION.items():
        ax.add_patch(Rectangle(
            (col, 2 - row), 1.0, 1.0,
            facecolor="#f4f4f4", edgecolor=_FACE_EDGE_COLOR, linewidth=1.2,
        ))
        ax.text(col + 0.5, 2 - row + 0.5, face.name.lower(),
                ha="center", va="center", fontsize=9, color="#999999", zorder=0)

    for tile in sorted(tiles, key=lambda t: t.level):
        x, y, side = tile_rect(tile.address)
        ax.add_patch(Rectangle(
            (x, y), side, side,
            facecolor=cmap(tile.level / max(1, level_max)),
            edgecolor="white", linewidth=0.3, alpha=0.9,
        ))

    for address in candidates or ():
        x, y, side = tile_rect(address)
        ax.add_patch(Rectangle(
            (x, y), side, side,
            fill=False, edgecolor=_OUTLINE_COLOR, linewidth=0.6,
        ))

    ax.set_xlim(-0.1, 4.1)
    ax.set_ylim(-0.1, 3.1)
    ax.set_aspect("equal", "box")
    ax.axis("off")
    if title:
        ax.set_title(title)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
