"""Pyramid geometry — tile counts, tile sizes and tile placement on the cube.

The cube is centred on the origin with edge length *cube_size*.  Faces are
described as seen from the centre: a camera looking down ``-Z`` with ``+Y``
up faces :attr:`Face.FRONT`; tile columns grow along the face's *u* axis and
tile rows grow against its *v* axis (image order, top row first).
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from .models import Face, TileAddress


def nb_tiles_per_axis(level: int) -> int:
    return 2 ** level


def nb_tiles(level: int) -> int:
    tpa = nb_tiles_per_axis(level)
    return tpa * tpa


def tile_size(level: int, cube_size: float) -> float:
    return cube_size / nb_tiles_per_axis(level)


# (normal, u, v) unit vectors per face.
_FACE_AXES: Dict[Face, Tuple[Tuple[float, float, float], ...]] = {
    Face.FRONT: ((0.0, 0.0, -1.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    Face.LEFT: ((-1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 1.0, 0.0)),
    Face.BACK: ((0.0, 0.0, 1.0), (-1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    Face.RIGHT: ((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0)),
    Face.UP: ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
    Face.DOWN: ((0.0, -1.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, -1.0)),
}


def face_axes(face: Face) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(normal, u, v)`` of *face* as float arrays."""
    normal, u, v = _FACE_AXES[face]
    return np.array(normal), np.array(u), np.array(v)


def tile_corners(address: TileAddress, cube_size: float) -> np.ndarray:
    """World-space corners of the tile quad, shape ``(4, 3)``.

    Order: top-left, top-right, bottom-right, bottom-left.
    """
    half = cube_size / 2.0
    size = tile_size(address.level, cube_size)
    normal, u, v = face_axes(address.face)

    left = -half + address.x * size
    right = left + size
    top = half - address.y * size
    bottom = top - size

    origin = normal * half
    return np.array([
        origin + u * left + v * top,
        origin + u * right + v * top,
        origin + u * right + v * bottom,
        origin + u * left + v * bottom,
    ])


def tile_bounds(address: TileAddress, cube_size: float) -> Tuple[np.ndarray, np.ndarray]:
    """Axis-aligned bounding box ``(lo, hi)`` of the tile quad."""
    corners = tile_corners(address, cube_size)
    return corners.min(axis=0), corners.max(axis=0)


def tile_center(address: TileAddress, cube_size: float) -> np.ndarray:
    return tile_corners(address, cube_size).mean(axis=0)
