"""Frustum culling of pyramid tiles.

The frustum is rebuilt from the camera's ``projection @ view`` matrix on
every query: the camera turns every frame even when its field of view (and
so the pyramid level) stays put.
"""

from __future__ import annotations

from typing import List, Tuple, Union

import numpy as np

from .addressing import children
from .geometry import nb_tiles_per_axis, tile_bounds
from .models import FACES, TileAddress
from .tile import Tile

# Slack for tiles lying exactly on a frustum plane.
_EPS = 1e-9


class Frustum:
    """Six inward-facing planes ``(a, b, c, d)``: inside iff ``ax+by+cz+d >= 0``."""

    def __init__(self, planes: np.ndarray) -> None:
        self.planes = np.asarray(planes, dtype=np.float64).reshape(6, 4)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "Frustum":
        """Extract the planes of a column-vector clip matrix (Gribb/Hartmann)."""
        m = np.asarray(matrix, dtype=np.float64)
        r0, r1, r2, r3 = m[0], m[1], m[2], m[3]
        planes = np.array([
            r3 + r0,  # left
            r3 - r0,  # right
            r3 + r1,  # bottom
            r3 - r1,  # top
            r3 + r2,  # near
            r3 - r2,  # far
        ])
        norms = np.linalg.norm(planes[:, :3], axis=1)
        norms[norms == 0] = 1.0
        return cls(planes / norms[:, None])

    def contains_point(self, point) -> bool:
        p = np.append(np.asarray(point, dtype=np.float64), 1.0)
        return bool(np.all(self.planes @ p >= -_EPS))

    def intersects_box(self, lo: np.ndarray, hi: np.ndarray) -> bool:
        """Conservative box test: only rejects boxes fully outside one plane."""
        normals = self.planes[:, :3]
        positive = np.where(normals >= 0, hi, lo)
        dist = np.einsum("ij,ij->i", normals, positive) + self.planes[:, 3]
        return bool(np.all(dist >= -_EPS))


class VisibilityFilter:
    """Tests tiles of a cube of edge *cube_size* against a camera frustum."""

    def __init__(self, cube_size: float, level_min: int = 0) -> None:
        self.cube_size = cube_size
        self.level_min = level_min

    def _bounds(self, tile: Union[Tile, TileAddress]) -> Tuple[np.ndarray, np.ndarray]:
        if isinstance(tile, Tile):
            return tile.bounds
        return tile_bounds(tile, self.cube_size)

    def is_visible(self, tile: Union[Tile, TileAddress], camera) -> bool:
        frustum = Frustum.from_matrix(camera.view_projection)
        return frustum.intersects_box(*self._bounds(tile))

    def visible_addresses(self, level: int, camera) -> List[TileAddress]:
        """Every address of *level* passing :meth:`is_visible`.

        Walks each face's quadtree from ``level_min`` and skips the subtree
        of any culled tile: a child's box lies inside its parent's, so it
        cannot pass a test its parent failed.
        """
        frustum = Frustum.from_matrix(camera.view_projection)
        start = min(self.level_min, level)
        tpa = nb_tiles_per_axis(start)
        stack = [
            TileAddress(start, face, x, y)
            for face in reversed(FACES)
            for y in reversed(range(tpa))
            for x in reversed(range(tpa))
        ]
        visible: List[TileAddress] = []
        while stack:
            address = stack.pop()
            if not frustum.intersects_box(*tile_bounds(address, self.cube_size)):
                continue
            if address.level == level:
                visible.append(address)
            else:
                stack.extend(reversed(children(address, level)))
        return visible
