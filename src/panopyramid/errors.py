"""Error taxonomy for the tile pyramid.

Programming errors (:class:`InvalidTileCoordinate`, :class:`UseAfterDestroy`)
are raised.  :class:`LevelOutOfRange` is raised by the strict addressing
helpers but clamped silently on level selection.  :class:`TextureLoadFailed`
is only ever built to be logged: a failed texture degrades to a coarser
ancestor and never reaches the frame loop.
"""

from __future__ import annotations


class PyramidError(Exception):
    """Base class for every error raised by :mod:`panopyramid`."""


class InvalidTileCoordinate(PyramidError, ValueError):
    """Tile ``x``/``y`` outside ``[0, 2**level)`` or a negative level."""


class LevelOutOfRange(PyramidError, ValueError):
    """A level outside ``[level_min, level_max]``."""


class TextureLoadFailed(PyramidError, RuntimeError):
    """The texture store reported a permanent failure for a tile."""

    def __init__(self, address, reason: str = "") -> None:
        self.address = address
        self.reason = reason
        msg = f"Texture load failed for {address}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class UseAfterDestroy(PyramidError, RuntimeError):
    """A cache, resolver or renderer operation after ``destroy()``."""
