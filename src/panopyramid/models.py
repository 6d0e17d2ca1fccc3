from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .errors import InvalidTileCoordinate


class Face(Enum):
    """One side of the panorama cube, valued by its short code."""

    FRONT = "f"
    LEFT = "l"
    BACK = "b"
    RIGHT = "r"
    UP = "u"
    DOWN = "d"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "Face | str") -> "Face":
        """Accept a :class:`Face`, a short code (``"f"``) or a name (``"front"``)."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for face in cls:
            if text in (face.value, face.name.lower()):
                return face
        raise ValueError(f"Unknown cube face {value!r}")


# Iteration order used everywhere a full face sweep is needed.
FACES: tuple[Face, ...] = (
    Face.FRONT,
    Face.LEFT,
    Face.BACK,
    Face.RIGHT,
    Face.UP,
    Face.DOWN,
)

_KEY_RE = re.compile(r"^tile_l(\d+)_f([flbrud])_y(\d+)_x(\d+)$")


@dataclass(frozen=True)
class TileAddress:
    """Position of a tile in the pyramid: ``(level, face, x, y)``.

    The address itself is the cache key; it hashes on all four fields, so
    two addresses are equal iff every field matches.  ``x`` counts columns
    left to right, ``y`` counts rows top to bottom.
    """

    level: int
    face: Face
    x: int
    y: int

    def __post_init__(self) -> None:
        if not isinstance(self.face, Face):
            object.__setattr__(self, "face", Face.parse(self.face))
        for name in ("level", "x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidTileCoordinate(
                    f"Tile {name} must be an int, got {value!r}"
                )
        if self.level < 0:
            raise InvalidTileCoordinate(f"Negative pyramid level {self.level}")
        tpa = 1 << self.level
        if not (0 <= self.x < tpa and 0 <= self.y < tpa):
            raise InvalidTileCoordinate(
                f"Tile ({self.x}, {self.y}) outside the {tpa}x{tpa} grid "
                f"of level {self.level}"
            )

    @property
    def key(self) -> "TileAddress":
        return self

    def __str__(self) -> str:
        return f"tile_l{self.level}_f{self.face.code}_y{self.y}_x{self.x}"

    @classmethod
    def parse(cls, text: str) -> "TileAddress":
        """Inverse of ``str(address)``."""
        match = _KEY_RE.match(text)
        if match is None:
            raise ValueError(f"Not a tile key: {text!r}")
        level, face, y, x = match.groups()
        return cls(int(level), Face(face), int(x), int(y))
