"""Tests for tile addresses, keys, parents and children."""

import pytest

from panopyramid.addressing import (
    ancestors,
    children,
    key,
    level_addresses,
    parent,
    tile_name,
)
from panopyramid.errors import InvalidTileCoordinate, LevelOutOfRange
from panopyramid.models import FACES, Face, TileAddress


# ═══════════════════════════════════════════════════════════════════
# Keys
# ═══════════════════════════════════════════════════════════════════

class TestKey:

    def test_equal_tuples_equal_keys(self):
        assert key(2, "f", 1, 3) == key(2, Face.FRONT, 1, 3)
        assert hash(key(2, "f", 1, 3)) == hash(key(2, Face.FRONT, 1, 3))

    def test_any_field_changes_key(self):
        base = key(2, "f", 1, 3)
        assert base != key(3, "f", 1, 3)
        assert base != key(2, "b", 1, 3)
        assert base != key(2, "f", 3, 1)
        assert base != key(2, "f", 1, 2)

    def test_keys_distinct_across_levels(self):
        seen = set()
        for level in range(4):
            for address in level_addresses(level):
                seen.add(address.key)
        assert len(seen) == sum(6 * 4 ** level for level in range(4))

    def test_string_form(self):
        address = TileAddress(3, Face.LEFT, 5, 2)
        assert str(address) == "tile_l3_fl_y2_x5"
        assert TileAddress.parse(str(address)) == address

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            TileAddress.parse("tile_l3_fq_y2_x5")

    def test_usable_as_dict_key(self):
        d = {TileAddress(1, Face.UP, 0, 1): "a"}
        assert d[TileAddress(1, "u", 0, 1)] == "a"


class TestInvalidCoordinates:

    @pytest.mark.parametrize("level, x, y", [
        (0, 1, 0),
        (0, 0, 1),
        (2, 4, 0),
        (2, -1, 0),
        (3, 0, 8),
    ])
    def test_out_of_grid_raises(self, level, x, y):
        with pytest.raises(InvalidTileCoordinate):
            TileAddress(level, Face.FRONT, x, y)

    def test_negative_level_raises(self):
        with pytest.raises(InvalidTileCoordinate):
            TileAddress(-1, Face.FRONT, 0, 0)

    @pytest.mark.parametrize("level, x, y", [
        (1, 0.5, 0),
        (1, 0, 1.0),
        (1.0, 0, 0),
        (1, True, 0),
        (1, 0, "1"),
    ])
    def test_non_integer_raises(self, level, x, y):
        with pytest.raises(InvalidTileCoordinate, match="must be an int"):
            TileAddress(level, Face.FRONT, x, y)

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            TileAddress(1, Face.FRONT, 2, 0)

    def test_unknown_face_raises(self):
        with pytest.raises(ValueError):
            TileAddress(0, "x", 0, 0)


# ═══════════════════════════════════════════════════════════════════
# Parent / children
# ═══════════════════════════════════════════════════════════════════

class TestParentChildren:

    def test_parent_floor_division(self):
        assert parent(TileAddress(2, Face.BACK, 3, 2)) == TileAddress(1, Face.BACK, 1, 1)
        assert parent(TileAddress(1, Face.BACK, 1, 0)) == TileAddress(0, Face.BACK, 0, 0)

    def test_parent_at_level_min_raises(self):
        with pytest.raises(LevelOutOfRange):
            parent(TileAddress(0, Face.FRONT, 0, 0))

    def test_parent_respects_custom_level_min(self):
        with pytest.raises(LevelOutOfRange):
            parent(TileAddress(2, Face.FRONT, 0, 0), level_min=2)

    def test_children_layout(self):
        kids = children(TileAddress(1, Face.RIGHT, 1, 0))
        assert kids == (
            TileAddress(2, Face.RIGHT, 2, 0),
            TileAddress(2, Face.RIGHT, 3, 0),
            TileAddress(2, Face.RIGHT, 2, 1),
            TileAddress(2, Face.RIGHT, 3, 1),
        )

    def test_children_at_level_max_raises(self):
        with pytest.raises(LevelOutOfRange):
            children(TileAddress(10, Face.FRONT, 0, 0))
        with pytest.raises(LevelOutOfRange):
            children(TileAddress(4, Face.FRONT, 0, 0), level_max=4)

    @pytest.mark.parametrize("level", [0, 1, 2, 3])
    def test_round_trip(self, level):
        for address in level_addresses(level):
            for child in children(address):
                assert parent(child) == address

    def test_round_trip_near_level_max(self):
        address = TileAddress(9, Face.DOWN, 511, 300)
        assert all(parent(c) == address for c in children(address))

    def test_ancestors_nearest_first(self):
        chain = ancestors(TileAddress(3, Face.UP, 5, 6))
        assert chain == [
            TileAddress(2, Face.UP, 2, 3),
            TileAddress(1, Face.UP, 1, 1),
            TileAddress(0, Face.UP, 0, 0),
        ]

    def test_ancestors_of_root_empty(self):
        assert ancestors(TileAddress(0, Face.UP, 0, 0)) == []


# ═══════════════════════════════════════════════════════════════════
# Enumeration / names
# ═══════════════════════════════════════════════════════════════════

class TestLevelAddresses:

    @pytest.mark.parametrize("level", [0, 1, 2, 3])
    def test_count(self, level):
        assert len(list(level_addresses(level))) == 6 * 4 ** level

    def test_face_order(self):
        faces = [a.face for a in level_addresses(0)]
        assert faces == list(FACES)

    def test_tile_name(self):
        assert tile_name(TileAddress(0, Face.FRONT, 0, 0)) == "f-0"
        assert tile_name(TileAddress(2, Face.DOWN, 1, 1)) == "d-2"


class TestFace:

    def test_parse_code_and_name(self):
        assert Face.parse("f") is Face.FRONT
        assert Face.parse("Front") is Face.FRONT
        assert Face.parse(Face.DOWN) is Face.DOWN

    def test_six_faces(self):
        assert len(FACES) == 6
        assert {f.code for f in FACES} == set("flbrud")
