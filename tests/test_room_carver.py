import random

import pytest

from dungeon_geometry import Rect
from dungeon_models import BSPNode, DungeonData, TileType
from room_carver import RoomCarver
from space_partitioner import SpacePartitioner


@pytest.mark.parametrize("seed", [0, 7, 42])
def test_rooms_fit_inside_their_padded_leaves(seed):
    rng = random.Random(seed)
    dungeon = DungeonData(80, 80)
    root = SpacePartitioner(min_room_size=6).partition(Rect(0, 0, 80, 80), rng)

    rooms = RoomCarver(6, 20, padding=2).carve(root, dungeon, rng)

    assert rooms == dungeon.rooms
    assert rooms
    for leaf in root.iter_leaves():
        if leaf.room is None:
            continue
        inner = Rect(leaf.bounds.x + 2, leaf.bounds.y + 2, leaf.bounds.width - 4, leaf.bounds.height - 4)
        assert inner.contains_rect(leaf.room.bounds)
        assert 6 <= leaf.room.bounds.width <= 20
        assert 6 <= leaf.room.bounds.height <= 20
    for i, room in enumerate(rooms):
        assert room.index == i
        for other in rooms[i + 1:]:
            assert not room.bounds.overlaps(other.bounds)


def test_carved_tiles_are_floor(dungeon, rng):
    leaf = BSPNode(Rect(0, 0, 20, 20))

    room = RoomCarver(6, 10).carve_leaf(leaf, dungeon, rng)

    assert leaf.room is room
    assert len(room.floor_tiles) == room.area
    assert all(dungeon.get_tile(p.x, p.y) is TileType.FLOOR for p in room.floor_tiles)
    floor_count = sum(1 for row in dungeon.tiles for tile in row if tile is TileType.FLOOR)
    assert floor_count == room.area


def test_leaf_too_small_for_padding_is_skipped(dungeon, rng):
    leaf = BSPNode(Rect(0, 0, 9, 20))

    assert RoomCarver(6, 10, padding=2).carve_leaf(leaf, dungeon, rng) is None
    assert dungeon.rooms == []


def test_rejects_invalid_sizes():
    with pytest.raises(ValueError):
        RoomCarver(8, 6)


@pytest.mark.parametrize("seed", [7, 11, 42])
def test_every_partition_leaf_receives_a_room(seed):
    rng = random.Random(seed)
    dungeon = DungeonData(50, 50)
    root = SpacePartitioner(min_room_size=6, padding=2).partition(Rect(0, 0, 50, 50), rng)

    rooms = RoomCarver(6, 20, padding=2).carve(root, dungeon, rng)

    leaves = list(root.iter_leaves())
    assert len(rooms) == len(leaves) >= 4
    assert all(leaf.room is not None for leaf in leaves)
