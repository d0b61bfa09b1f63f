import logging
import random

import pytest

from corridor_connector import CorridorConnector
from dungeon_config import GenerationSettings
from dungeon_geometry import GridPosition, Rect
from dungeon_models import DoorOrientation, DungeonData, TileType
from room_carver import RoomCarver
from space_partitioner import SpacePartitioner


def _floor_count(dungeon):
    return sum(1 for row in dungeon.tiles for tile in row if tile is not TileType.WALL)


@pytest.fixture
def two_islands(add_room):
    """Two pairs of rooms, each pair joined only to itself."""
    dungeon = DungeonData(60, 40)
    left_top = add_room(dungeon, 4, 4, 8, 8)
    left_bottom = add_room(dungeon, 4, 24, 8, 8)
    right_top = add_room(dungeon, 40, 4, 8, 8)
    right_bottom = add_room(dungeon, 40, 24, 8, 8)
    connector = CorridorConnector(GenerationSettings())
    rng = random.Random(0)
    assert connector.connect_rooms(left_top, left_bottom, dungeon, rng)
    assert connector.connect_rooms(right_top, right_bottom, dungeon, rng)
    return dungeon


def test_connect_rooms_places_one_door_per_room_on_its_boundary(dungeon, add_room, rng):
    room_a = add_room(dungeon, 4, 4, 8, 8)
    room_b = add_room(dungeon, 24, 4, 8, 8)
    connector = CorridorConnector(GenerationSettings())

    assert connector.connect_rooms(room_a, room_b, dungeon, rng)

    assert len(dungeon.doors) == 2
    door_a, door_b = dungeon.doors
    assert (door_a.room_a, door_a.room_b) == (room_a, room_b)
    assert (door_b.room_a, door_b.room_b) == (room_b, room_a)
    assert room_a.is_on_boundary(door_a.position)
    assert room_b.is_on_boundary(door_b.position)
    assert door_a.orientation is DoorOrientation.VERTICAL
    assert door_a.position.x == room_a.right
    assert dungeon.get_tile(door_a.position.x, door_a.position.y) is TileType.DOOR
    assert room_a.door_positions == [door_a.position]
    assert dungeon.are_rooms_connected(room_a, room_b)


def test_corridor_tiles_lie_outside_rooms_and_are_floor(dungeon, add_room, rng):
    room_a = add_room(dungeon, 4, 4, 8, 8)
    room_b = add_room(dungeon, 24, 24, 8, 8)

    CorridorConnector(GenerationSettings()).connect_rooms(room_a, room_b, dungeon, rng)

    assert dungeon.corridor_tiles
    assert len(dungeon.corridor_tiles) == len(set(dungeon.corridor_tiles))
    for tile in dungeon.corridor_tiles:
        assert dungeon.get_room_at(tile) is None
        assert dungeon.get_tile(tile.x, tile.y) is TileType.FLOOR


def test_already_connected_rooms_are_skipped(dungeon, add_room, rng):
    room_a = add_room(dungeon, 4, 4, 8, 8)
    room_b = add_room(dungeon, 24, 4, 8, 8)
    connector = CorridorConnector(GenerationSettings())
    connector.connect_rooms(room_a, room_b, dungeon, rng)

    assert not connector.connect_rooms(room_b, room_a, dungeon, rng)
    assert len(dungeon.doors) == 2


def test_distant_rooms_are_not_connected(dungeon, add_room, rng, caplog):
    room_a = add_room(dungeon, 2, 2, 6, 6)
    room_b = add_room(dungeon, 30, 30, 6, 6)
    before = _floor_count(dungeon)
    connector = CorridorConnector(GenerationSettings(max_connection_distance=10))

    with caplog.at_level(logging.WARNING, logger="corridor_connector"):
        assert not connector.connect_rooms(room_a, room_b, dungeon, rng)

    assert "too long" in caplog.text
    assert _floor_count(dungeon) == before
    assert dungeon.doors == []


def test_door_cap_is_checked_before_carving(dungeon, add_room, rng):
    room_a = add_room(dungeon, 4, 4, 8, 8)
    room_b = add_room(dungeon, 24, 4, 8, 8)
    room_a.door_positions.extend(GridPosition(4, y) for y in range(5, 9))
    before = _floor_count(dungeon)

    connected = CorridorConnector(GenerationSettings()).connect_rooms(room_a, room_b, dungeon, rng)

    assert not connected
    assert _floor_count(dungeon) == before
    assert dungeon.corridor_tiles == []


def test_truncated_leg_abandons_the_link(dungeon, add_room, rng, caplog):
    room_a = add_room(dungeon, 2, 2, 6, 6)
    room_b = add_room(dungeon, 30, 2, 6, 6)
    connector = CorridorConnector(GenerationSettings(max_corridor_segment_length=5))

    with caplog.at_level(logging.WARNING, logger="corridor_connector"):
        linked = connector.connect_rooms(room_a, room_b, dungeon, rng)

    assert not linked
    assert "truncated" in caplog.text
    assert "Abandoning link" in caplog.text
    assert dungeon.doors == []
    assert dungeon.corridor_tiles == []
    assert dungeon.get_tile(20, room_a.center.y) is TileType.WALL


def test_find_components_groups_linked_rooms(two_islands):
    components = CorridorConnector.find_components(two_islands)

    assert len(components) == 2
    assert [len(component) for component in components] == [2, 2]


def test_repair_joins_disconnected_subtrees(two_islands):
    connector = CorridorConnector(GenerationSettings())

    remaining = connector.repair_connectivity(two_islands, random.Random(3))

    assert remaining == 1
    assert two_islands.are_all_rooms_connected()


def test_repair_with_zero_attempts_logs_residual_disconnection(two_islands, caplog):
    connector = CorridorConnector(GenerationSettings(max_connection_attempts=0))

    with caplog.at_level(logging.ERROR, logger="corridor_connector"):
        remaining = connector.repair_connectivity(two_islands, random.Random(3))

    assert remaining == 2
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert errors
    assert "disconnected components" in errors[0].getMessage()


def test_repair_abandons_pairs_that_are_too_far(two_islands, caplog):
    connector = CorridorConnector(GenerationSettings(max_connection_distance=20))

    with caplog.at_level(logging.WARNING, logger="corridor_connector"):
        remaining = connector.repair_connectivity(two_islands, random.Random(3))

    assert remaining == 2
    assert "Abandoning" in caplog.text


@pytest.mark.parametrize("seed", [1, 2, 3, 42])
def test_connect_links_every_room_of_a_partitioned_map(seed):
    settings = GenerationSettings(width=60, height=60, min_room_size=6)
    rng = random.Random(seed)
    dungeon = DungeonData(60, 60)
    root = SpacePartitioner(6).partition(Rect(0, 0, 60, 60), rng)
    RoomCarver(6, 20).carve(root, dungeon, rng)

    remaining = CorridorConnector(settings).connect(root, dungeon, rng)

    assert remaining == 1
    assert dungeon.are_all_rooms_connected()
    for door in dungeon.doors:
        assert door.room_a is not door.room_b
