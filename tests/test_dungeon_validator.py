from dataclasses import asdict

import pytest

from dungeon_config import GenerationSettings
from dungeon_generator import DungeonGenerator
from dungeon_geometry import GridPosition
from dungeon_models import DungeonData, DungeonDoor, RoomType
from dungeon_validator import DungeonValidator, ValidationResult, build_room_graph


@pytest.fixture
def generated():
    settings = GenerationSettings(width=50, height=50, seed=42, min_room_size=6)
    return DungeonGenerator(settings).generate()


def test_validation_is_idempotent_and_does_not_mutate(generated):
    distances = [room.distance_from_start for room in generated.rooms]
    types = [room.room_type for room in generated.rooms]
    validator = DungeonValidator()

    first = validator.validate(generated)
    second = validator.validate(generated)

    assert asdict(first) == asdict(second)
    assert [room.distance_from_start for room in generated.rooms] == distances
    assert [room.room_type for room in generated.rooms] == types


def test_scores_are_normalised(generated):
    result = DungeonValidator().validate(generated)

    assert 0.0 <= result.completability_score <= 1.0
    assert 0.0 <= result.balance_score <= 1.0


def test_empty_dungeon_is_invalid():
    result = DungeonValidator().validate(DungeonData(20, 20))

    assert not result.is_valid
    assert "Dungeon has no rooms" in result.errors
    assert "No starting room assigned" in result.errors
    assert result.completability_score == 0.0


def test_unreachable_and_doorless_rooms_are_errors(dungeon, add_room, link_rooms):
    a = add_room(dungeon, 2, 2, 10, 10)
    b = add_room(dungeon, 20, 2, 10, 10)
    add_room(dungeon, 2, 20, 10, 10)
    link_rooms(dungeon, a, b)

    result = DungeonValidator().validate(dungeon)

    assert not result.is_valid
    assert any("unreachable from room 0" in error for error in result.errors)
    assert any("has no doors" in error for error in result.errors)


def test_entrance_door_without_second_room_is_valid(dungeon, add_room, link_rooms):
    a = add_room(dungeon, 2, 2, 10, 10)
    b = add_room(dungeon, 20, 2, 10, 10)
    link_rooms(dungeon, a, b)
    dungeon.add_door(DungeonDoor(GridPosition(5, 2), a, None, is_entrance=True))
    dungeon.add_door(DungeonDoor(GridPosition(23, 2), b, None))

    result = DungeonValidator().validate(dungeon)

    door_errors = [error for error in result.errors if "missing room" in error]
    assert len(door_errors) == 1
    assert "(23, 2)" in door_errors[0]


def test_door_off_boundary_is_a_warning(dungeon, add_room, link_rooms):
    a = add_room(dungeon, 2, 2, 10, 10)
    b = add_room(dungeon, 20, 2, 10, 10)
    link_rooms(dungeon, a, b)
    dungeon.add_door(DungeonDoor(GridPosition(15, 5), a, b))

    result = DungeonValidator().validate(dungeon)

    assert any("not on a room boundary" in warning for warning in result.warnings)


def test_progression_and_size_warnings(dungeon, add_room, link_rooms):
    start = add_room(dungeon, 2, 2, 10, 10)
    boss = add_room(dungeon, 20, 2, 8, 8)
    link_rooms(dungeon, start, boss)
    start.is_starting_room = True
    dungeon.reclassify_room(start, RoomType.STARTING_ROOM)
    dungeon.starting_room = start
    dungeon.reclassify_room(boss, RoomType.BOSS_ROOM)

    result = DungeonValidator().validate(dungeon)

    assert result.is_valid
    assert any("only 1 rooms from the start" in warning for warning in result.warnings)
    assert any("BOSS_ROOM" in warning and "under-sized" in warning for warning in result.warnings)
    assert "No treasure rooms" in result.warnings
    assert any("few connections" in warning for warning in result.warnings)


def test_completability_rewards_deep_boss_and_treasure(dungeon, add_room, link_rooms):
    rooms = [add_room(dungeon, 1 + 10 * i, 2, 8, 8) for i in range(4)]
    for left, right in zip(rooms, rooms[1:]):
        link_rooms(dungeon, left, right)
    start, _, treasure, boss = rooms
    start.is_starting_room = True
    dungeon.reclassify_room(start, RoomType.STARTING_ROOM)
    dungeon.starting_room = start
    dungeon.reclassify_room(treasure, RoomType.TREASURE_ROOM)
    dungeon.reclassify_room(boss, RoomType.BOSS_ROOM)

    result = DungeonValidator().validate(dungeon)

    # 40 reachability + 20 boss + 20 treasure + 4 of 8 types
    assert result.completability_score == pytest.approx((40 + 20 + 20 + 4 / 8 * 20) / 100)


def test_room_graph_ignores_entrances(dungeon, add_room, link_rooms):
    a = add_room(dungeon, 2, 2, 10, 10)
    b = add_room(dungeon, 20, 2, 10, 10)
    link_rooms(dungeon, a, b)
    dungeon.add_door(DungeonDoor(GridPosition(5, 2), a, None, is_entrance=True))

    graph = build_room_graph(dungeon)

    assert sorted(graph.nodes) == [0, 1]
    assert graph.number_of_edges() == 1


def test_summary_lists_findings():
    result = ValidationResult(is_valid=False, warnings=["w1"], errors=["e1"], completability_score=0.5)

    text = result.summary()

    assert "Valid: False" in text
    assert "  - e1" in text
    assert "  - w1" in text
    assert "Completability: 0.50" in text


def test_unreachable_lone_room_of_a_type_is_reported(dungeon, add_room, link_rooms):
    a = add_room(dungeon, 2, 2, 10, 10)
    b = add_room(dungeon, 20, 2, 10, 10)
    boss = add_room(dungeon, 2, 20, 8, 8)
    link_rooms(dungeon, a, b)
    dungeon.reclassify_room(boss, RoomType.BOSS_ROOM)

    result = DungeonValidator().validate(dungeon)

    assert "1 of 1 BOSS_ROOM rooms unreachable" in result.warnings


def test_too_many_small_rooms_warning(dungeon, add_room):
    for x in (2, 12, 22, 32):
        add_room(dungeon, x, 2, 6, 6)

    result = DungeonValidator().validate(dungeon)

    assert "Too many small rooms" in result.warnings
    assert "Too many large rooms" not in result.warnings


def test_too_many_large_rooms_warning(add_room):
    dungeon = DungeonData(60, 60)
    add_room(dungeon, 2, 2, 21, 21)
    add_room(dungeon, 30, 30, 21, 21)

    result = DungeonValidator().validate(dungeon)

    assert "Too many large rooms" in result.warnings
    assert "Too many small rooms" not in result.warnings


def test_multiple_boss_rooms_warning(dungeon, add_room):
    first = add_room(dungeon, 2, 2, 15, 15)
    second = add_room(dungeon, 20, 20, 15, 15)
    dungeon.reclassify_room(first, RoomType.BOSS_ROOM)
    dungeon.reclassify_room(second, RoomType.BOSS_ROOM)

    result = DungeonValidator().validate(dungeon)

    assert "Multiple boss rooms (2)" in result.warnings


def test_ideal_size_split_around_the_map_center_scores_full_balance(add_room):
    dungeon = DungeonData(100, 100)
    # 3 small (8x8), 5 medium (12x12) and 2 large (22x22) rooms whose centers average to (50, 50).
    for x, y in ((46, 6), (16, 66), (76, 66)):
        add_room(dungeon, x, y, 8, 8)
    for x, y in ((44, 44), (24, 24), (64, 64), (64, 24), (24, 64)):
        add_room(dungeon, x, y, 12, 12)
    for x, y in ((2, 2), (76, 76)):
        add_room(dungeon, x, y, 22, 22)

    result = DungeonValidator().validate(dungeon)

    assert result.balance_score == pytest.approx(1.0)


def test_off_center_rooms_lower_the_balance(add_room):
    dungeon = DungeonData(100, 100)
    add_room(dungeon, 2, 2, 8, 8)
    add_room(dungeon, 12, 2, 8, 8)

    result = DungeonValidator().validate(dungeon)

    assert result.balance_score < 1.0
