import random
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from dungeon_config import GenerationSettings
from dungeon_geometry import GridPosition, Rect
from dungeon_models import DungeonData, DungeonDoor, Room, TileType


@pytest.fixture
def settings() -> GenerationSettings:
    return GenerationSettings(width=50, height=50, seed=42, min_room_size=6)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def dungeon() -> DungeonData:
    return DungeonData(40, 40)


@pytest.fixture
def add_room() -> Callable[..., Room]:
    """Carve and register a room on a dungeon the way the room carver does."""

    def _add_room(dungeon: DungeonData, x: int, y: int, width: int, height: int) -> Room:
        room = Room(Rect(x, y, width, height))
        for tile in room.bounds.iter_positions():
            dungeon.set_tile(tile.x, tile.y, TileType.FLOOR)
        room.populate_floor_tiles()
        return dungeon.add_room(room)

    return _add_room


@pytest.fixture
def link_rooms() -> Callable[..., DungeonDoor]:
    """Join two rooms with a single door on the first room's right wall."""

    def _link_rooms(dungeon: DungeonData, room_a: Room, room_b: Room) -> DungeonDoor:
        position = GridPosition(room_a.right, room_a.center.y)
        return dungeon.add_door(DungeonDoor(position, room_a, room_b))

    return _link_rooms
