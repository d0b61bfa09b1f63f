"""Core dataclasses used by the dungeon generator."""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set

from dungeon_constants import MEDIUM_ROOM_MAX_AREA, SMALL_ROOM_MAX_AREA
from dungeon_geometry import GridPosition, Rect
from grid_renderer import GridRendererMixin
from spatial_index import SpatialIndex


class TileType(Enum):
    """Contents of a single grid cell."""

    WALL = 0
    FLOOR = 1
    DOOR = 2


class RoomType(Enum):
    """Gameplay role of a room. Size types are assigned at creation; the rest are promotions."""

    STARTING_ROOM = 0
    SMALL_ROOM = 1
    MEDIUM_ROOM = 2
    LARGE_ROOM = 3
    CORRIDOR = 4
    TREASURE_ROOM = 5
    GUARD_ROOM = 6
    LABORATORY = 7
    BOSS_ROOM = 8


class DoorState(Enum):
    OPEN = 0
    CLOSED = 1  # Shut but openable without a key.
    LOCKED = 2
    SEALED = 3  # Only external game logic can open it.
    HIDDEN = 4


class DoorOrientation(Enum):
    HORIZONTAL = 0  # Sits in a top or bottom wall.
    VERTICAL = 1  # Sits in a left or right wall.


def room_type_for_area(area: int) -> RoomType:
    """Size classification used when a room is first carved."""
    if area <= SMALL_ROOM_MAX_AREA:
        return RoomType.SMALL_ROOM
    if area <= MEDIUM_ROOM_MAX_AREA:
        return RoomType.MEDIUM_ROOM
    return RoomType.LARGE_ROOM


@dataclass(eq=False)
class Room:
    """A placed rectangular room. Bounds and center never change after creation."""

    bounds: Rect
    room_type: RoomType = field(init=False)
    door_positions: List[GridPosition] = field(default_factory=list)
    floor_tiles: List[GridPosition] = field(default_factory=list)
    distance_from_start: int = -1
    is_starting_room: bool = False
    index: int = -1

    def __post_init__(self) -> None:
        if self.bounds.width <= 0 or self.bounds.height <= 0:
            raise ValueError(f"Room bounds must have positive size, got {self.bounds}")
        self.room_type = room_type_for_area(self.bounds.area)
        # Matches round-half-to-even so odd widths land deterministically.
        self._center = GridPosition(
            round(self.bounds.x + self.bounds.width / 2),
            round(self.bounds.y + self.bounds.height / 2),
        )

    @property
    def center(self) -> GridPosition:
        return self._center

    @property
    def area(self) -> int:
        return self.bounds.area

    @property
    def size_type(self) -> RoomType:
        return room_type_for_area(self.area)

    @property
    def left(self) -> int:
        return self.bounds.x

    @property
    def right(self) -> int:
        return self.bounds.max_x - 1

    @property
    def top(self) -> int:
        return self.bounds.y

    @property
    def bottom(self) -> int:
        return self.bounds.max_y - 1

    def populate_floor_tiles(self) -> None:
        self.floor_tiles = list(self.bounds.iter_positions())

    def contains(self, pos: GridPosition) -> bool:
        return self.bounds.contains(pos)

    def is_on_boundary(self, pos: GridPosition) -> bool:
        """True for tiles inside the room that lie on its outermost ring."""
        if not self.contains(pos):
            return False
        return pos.x in (self.left, self.right) or pos.y in (self.top, self.bottom)

    def is_on_horizontal_edge(self, pos: GridPosition) -> bool:
        """Top or bottom wall, corners excluded."""
        return pos.y in (self.top, self.bottom) and self.left < pos.x < self.right

    def is_on_vertical_edge(self, pos: GridPosition) -> bool:
        """Left or right wall, corners excluded."""
        return pos.x in (self.left, self.right) and self.top < pos.y < self.bottom

    def distance_to_perimeter(self, pos: GridPosition) -> int:
        return min(
            abs(pos.x - self.left),
            abs(pos.x - self.right),
            abs(pos.y - self.top),
            abs(pos.y - self.bottom),
        )

    def perimeter(self) -> List[GridPosition]:
        tiles = []
        for x in range(self.left, self.right + 1):
            tiles.append(GridPosition(x, self.top))
            if self.bottom != self.top:
                tiles.append(GridPosition(x, self.bottom))
        for y in range(self.top + 1, self.bottom):
            tiles.append(GridPosition(self.left, y))
            if self.right != self.left:
                tiles.append(GridPosition(self.right, y))
        return tiles

    def connected_rooms(self, dungeon: DungeonData) -> List[Room]:
        connected: List[Room] = []
        for door in dungeon.doors:
            other = door.other_room(self)
            if other is not None and other not in connected:
                connected.append(other)
        return connected

    def __repr__(self) -> str:
        return f"Room(index={self.index}, bounds={self.bounds}, type={self.room_type.name})"


@dataclass(eq=False)
class DungeonDoor:
    """A door on a room wall. ``room_b`` is None only for the exterior entrance."""

    position: GridPosition
    room_a: Optional[Room]
    room_b: Optional[Room]
    orientation: DoorOrientation = DoorOrientation.HORIZONTAL
    state: DoorState = DoorState.SEALED
    is_entrance: bool = False

    @property
    def rotation_degrees(self) -> int:
        """Rotation a renderer should apply to a door model."""
        return 90 if self.orientation is DoorOrientation.VERTICAL else 0

    def touches(self, room: Room) -> bool:
        return self.room_a is room or self.room_b is room

    def other_room(self, room: Room) -> Optional[Room]:
        if self.room_a is room:
            return self.room_b
        if self.room_b is room:
            return self.room_a
        return None

    def connects(self, room_a: Room, room_b: Room) -> bool:
        return (self.room_a is room_a and self.room_b is room_b) or (
            self.room_a is room_b and self.room_b is room_a
        )


@dataclass(eq=False)
class BSPNode:
    """Node of the space-partition tree. A node is a leaf iff it has no children."""

    bounds: Rect
    left: Optional[BSPNode] = None
    right: Optional[BSPNode] = None
    room: Optional[Room] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def children(self) -> List[BSPNode]:
        return [child for child in (self.left, self.right) if child is not None]

    def iter_leaves(self) -> Iterator[BSPNode]:
        """Yield leaves left to right."""
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
                continue
            # Right pushed first so the left subtree is visited first.
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def rooms(self) -> List[Room]:
        return [leaf.room for leaf in self.iter_leaves() if leaf.room is not None]

    def has_room(self) -> bool:
        return any(leaf.room is not None for leaf in self.iter_leaves())

    def random_room(self, rng: random.Random) -> Optional[Room]:
        """Descend at random to a leaf that holds a carved room."""
        node = self
        while not node.is_leaf:
            options = [child for child in node.children() if child.has_room()]
            if not options:
                return None
            if len(options) == 1:
                node = options[0]
            else:
                node = options[0] if rng.random() > 0.5 else options[1]
        return node.room

    def depth(self) -> int:
        if self.is_leaf:
            return 0
        return 1 + max(child.depth() for child in self.children())


class DungeonData(GridRendererMixin):
    """Mutable state of one generated dungeon: tile grid plus room and door lists."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("DungeonData width and height must be positive")
        self._width = width
        self._height = height
        self.tiles: List[List[TileType]] = []
        self.rooms: List[Room] = []
        self.doors: List[DungeonDoor] = []
        self.corridor_tiles: List[GridPosition] = []
        self.rooms_by_type: Dict[RoomType, List[Room]] = {}
        self.starting_room: Optional[Room] = None
        self.spatial_index = SpatialIndex()
        self._corridor_tile_set: Set[GridPosition] = set()
        self.clear()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        """Reset to an all-wall grid with no entities, ready for a new run."""
        self.tiles = [[TileType.WALL for _ in range(self._width)] for _ in range(self._height)]
        self.rooms = []
        self.doors = []
        self.corridor_tiles = []
        self._corridor_tile_set = set()
        self.rooms_by_type = {room_type: [] for room_type in RoomType}
        self.starting_room = None
        self.spatial_index.clear()

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get_tile(self, x: int, y: int) -> TileType:
        """Tile at ``(x, y)``; everything outside the grid reads as wall."""
        if not self.in_bounds(x, y):
            return TileType.WALL
        return self.tiles[y][x]

    def set_tile(self, x: int, y: int, tile: TileType) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile {(x, y)} outside {self._width}x{self._height} grid")
        self.tiles[y][x] = tile

    def add_room(self, room: Room) -> Room:
        grid_bounds = Rect(0, 0, self._width, self._height)
        if not grid_bounds.contains_rect(room.bounds):
            raise ValueError(f"Room {room.bounds} lies outside the grid")
        room.index = len(self.rooms)
        self.rooms.append(room)
        self.rooms_by_type[room.room_type].append(room)
        self.spatial_index.add_room(room.index, room.bounds)
        return room

    def reclassify_room(self, room: Room, room_type: RoomType) -> None:
        """Change a room's type and keep ``rooms_by_type`` in sync."""
        if room.room_type is room_type:
            return
        bucket = self.rooms_by_type[room.room_type]
        if room in bucket:
            bucket.remove(room)
        room.room_type = room_type
        self.rooms_by_type[room_type].append(room)

    def add_door(self, door: DungeonDoor) -> DungeonDoor:
        self.doors.append(door)
        if door.room_a is not None:
            door.room_a.door_positions.append(door.position)
        if self.in_bounds(door.position.x, door.position.y):
            self.set_tile(door.position.x, door.position.y, TileType.DOOR)
        return door

    def add_corridor_tile(self, pos: GridPosition) -> bool:
        """Register a carved cell; returns False if it was already known."""
        if pos in self._corridor_tile_set:
            return False
        self._corridor_tile_set.add(pos)
        self.corridor_tiles.append(pos)
        return True

    def get_room_at(self, pos: GridPosition) -> Optional[Room]:
        room_index = self.spatial_index.get_room_at(pos)
        if room_index is None:
            return None
        return self.rooms[room_index]

    def get_room_doors(self, room: Room) -> List[DungeonDoor]:
        return [door for door in self.doors if door.touches(room)]

    def count_room_doors(self, room: Room) -> int:
        return sum(1 for door in self.doors if door.touches(room))

    def are_rooms_connected(self, room_a: Room, room_b: Room) -> bool:
        """True if a door directly links the two rooms."""
        return any(door.connects(room_a, room_b) for door in self.doors)

    def adjacency(self) -> Dict[Room, List[Room]]:
        """Room graph built from the door list, neighbours in door order."""
        graph: Dict[Room, List[Room]] = {room: [] for room in self.rooms}
        for door in self.doors:
            if door.room_a is None or door.room_b is None:
                continue
            if door.room_a not in graph or door.room_b not in graph:
                continue
            if door.room_b not in graph[door.room_a]:
                graph[door.room_a].append(door.room_b)
            if door.room_a not in graph[door.room_b]:
                graph[door.room_b].append(door.room_a)
        return graph

    def reachable_rooms(self, start: Room) -> Set[Room]:
        graph = self.adjacency()
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in graph.get(current, ()):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return visited

    def are_all_rooms_connected(self) -> bool:
        if len(self.rooms) <= 1:
            return True
        return len(self.reachable_rooms(self.rooms[0])) == len(self.rooms)

    def room_type_distribution(self) -> Dict[RoomType, int]:
        return {
            room_type: len(rooms)
            for room_type, rooms in self.rooms_by_type.items()
            if rooms
        }
