"""Corridor carving, door placement, and connectivity repair."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Set, Tuple

from dungeon_config import GenerationSettings
from dungeon_geometry import GridPosition, straight_line_step
from dungeon_models import (
    BSPNode,
    DoorOrientation,
    DungeonData,
    DungeonDoor,
    Room,
    TileType,
)

logger = logging.getLogger(__name__)


class CorridorConnector:
    """Links sibling partitions with L-shaped corridors, then repairs leftover islands."""

    def __init__(self, settings: GenerationSettings) -> None:
        self.settings = settings

    def connect(self, root: BSPNode, dungeon: DungeonData, rng: random.Random) -> int:
        """Connect the rooms under ``root`` and return the number of components left."""
        self._connect_subtree(root, dungeon, rng)
        return self.repair_connectivity(dungeon, rng)

    def _connect_subtree(self, node: BSPNode, dungeon: DungeonData, rng: random.Random) -> None:
        if node.is_leaf:
            return
        for child in node.children():
            self._connect_subtree(child, dungeon, rng)
        if node.left is None or node.right is None:
            return
        room_a = node.left.random_room(rng)
        room_b = node.right.random_room(rng)
        if room_a is None or room_b is None:
            return
        self.connect_rooms(room_a, room_b, dungeon, rng)

    # ------------------------------------------------------------------
    # Single connections
    # ------------------------------------------------------------------

    def connect_rooms(
        self,
        room_a: Room,
        room_b: Room,
        dungeon: DungeonData,
        rng: random.Random,
    ) -> bool:
        """Carve a corridor between two rooms and place their doors.

        Returns True when at least one door was created.
        """
        if room_a is room_b:
            return False
        if dungeon.are_rooms_connected(room_a, room_b):
            logger.debug("Rooms %d and %d already connected", room_a.index, room_b.index)
            return False

        distance = room_a.center.distance_to(room_b.center)
        if distance > self.settings.max_connection_distance:
            logger.warning(
                "Corridor between rooms %d and %d too long (%.1f > %.1f); skipping",
                room_a.index,
                room_b.index,
                distance,
                self.settings.max_connection_distance,
            )
            return False

        cap = self.settings.max_doors_per_room
        for room in (room_a, room_b):
            if len(room.door_positions) >= cap:
                logger.warning(
                    "Room %d already has %d doors; not connecting rooms %d and %d",
                    room.index,
                    cap,
                    room_a.index,
                    room_b.index,
                )
                return False

        path = self._carve_l_corridor(room_a.center, room_b.center, dungeon, rng)
        if path is None:
            logger.warning(
                "Abandoning link between rooms %d and %d: corridor leg truncated",
                room_a.index,
                room_b.index,
            )
            return False
        path_set = set(path)

        created = 0
        door_a = self._place_door(room_a, room_b, path, path_set, dungeon)
        if door_a is not None:
            created += 1
        door_b = self._place_door(room_b, room_a, path, path_set, dungeon)
        if door_b is not None:
            created += 1
        if created == 0:
            logger.warning("No door position found between rooms %d and %d", room_a.index, room_b.index)
        return created > 0

    def _carve_l_corridor(
        self,
        start: GridPosition,
        end: GridPosition,
        dungeon: DungeonData,
        rng: random.Random,
    ) -> Optional[List[GridPosition]]:
        """Carve the L between two centers, or carve nothing and return None if a leg hits the step cap."""
        horizontal_first = rng.random() > 0.5
        if horizontal_first:
            corner = GridPosition(end.x, start.y)
        else:
            corner = GridPosition(start.x, end.y)

        legs = [self._segment_points(start, corner), self._segment_points(corner, end)]
        if any(leg[-1] != leg_end for leg, leg_end in zip(legs, (corner, end))):
            return None

        path: List[GridPosition] = []
        seen: Set[GridPosition] = set()
        for leg in legs:
            for point in leg:
                for cell in self._brush(point):
                    if cell in seen or not dungeon.in_bounds(cell.x, cell.y):
                        continue
                    seen.add(cell)
                    path.append(cell)
                    if dungeon.get_tile(cell.x, cell.y) is TileType.DOOR:
                        continue
                    dungeon.set_tile(cell.x, cell.y, TileType.FLOOR)
                    if dungeon.get_room_at(cell) is None:
                        dungeon.add_corridor_tile(cell)
        return path

    def _segment_points(self, start: GridPosition, end: GridPosition) -> List[GridPosition]:
        step_x, step_y = straight_line_step(start, end)
        points = [start]
        current = start
        limit = self.settings.max_corridor_segment_length
        steps = 0
        while current != end:
            if steps >= limit:
                logger.warning(
                    "Corridor segment %s -> %s truncated after %d steps", start, end, limit
                )
                break
            current = current.offset(step_x, step_y)
            points.append(current)
            steps += 1
        return points

    def _brush(self, point: GridPosition) -> List[GridPosition]:
        width = self.settings.corridor_width
        offsets = range(-(width // 2), width - width // 2)
        return [point.offset(dx, dy) for dx in offsets for dy in offsets]

    # ------------------------------------------------------------------
    # Doors
    # ------------------------------------------------------------------

    def _place_door(
        self,
        room: Room,
        other: Room,
        path: List[GridPosition],
        path_set: Set[GridPosition],
        dungeon: DungeonData,
    ) -> Optional[DungeonDoor]:
        position = self._choose_door_position(room, path, dungeon)
        if position is None:
            return None
        orientation = self._door_orientation(room, position, path_set)
        return dungeon.add_door(DungeonDoor(position, room, other, orientation))

    def _choose_door_position(
        self, room: Room, path: List[GridPosition], dungeon: DungeonData
    ) -> Optional[GridPosition]:
        candidates = [
            pos
            for pos in path
            if room.is_on_boundary(pos)
            and self._has_full_clearance(pos, dungeon)
            and dungeon.get_tile(pos.x, pos.y) is not TileType.DOOR
        ]
        if candidates:
            # min() keeps the first of equally scored tiles.
            return min(candidates, key=lambda pos: self._wall_midpoint_distance(room, pos))

        fallback = [pos for pos in path if dungeon.get_tile(pos.x, pos.y) is not TileType.DOOR]
        if not fallback:
            return None
        return min(fallback, key=room.distance_to_perimeter)

    @staticmethod
    def _has_full_clearance(pos: GridPosition, dungeon: DungeonData) -> bool:
        """True if the whole 3x3 neighbourhood of ``pos`` lies inside the grid."""
        return 1 <= pos.x < dungeon.width - 1 and 1 <= pos.y < dungeon.height - 1

    @staticmethod
    def _wall_midpoint_distance(room: Room, pos: GridPosition) -> float:
        scores = []
        if pos.y in (room.top, room.bottom):
            scores.append(abs(pos.x - (room.left + room.right) / 2))
        if pos.x in (room.left, room.right):
            scores.append(abs(pos.y - (room.top + room.bottom) / 2))
        return min(scores)

    @staticmethod
    def _door_orientation(
        room: Room, pos: GridPosition, path_set: Set[GridPosition]
    ) -> DoorOrientation:
        if room.is_on_horizontal_edge(pos):
            return DoorOrientation.HORIZONTAL
        if room.is_on_vertical_edge(pos):
            return DoorOrientation.VERTICAL
        # A corridor running along x meets the door through a side wall.
        if pos.offset(1, 0) in path_set or pos.offset(-1, 0) in path_set:
            return DoorOrientation.VERTICAL
        return DoorOrientation.HORIZONTAL

    # ------------------------------------------------------------------
    # Connectivity repair
    # ------------------------------------------------------------------

    @staticmethod
    def find_components(dungeon: DungeonData) -> List[List[Room]]:
        """Connected components of the door graph, each in discovery order."""
        graph = dungeon.adjacency()
        visited: Set[Room] = set()
        components: List[List[Room]] = []
        for room in dungeon.rooms:
            if room in visited:
                continue
            component: List[Room] = []
            stack = [room]
            visited.add(room)
            while stack:
                current = stack.pop()
                component.append(current)
                for neighbor in graph[current]:
                    if neighbor not in visited:
                        visited.add(neighbor)
                        stack.append(neighbor)
            components.append(component)
        return components

    def repair_connectivity(self, dungeon: DungeonData, rng: random.Random) -> int:
        components = self.find_components(dungeon)
        abandoned: Set[Tuple[int, int]] = set()
        attempts = 0
        while len(components) > 1 and attempts < self.settings.max_connection_attempts:
            attempts += 1
            largest = max(components, key=len)
            pair = self._closest_pair(largest, components, abandoned)
            if pair is None:
                logger.warning("No connectable room pairs remain between components")
                break
            room_a, room_b, distance = pair
            key = _pair_key(room_a, room_b)
            if distance > self.settings.max_connection_distance:
                logger.warning(
                    "Abandoning rooms %d and %d: %.1f apart exceeds %.1f",
                    room_a.index,
                    room_b.index,
                    distance,
                    self.settings.max_connection_distance,
                )
                abandoned.add(key)
                continue
            if not self.connect_rooms(room_a, room_b, dungeon, rng):
                logger.warning("Abandoning rooms %d and %d: no door created", room_a.index, room_b.index)
                abandoned.add(key)
            components = self.find_components(dungeon)

        if len(components) > 1:
            logger.error(
                "Connectivity repair stopped after %d attempts with %d disconnected components",
                attempts,
                len(components),
            )
        else:
            logger.debug("All %d rooms connected after %d repair attempts", len(dungeon.rooms), attempts)
        return len(components)

    @staticmethod
    def _closest_pair(
        largest: List[Room],
        components: List[List[Room]],
        abandoned: Set[Tuple[int, int]],
    ) -> Optional[Tuple[Room, Room, float]]:
        best: Optional[Tuple[Room, Room, float]] = None
        for component in components:
            if component is largest:
                continue
            for room_a in largest:
                for room_b in component:
                    if _pair_key(room_a, room_b) in abandoned:
                        continue
                    distance = room_a.center.distance_to(room_b.center)
                    if best is None or distance < best[2]:
                        best = (room_a, room_b, distance)
        return best


def _pair_key(room_a: Room, room_b: Room) -> Tuple[int, int]:
    return (min(room_a.index, room_b.index), max(room_a.index, room_b.index))
