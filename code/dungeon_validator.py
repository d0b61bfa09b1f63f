"""Post-generation structural and balance checks.

The validator is advisory: it never mutates the dungeon and never raises for
a bad layout. Callers decide whether a result with errors warrants a new seed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Set

import networkx as nx

from dungeon_constants import SCORED_ROOM_TYPE_COUNT
from dungeon_models import DungeonData, Room, RoomType

# Starting room sanity.
MIN_START_AREA = 64
MIN_START_CONNECTIONS = 2
MAX_START_CONNECTIONS = 4
OFF_CENTER_RATIO = 0.8

# Distribution sanity.
MIN_DISTINCT_TYPES = 3
MAX_SMALL_RATIO = 0.7
MAX_LARGE_RATIO = 0.4

# Size sanity.
MIN_BOSS_AREA = 200
MIN_TREASURE_AREA = 100
MAX_ROOM_AREA = 600

# Ideal small/medium/large split used by the balance score.
IDEAL_SIZE_RATIOS = {
    RoomType.SMALL_ROOM: 0.3,
    RoomType.MEDIUM_ROOM: 0.5,
    RoomType.LARGE_ROOM: 0.2,
}
SIZE_BALANCE_WEIGHT = 30.0
SPATIAL_BALANCE_WEIGHT = 40.0


@dataclass
class ValidationResult:
    is_valid: bool = True
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    completability_score: float = 0.0
    balance_score: float = 0.0

    def summary(self) -> str:
        lines = [
            f"Valid: {self.is_valid}",
            f"Completability: {self.completability_score:.2f}",
            f"Balance: {self.balance_score:.2f}",
        ]
        if self.errors:
            lines.append(f"Errors ({len(self.errors)}):")
            lines.extend(f"  - {error}" for error in self.errors)
        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}):")
            lines.extend(f"  - {warning}" for warning in self.warnings)
        return "\n".join(lines)


def build_room_graph(dungeon: DungeonData) -> nx.Graph:
    """Undirected graph of room indices linked by interior doors."""
    graph = nx.Graph()
    graph.add_nodes_from(room.index for room in dungeon.rooms)
    members = set(dungeon.rooms)
    for door in dungeon.doors:
        if door.room_a is None or door.room_b is None:
            continue
        if door.room_a not in members or door.room_b not in members:
            continue
        if door.room_a is door.room_b:
            continue
        graph.add_edge(door.room_a.index, door.room_b.index)
    return graph


class DungeonValidator:
    """Runs every check against a generated dungeon and scores it."""

    def validate(self, dungeon: DungeonData) -> ValidationResult:
        result = ValidationResult()
        graph = build_room_graph(dungeon)
        start = dungeon.starting_room
        if start is not None and start in dungeon.rooms:
            distances: Dict[int, int] = nx.single_source_shortest_path_length(graph, start.index)
        else:
            distances = {}

        self._check_connectivity(dungeon, graph, result)
        self._check_starting_room(dungeon, result)
        self._check_distribution(dungeon, result)
        self._check_room_sizes(dungeon, result)
        self._check_doors(dungeon, result)
        self._check_progression(dungeon, distances, result)

        result.completability_score = self._completability(dungeon, distances)
        result.balance_score = self._balance(dungeon)
        result.is_valid = not result.errors
        return result

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    @staticmethod
    def _check_connectivity(dungeon: DungeonData, graph: nx.Graph, result: ValidationResult) -> None:
        if not dungeon.rooms:
            result.errors.append("Dungeon has no rooms")
            return
        reachable: Set[int] = set(nx.single_source_shortest_path_length(graph, dungeon.rooms[0].index))
        unreachable = [room for room in dungeon.rooms if room.index not in reachable]
        if unreachable:
            result.errors.append(
                f"{len(unreachable)} of {len(dungeon.rooms)} rooms unreachable from room 0"
            )
        for room_type, rooms in dungeon.rooms_by_type.items():
            missing = [room for room in rooms if room.index not in reachable]
            if missing:
                result.warnings.append(
                    f"{len(missing)} of {len(rooms)} {room_type.name} rooms unreachable"
                )

    @staticmethod
    def _check_starting_room(dungeon: DungeonData, result: ValidationResult) -> None:
        start = dungeon.starting_room
        if start is None:
            result.errors.append("No starting room assigned")
            return
        if start.area < MIN_START_AREA:
            result.warnings.append(f"Starting room is small ({start.area} tiles)")
        connections = dungeon.count_room_doors(start)
        if connections < MIN_START_CONNECTIONS:
            result.warnings.append(f"Starting room has few connections ({connections})")
        elif connections > MAX_START_CONNECTIONS:
            result.warnings.append(f"Starting room has many connections ({connections})")
        center_x, center_y = dungeon.width / 2, dungeon.height / 2
        max_distance = math.hypot(center_x, center_y)
        distance = math.hypot(start.center.x - center_x, start.center.y - center_y)
        if max_distance and distance > OFF_CENTER_RATIO * max_distance:
            result.warnings.append("Starting room is far from the map center")

    @staticmethod
    def _check_distribution(dungeon: DungeonData, result: ValidationResult) -> None:
        total = len(dungeon.rooms)
        if total == 0:
            return
        counts = {room_type: len(rooms) for room_type, rooms in dungeon.rooms_by_type.items()}
        used = sum(1 for count in counts.values() if count)
        if used < MIN_DISTINCT_TYPES:
            result.warnings.append(f"Low room variety ({used} types)")
        if counts[RoomType.SMALL_ROOM] / total > MAX_SMALL_RATIO:
            result.warnings.append("Too many small rooms")
        if counts[RoomType.LARGE_ROOM] / total > MAX_LARGE_RATIO:
            result.warnings.append("Too many large rooms")
        if counts[RoomType.TREASURE_ROOM] == 0:
            result.warnings.append("No treasure rooms")
        if counts[RoomType.BOSS_ROOM] > 1:
            result.warnings.append(f"Multiple boss rooms ({counts[RoomType.BOSS_ROOM]})")

    @staticmethod
    def _check_room_sizes(dungeon: DungeonData, result: ValidationResult) -> None:
        minimums = (
            (RoomType.BOSS_ROOM, MIN_BOSS_AREA),
            (RoomType.TREASURE_ROOM, MIN_TREASURE_AREA),
            (RoomType.STARTING_ROOM, MIN_START_AREA),
        )
        for room_type, minimum in minimums:
            for room in dungeon.rooms_by_type[room_type]:
                if room.area < minimum:
                    result.warnings.append(
                        f"{room_type.name} {room.index} under-sized ({room.area} < {minimum})"
                    )
        for room in dungeon.rooms:
            if room.area > MAX_ROOM_AREA:
                result.warnings.append(f"Room {room.index} is very large ({room.area} tiles)")

    @staticmethod
    def _check_doors(dungeon: DungeonData, result: ValidationResult) -> None:
        members = set(dungeon.rooms)
        for number, door in enumerate(dungeon.doors):
            if door.room_a is None or (door.room_b is None and not door.is_entrance):
                result.errors.append(f"Door {number} at {door.position} has a missing room")
                continue
            linked = [room for room in (door.room_a, door.room_b) if room is not None]
            if any(room not in members for room in linked):
                result.errors.append(f"Door {number} at {door.position} references an unknown room")
                continue
            if not any(room.is_on_boundary(door.position) for room in linked):
                result.warnings.append(f"Door {number} at {door.position} is not on a room boundary")
        for room in dungeon.rooms:
            if dungeon.count_room_doors(room) == 0:
                result.errors.append(f"Room {room.index} has no doors")

    @staticmethod
    def _check_progression(
        dungeon: DungeonData, distances: Dict[int, int], result: ValidationResult
    ) -> None:
        for boss in dungeon.rooms_by_type[RoomType.BOSS_ROOM]:
            distance = distances.get(boss.index)
            if distance is not None and distance <= 2:
                result.warnings.append(f"Boss room {boss.index} is only {distance} rooms from the start")
        deep_rooms = [room for room in dungeon.rooms if distances.get(room.index, -1) >= 4]
        if deep_rooms and not any(room.room_type is RoomType.TREASURE_ROOM for room in deep_rooms):
            result.warnings.append("No treasure room among the deepest rooms")

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    @staticmethod
    def _completability(dungeon: DungeonData, distances: Dict[int, int]) -> float:
        total = len(dungeon.rooms)
        if total == 0:
            return 0.0
        score = len(distances) / total * 40

        bosses = dungeon.rooms_by_type[RoomType.BOSS_ROOM]
        if len(bosses) == 1 and distances.get(bosses[0].index, -1) >= 3:
            score += 20

        treasures = dungeon.rooms_by_type[RoomType.TREASURE_ROOM]
        if treasures and all(distances.get(room.index, -1) >= 2 for room in treasures):
            score += 20

        used = sum(
            1
            for room_type, rooms in dungeon.rooms_by_type.items()
            if rooms and room_type is not RoomType.CORRIDOR
        )
        score += used / SCORED_ROOM_TYPE_COUNT * 20
        return _clamp(score / 100)

    @staticmethod
    def _balance(dungeon: DungeonData) -> float:
        rooms: List[Room] = dungeon.rooms
        total = len(rooms)
        if total == 0:
            return 0.0

        size_counts = {room_type: 0 for room_type in IDEAL_SIZE_RATIOS}
        for room in rooms:
            size_counts[room.size_type] += 1
        deviation = sum(
            abs(size_counts[room_type] / total - ideal)
            for room_type, ideal in IDEAL_SIZE_RATIOS.items()
        )
        size_term = _clamp(1 - deviation)

        if total < 2:
            spatial_term = 1.0
        else:
            centroid_x = sum(room.center.x for room in rooms) / total
            centroid_y = sum(room.center.y for room in rooms) / total
            map_x, map_y = dungeon.width / 2, dungeon.height / 2
            offset = math.hypot(centroid_x - map_x, centroid_y - map_y)
            spatial_term = _clamp(1 - offset / math.hypot(map_x, map_y))

        weighted = size_term * SIZE_BALANCE_WEIGHT + spatial_term * SPATIAL_BALANCE_WEIGHT
        return _clamp(weighted / (SIZE_BALANCE_WEIGHT + SPATIAL_BALANCE_WEIGHT))


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
