"""Scores rooms as starting-point candidates and carves the exterior entrance."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from dungeon_config import StartingPointCriteria
from dungeon_constants import VESTIBULE_DEPTH, VESTIBULE_WIDTH
from dungeon_geometry import GridPosition, MapEdge
from dungeon_models import (
    DoorOrientation,
    DoorState,
    DungeonData,
    DungeonDoor,
    Room,
    RoomType,
    TileType,
)

logger = logging.getLogger(__name__)

SIZE_GATE_BONUS = 10.0
CONNECTION_WEIGHT = 5.0
EDGE_TOUCH_BONUS = 25.0
PREFERRED_EDGE_BONUS = 15.0
CENTRALITY_WEIGHT = 15.0
CORNER_PENALTY = 30.0
ACCESSIBILITY_WEIGHT = 20.0
MEDIUM_ROOM_BONUS = 8.0
LARGE_ROOM_BONUS = 5.0


@dataclass
class StartingPointCandidate:
    """Score breakdown for one room."""

    room: Room
    score: float = 0.0
    connections: int = 0
    accessibility_ratio: float = 0.0
    nearest_edge: MapEdge = MapEdge.NORTH
    edge_distance: int = 0
    rejection_reason: Optional[str] = None
    notes: List[str] = field(default_factory=list)

    @property
    def is_rejected(self) -> bool:
        return self.rejection_reason is not None


class StartingPointSelector:
    """Picks exactly one starting room using the configured criteria."""

    def __init__(self, criteria: Optional[StartingPointCriteria] = None) -> None:
        self.criteria = criteria if criteria is not None else StartingPointCriteria()
        self.last_candidates: List[StartingPointCandidate] = []

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @staticmethod
    def nearest_edge(room: Room, dungeon: DungeonData) -> Tuple[MapEdge, int]:
        """Closest map edge to the room bounds; ties resolve north, south, east, west."""
        distances = (
            (MapEdge.NORTH, room.bounds.y),
            (MapEdge.SOUTH, dungeon.height - room.bounds.max_y),
            (MapEdge.EAST, dungeon.width - room.bounds.max_x),
            (MapEdge.WEST, room.bounds.x),
        )
        return min(distances, key=lambda item: item[1])

    def evaluate_room(self, room: Room, dungeon: DungeonData) -> StartingPointCandidate:
        criteria = self.criteria
        candidate = StartingPointCandidate(room=room)
        candidate.nearest_edge, candidate.edge_distance = self.nearest_edge(room, dungeon)

        if room.area < criteria.min_room_area:
            candidate.rejection_reason = "too small"
            return candidate

        candidate.connections = dungeon.count_room_doors(room)
        if candidate.connections < criteria.min_connections:
            candidate.rejection_reason = "too few connections"
            return candidate

        total = len(dungeon.rooms)
        candidate.accessibility_ratio = len(dungeon.reachable_rooms(room)) / total if total else 0.0
        if candidate.accessibility_ratio < criteria.min_accessibility_ratio:
            candidate.rejection_reason = "poor accessibility"
            return candidate

        score = SIZE_GATE_BONUS
        if candidate.connections <= criteria.max_connections:
            score += CONNECTION_WEIGHT * candidate.connections
        else:
            score -= CONNECTION_WEIGHT * (candidate.connections - criteria.max_connections)

        if criteria.prefer_map_edge:
            score += self._edge_score(candidate, dungeon)
        else:
            score += self._centrality_score(room, dungeon)

        if not criteria.allow_corners and self._near_corner(room, dungeon):
            score -= CORNER_PENALTY
            candidate.notes.append("near corner")

        score += candidate.accessibility_ratio * ACCESSIBILITY_WEIGHT

        size_type = room.size_type
        if size_type is RoomType.MEDIUM_ROOM:
            score += MEDIUM_ROOM_BONUS
        elif size_type is RoomType.LARGE_ROOM:
            score += LARGE_ROOM_BONUS

        candidate.score = score
        return candidate

    def _edge_score(self, candidate: StartingPointCandidate, dungeon: DungeonData) -> float:
        criteria = self.criteria
        edge = candidate.nearest_edge
        score = (1 - candidate.edge_distance / (dungeon.width / 2)) * criteria.edge_preference_strength
        if candidate.edge_distance < 2:
            score += EDGE_TOUCH_BONUS
            candidate.notes.append("touches edge")
        if criteria.preferred_edge.edges:
            if criteria.preferred_edge.matches(edge):
                score += PREFERRED_EDGE_BONUS
            else:
                score -= PREFERRED_EDGE_BONUS
        return score

    @staticmethod
    def _centrality_score(room: Room, dungeon: DungeonData) -> float:
        center_x, center_y = dungeon.width / 2, dungeon.height / 2
        max_distance = math.hypot(center_x, center_y)
        distance = math.hypot(room.center.x - center_x, room.center.y - center_y)
        return (1 - distance / max_distance) * CENTRALITY_WEIGHT

    def _near_corner(self, room: Room, dungeon: DungeonData) -> bool:
        corners = (
            (0, 0),
            (dungeon.width, 0),
            (dungeon.width, dungeon.height),
            (0, dungeon.height),
        )
        radius = self.criteria.corner_avoidance_radius
        return any(
            math.hypot(room.center.x - cx, room.center.y - cy) < radius for cx, cy in corners
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, dungeon: DungeonData) -> Optional[Room]:
        """Choose, reclassify and record the starting room, or return None when no room qualifies."""
        if not dungeon.rooms:
            logger.warning("No rooms available for starting point selection")
            self.last_candidates = []
            return None

        self.last_candidates = [self.evaluate_room(room, dungeon) for room in dungeon.rooms]
        best: Optional[StartingPointCandidate] = None
        for candidate in self.last_candidates:
            if candidate.is_rejected or candidate.score <= 0:
                continue
            if best is None or candidate.score > best.score:
                best = candidate

        if best is None:
            large_enough = [room for room in dungeon.rooms if room.area >= self.criteria.min_room_area]
            if not large_enough:
                logger.error(
                    "No room reaches the minimum starting area of %d; no starting room assigned",
                    self.criteria.min_room_area,
                )
                return None
            chosen = max(large_enough, key=lambda room: room.area)
            logger.warning(
                "No room met the starting point criteria; falling back to room %d", chosen.index
            )
        else:
            chosen = best.room
            logger.info("Selected room %d as start (score %.1f)", chosen.index, best.score)

        self._assign_start(chosen, dungeon)
        if self.criteria.create_exterior_entrance:
            self.create_exterior_entrance(chosen, dungeon)
        return chosen

    @staticmethod
    def _assign_start(room: Room, dungeon: DungeonData) -> None:
        for other in dungeon.rooms:
            if other.is_starting_room and other is not room:
                other.is_starting_room = False
                dungeon.reclassify_room(other, other.size_type)
        room.is_starting_room = True
        dungeon.reclassify_room(room, RoomType.STARTING_ROOM)
        dungeon.starting_room = room

    # ------------------------------------------------------------------
    # Exterior entrance
    # ------------------------------------------------------------------

    def create_exterior_entrance(self, room: Room, dungeon: DungeonData) -> Optional[DungeonDoor]:
        """Open the start room toward its nearest map edge and carve a vestibule outside."""
        edge, _ = self.nearest_edge(room, dungeon)
        candidates = [
            pos
            for pos in self._boundary_facing(room, edge)
            if dungeon.in_bounds(pos.x + edge.dx, pos.y + edge.dy)
            and dungeon.get_tile(pos.x + edge.dx, pos.y + edge.dy) is TileType.WALL
            and dungeon.get_tile(pos.x, pos.y) is not TileType.DOOR
        ]
        if not candidates:
            logger.warning("No exterior entrance position found on the %s side of room %d", edge.name, room.index)
            return None

        position = candidates[len(candidates) // 2]
        orientation = DoorOrientation.HORIZONTAL if edge.is_horizontal else DoorOrientation.VERTICAL
        door = dungeon.add_door(
            DungeonDoor(
                position,
                room,
                None,
                orientation,
                state=DoorState.OPEN,
                is_entrance=True,
            )
        )
        self._carve_vestibule(position, edge, dungeon)
        logger.debug("Entrance placed at %s facing %s", position, edge.name)
        return door

    @staticmethod
    def _boundary_facing(room: Room, edge: MapEdge) -> List[GridPosition]:
        """Boundary tiles on the side of ``room`` facing ``edge``, corners excluded."""
        if edge is MapEdge.NORTH:
            return [GridPosition(x, room.top) for x in range(room.left + 1, room.right)]
        if edge is MapEdge.SOUTH:
            return [GridPosition(x, room.bottom) for x in range(room.left + 1, room.right)]
        if edge is MapEdge.WEST:
            return [GridPosition(room.left, y) for y in range(room.top + 1, room.bottom)]
        return [GridPosition(room.right, y) for y in range(room.top + 1, room.bottom)]

    @staticmethod
    def _carve_vestibule(door: GridPosition, edge: MapEdge, dungeon: DungeonData) -> None:
        half = VESTIBULE_WIDTH // 2
        for depth in range(1, VESTIBULE_DEPTH + 1):
            for spread in range(-half, VESTIBULE_WIDTH - half):
                if edge.is_horizontal:
                    x, y = door.x + spread, door.y + edge.dy * depth
                else:
                    x, y = door.x + edge.dx * depth, door.y + spread
                if not dungeon.in_bounds(x, y) or dungeon.get_tile(x, y) is TileType.DOOR:
                    continue
                dungeon.set_tile(x, y, TileType.FLOOR)
                if dungeon.get_room_at(GridPosition(x, y)) is None:
                    dungeon.add_corridor_tile(GridPosition(x, y))
