"""Configuration containers for dungeon generation and start-room selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from dungeon_constants import (
    MAX_BSP_DEPTH,
    MAX_CONNECTION_ATTEMPTS,
    MAX_CONNECTION_DISTANCE,
    MAX_CORRIDOR_SEGMENT_LENGTH,
    MAX_DOORS_PER_ROOM,
    RANDOM_SEED,
    ROOM_PADDING,
)
from dungeon_geometry import MapEdge


@dataclass
class GenerationSettings:
    """Aggregates all tunable parameters for dungeon generation."""

    width: int = 100
    height: int = 100
    seed: int = RANDOM_SEED
    min_room_size: int = 8
    max_room_size: int = 20
    corridor_width: int = 3
    max_bsp_depth: int = MAX_BSP_DEPTH
    # Empty tiles kept between a room and the edge of its partition.
    room_padding: int = ROOM_PADDING

    # Safety limits for the connector; every loop it runs is bounded by one of these.
    max_corridor_segment_length: int = MAX_CORRIDOR_SEGMENT_LENGTH
    max_connection_attempts: int = MAX_CONNECTION_ATTEMPTS
    max_connection_distance: float = MAX_CONNECTION_DISTANCE
    max_doors_per_room: int = MAX_DOORS_PER_ROOM

    # Special rooms, promoted after progression distances are known.
    treasure_room_chance: float = 0.1
    guard_room_chance: float = 0.2
    laboratory_chance: float = 0.15
    boss_room_chance: float = 0.05
    place_boss_room: bool = True
    guarantee_treasure_room: bool = True

    collect_metrics: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("GenerationSettings width and height must be positive")
        if self.min_room_size <= 0:
            raise ValueError("GenerationSettings min_room_size must be positive")
        if self.max_room_size < self.min_room_size:
            raise ValueError("GenerationSettings max_room_size must be >= min_room_size")
        if self.corridor_width <= 0:
            raise ValueError("GenerationSettings corridor_width must be positive")
        if self.max_bsp_depth < 0:
            raise ValueError("GenerationSettings max_bsp_depth cannot be negative")
        if self.room_padding < 0:
            raise ValueError("GenerationSettings room_padding cannot be negative")
        if self.max_corridor_segment_length <= 0:
            raise ValueError("GenerationSettings max_corridor_segment_length must be positive")
        # Zero is allowed: it disables connectivity repair.
        if self.max_connection_attempts < 0:
            raise ValueError("GenerationSettings max_connection_attempts cannot be negative")
        if self.max_connection_distance <= 0:
            raise ValueError("GenerationSettings max_connection_distance must be positive")
        if self.max_doors_per_room <= 0:
            raise ValueError("GenerationSettings max_doors_per_room must be positive")
        for name in (
            "treasure_room_chance",
            "guard_room_chance",
            "laboratory_chance",
            "boss_room_chance",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"GenerationSettings {name} must lie within [0, 1]")
        if self.treasure_room_chance + self.guard_room_chance + self.laboratory_chance > 1.0:
            raise ValueError("GenerationSettings special room chances must sum to at most 1")


class EdgePreference(Enum):
    """Which map edges count as a match for the preferred-edge bonus."""

    ANY = ()
    NORTH = (MapEdge.NORTH,)
    SOUTH = (MapEdge.SOUTH,)
    EAST = (MapEdge.EAST,)
    WEST = (MapEdge.WEST,)
    NORTH_SOUTH = (MapEdge.NORTH, MapEdge.SOUTH)
    EAST_WEST = (MapEdge.EAST, MapEdge.WEST)

    @property
    def edges(self) -> Tuple[MapEdge, ...]:
        return self.value

    def matches(self, edge: MapEdge) -> bool:
        return edge in self.value


@dataclass
class StartingPointCriteria:
    """Hard gates and score weights used to pick the starting room."""

    min_room_area: int = 64
    min_connections: int = 1
    max_connections: int = 3
    prefer_map_edge: bool = True
    edge_preference_strength: float = 50.0
    allow_corners: bool = False
    corner_avoidance_radius: float = 20.0
    create_exterior_entrance: bool = True
    preferred_edge: EdgePreference = EdgePreference.ANY
    # Fraction of all rooms that must be reachable from a candidate.
    min_accessibility_ratio: float = 0.8

    def __post_init__(self) -> None:
        if self.min_room_area < 0:
            raise ValueError("StartingPointCriteria min_room_area cannot be negative")
        if self.min_connections < 0:
            raise ValueError("StartingPointCriteria min_connections cannot be negative")
        if self.max_connections < self.min_connections:
            raise ValueError("StartingPointCriteria max_connections must be >= min_connections")
        if self.edge_preference_strength < 0:
            raise ValueError("StartingPointCriteria edge_preference_strength cannot be negative")
        if self.corner_avoidance_radius < 0:
            raise ValueError("StartingPointCriteria corner_avoidance_radius cannot be negative")
        if not 0.0 <= self.min_accessibility_ratio <= 1.0:
            raise ValueError("StartingPointCriteria min_accessibility_ratio must lie within [0, 1]")
        if not isinstance(self.preferred_edge, EdgePreference):
            raise ValueError("StartingPointCriteria preferred_edge must be an EdgePreference")
