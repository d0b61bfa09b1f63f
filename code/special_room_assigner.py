"""Promotes rooms to treasure, guard, laboratory and boss types by depth."""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from dungeon_config import GenerationSettings
from dungeon_models import DungeonData, Room, RoomType

logger = logging.getLogger(__name__)

BOSS_MIN_DISTANCE = 3
TREASURE_MIN_DISTANCE = 2


class SpecialRoomAssigner:
    """Assigns gameplay roles once progression distances are known."""

    def __init__(self, settings: GenerationSettings) -> None:
        self.settings = settings

    def assign(self, dungeon: DungeonData, rng: random.Random) -> List[Room]:
        """Promote rooms in place and return the rooms that changed type."""
        promoted: List[Room] = []
        if dungeon.starting_room is None:
            logger.warning("Skipping special rooms: no starting room")
            return promoted

        boss = None
        if self.settings.place_boss_room or rng.random() < self.settings.boss_room_chance:
            boss = self._place_boss(dungeon)
            if boss is not None:
                promoted.append(boss)

        settings = self.settings
        guard_cutoff = settings.treasure_room_chance + settings.guard_room_chance
        lab_cutoff = guard_cutoff + settings.laboratory_chance
        for room in self._eligible_rooms(dungeon):
            roll = rng.random()
            if roll < settings.treasure_room_chance:
                if room.distance_from_start >= TREASURE_MIN_DISTANCE:
                    dungeon.reclassify_room(room, RoomType.TREASURE_ROOM)
                    promoted.append(room)
            elif roll < guard_cutoff:
                dungeon.reclassify_room(room, RoomType.GUARD_ROOM)
                promoted.append(room)
            elif roll < lab_cutoff:
                dungeon.reclassify_room(room, RoomType.LABORATORY)
                promoted.append(room)

        if settings.guarantee_treasure_room and not dungeon.rooms_by_type[RoomType.TREASURE_ROOM]:
            treasure = self._farthest(dungeon, TREASURE_MIN_DISTANCE, include_promoted=True)
            if treasure is not None:
                if treasure in promoted:
                    promoted.remove(treasure)
                dungeon.reclassify_room(treasure, RoomType.TREASURE_ROOM)
                promoted.append(treasure)
            else:
                logger.info("No room deep enough for a treasure room")

        logger.debug(
            "Special rooms: boss=%s, %d promotions",
            boss.index if boss is not None else None,
            len(promoted),
        )
        return promoted

    def _place_boss(self, dungeon: DungeonData) -> Optional[Room]:
        boss = self._farthest(dungeon, BOSS_MIN_DISTANCE)
        if boss is None:
            logger.info("No room deep enough for a boss room")
            return None
        # Keep a second deep room free so a treasure room can still be placed.
        others = [
            room
            for room in self._eligible_rooms(dungeon)
            if room is not boss and room.distance_from_start >= TREASURE_MIN_DISTANCE
        ]
        if not others:
            logger.info("Skipping boss room: it would be the only deep room")
            return None
        dungeon.reclassify_room(boss, RoomType.BOSS_ROOM)
        return boss

    @staticmethod
    def _eligible_rooms(dungeon: DungeonData) -> List[Room]:
        """Reachable, non-start rooms that still carry a size-based type."""
        size_types = (RoomType.SMALL_ROOM, RoomType.MEDIUM_ROOM, RoomType.LARGE_ROOM)
        return [
            room
            for room in dungeon.rooms
            if not room.is_starting_room
            and room.distance_from_start > 0
            and room.room_type in size_types
        ]

    def _farthest(
        self, dungeon: DungeonData, min_distance: int, include_promoted: bool = False
    ) -> Optional[Room]:
        if include_promoted:
            pool = [
                room
                for room in dungeon.rooms
                if not room.is_starting_room
                and room.distance_from_start > 0
                and room.room_type is not RoomType.BOSS_ROOM
            ]
        else:
            pool = self._eligible_rooms(dungeon)
        best: Optional[Room] = None
        for room in pool:
            if room.distance_from_start < min_distance:
                continue
            if best is None or (room.distance_from_start, room.area) > (
                best.distance_from_start,
                best.area,
            ):
                best = room
        return best
