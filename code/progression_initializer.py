"""Distance labelling and initial door states."""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict

from dungeon_models import DoorState, DungeonData, Room

logger = logging.getLogger(__name__)


class ProgressionInitializer:
    """Labels rooms with their BFS distance from the start and sets door states.

    The entrance is open, doors touching the starting room are closed but
    openable, and every other door stays sealed until game logic opens it.
    """

    def initialize(self, dungeon: DungeonData) -> Dict[Room, int]:
        start = dungeon.starting_room
        if start is None:
            logger.error("Cannot initialise progression without a starting room")
            return {}

        distances = self.compute_distances(dungeon, start)
        for room in dungeon.rooms:
            room.distance_from_start = distances.get(room, -1)

        for door in dungeon.doors:
            if door.is_entrance:
                door.state = DoorState.OPEN
            elif door.touches(start):
                door.state = DoorState.CLOSED
            else:
                door.state = DoorState.SEALED

        unreachable = len(dungeon.rooms) - len(distances)
        if unreachable:
            logger.warning("%d rooms unreachable from the starting room", unreachable)
        return distances

    @staticmethod
    def compute_distances(dungeon: DungeonData, start: Room) -> Dict[Room, int]:
        graph = dungeon.adjacency()
        distances = {start: 0}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in graph.get(current, ()):
                if neighbor not in distances:
                    distances[neighbor] = distances[current] + 1
                    queue.append(neighbor)
        return distances
