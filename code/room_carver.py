"""Turns partition leaves into carved rooms."""

from __future__ import annotations

import logging
import random
from typing import List

from dungeon_constants import ROOM_PADDING
from dungeon_geometry import Rect
from dungeon_models import BSPNode, DungeonData, Room, TileType

logger = logging.getLogger(__name__)


class RoomCarver:
    """Places one randomly sized room inside each partition leaf that can hold one."""

    def __init__(self, min_room_size: int, max_room_size: int, padding: int = ROOM_PADDING) -> None:
        if min_room_size <= 0:
            raise ValueError("RoomCarver min_room_size must be positive")
        if max_room_size < min_room_size:
            raise ValueError("RoomCarver max_room_size must be >= min_room_size")
        if padding < 0:
            raise ValueError("RoomCarver padding cannot be negative")
        self.min_room_size = min_room_size
        self.max_room_size = max_room_size
        self.padding = padding

    def carve(self, root: BSPNode, dungeon: DungeonData, rng: random.Random) -> List[Room]:
        """Carve rooms into every eligible leaf of ``root``, left to right."""
        carved: List[Room] = []
        skipped = 0
        for leaf in root.iter_leaves():
            room = self.carve_leaf(leaf, dungeon, rng)
            if room is None:
                skipped += 1
            else:
                carved.append(room)
        if skipped:
            logger.debug("Skipped %d leaves too small for a room", skipped)
        return carved

    def carve_leaf(self, leaf: BSPNode, dungeon: DungeonData, rng: random.Random) -> Room | None:
        bounds = leaf.bounds
        pad = self.padding
        max_width = min(bounds.width - 2 * pad, self.max_room_size)
        max_height = min(bounds.height - 2 * pad, self.max_room_size)
        if max_width < self.min_room_size or max_height < self.min_room_size:
            return None

        width = rng.randint(self.min_room_size, max_width)
        height = rng.randint(self.min_room_size, max_height)
        x = bounds.x + pad + rng.randint(0, bounds.width - width - 2 * pad)
        y = bounds.y + pad + rng.randint(0, bounds.height - height - 2 * pad)

        room = Room(Rect(x, y, width, height))
        for tile in room.bounds.iter_positions():
            dungeon.set_tile(tile.x, tile.y, TileType.FLOOR)
        room.populate_floor_tiles()
        dungeon.add_room(room)
        leaf.room = room
        return room
