"""Spatial index for tracking which room occupies each tile."""

from __future__ import annotations

from typing import Dict, Optional

from dungeon_geometry import GridPosition, Rect


class SpatialIndex:
    """Caches tile occupancy to accelerate room lookups by position."""

    def __init__(self) -> None:
        self._tile_to_room: Dict[GridPosition, int] = {}

    def add_room(self, room_index: int, bounds: Rect) -> None:
        """Record all tiles inside ``bounds`` under ``room_index``."""
        for tile in bounds.iter_positions():
            self._tile_to_room[tile] = room_index

    def get_room_at(self, tile: GridPosition) -> Optional[int]:
        """Return the room index occupying ``tile`` if any."""
        return self._tile_to_room.get(tile)

    def __len__(self) -> int:
        return len(self._tile_to_room)

    def clear(self) -> None:
        """Remove all cached data."""
        self._tile_to_room.clear()
