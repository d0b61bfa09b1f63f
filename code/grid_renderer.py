"""Render the dungeon state to an ASCII grid."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from dungeon_models import DungeonDoor, Room

WALL_CHAR = "#"
FLOOR_CHAR = "."
CORRIDOR_CHAR = ","
DOOR_CHAR = "+"
ENTRANCE_CHAR = "E"
START_CHAR = "S"


class GridRendererMixin:
    """Provides drawing helpers for visualizing the current layout."""

    width: int
    height: int
    tiles: List[List]
    rooms: List[Room]
    doors: List[DungeonDoor]
    starting_room: Optional[Room]

    def draw_to_grid(self, mark_corridors: bool = False, mark_start: bool = True) -> List[List[str]]:
        """Return a fresh row-major character grid of the tiles, doors, and start marker."""
        # Local import avoids a cycle; dungeon_models mixes this class in.
        from dungeon_models import TileType

        grid = [[WALL_CHAR for _ in range(self.width)] for _ in range(self.height)]
        for y in range(self.height):
            for x in range(self.width):
                tile = self.tiles[y][x]
                if tile is TileType.FLOOR:
                    grid[y][x] = FLOOR_CHAR
                elif tile is TileType.DOOR:
                    grid[y][x] = DOOR_CHAR
        if mark_corridors:
            for pos in getattr(self, "corridor_tiles", ()):
                if grid[pos.y][pos.x] == FLOOR_CHAR:
                    grid[pos.y][pos.x] = CORRIDOR_CHAR
        if mark_start and self.starting_room is not None:
            center = self.starting_room.center
            if 0 <= center.x < self.width and 0 <= center.y < self.height:
                grid[center.y][center.x] = START_CHAR
        for door in self.doors:
            if door.is_entrance and 0 <= door.position.x < self.width and 0 <= door.position.y < self.height:
                grid[door.position.y][door.position.x] = ENTRANCE_CHAR
        return grid

    def render_text(self, horizontal_sep: str = "", **kwargs) -> str:
        """Return the ASCII map as a single newline-joined string."""
        return "\n".join(horizontal_sep.join(row) for row in self.draw_to_grid(**kwargs))

    def print_grid(self, horizontal_sep: str = "", **kwargs) -> None:
        """Prints the ASCII grid to the console."""
        print(self.render_text(horizontal_sep, **kwargs))
