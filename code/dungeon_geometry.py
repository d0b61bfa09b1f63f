"""Geometry helpers for working with grid positions, edges, and rectangles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple


class MapEdge(Enum):
    """Sides of the map; NORTH is the ``y == 0`` side."""

    NORTH = (0, -1)
    SOUTH = (0, 1)
    EAST = (1, 0)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def is_horizontal(self) -> bool:
        """True for edges that run along the x axis (north and south)."""
        return self.dx == 0


@dataclass(frozen=True, order=True)
class GridPosition:
    """Integer tile coordinate."""

    x: int
    y: int

    def __iter__(self) -> Iterator[int]:
        yield self.x
        yield self.y

    def __add__(self, other: GridPosition) -> GridPosition:
        return GridPosition(self.x + other.x, self.y + other.y)

    def offset(self, dx: int, dy: int) -> GridPosition:
        return GridPosition(self.x + dx, self.y + dy)

    def distance_to(self, other: GridPosition) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> Tuple[int, int]:
        return self.x, self.y

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> GridPosition:
        return cls(*value)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True)
class Rect:
    """Immutable axis-aligned rectangle using integer tile coordinates."""

    x: int
    y: int
    width: int
    height: int

    @property
    def max_x(self) -> int:
        """Right edge (exclusive)."""
        return self.x + self.width

    @property
    def max_y(self) -> int:
        """Bottom edge (exclusive)."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def aspect_ratio(self) -> float:
        """Ratio of the longer side to the shorter one (1.0 for squares)."""
        shorter = min(self.width, self.height)
        if shorter <= 0:
            return math.inf
        return max(self.width, self.height) / shorter

    def overlaps(self, other: Rect) -> bool:
        """Return True when the interior of this rect intersects another rect."""
        if self.max_x <= other.x or other.max_x <= self.x:
            return False
        if self.max_y <= other.y or other.max_y <= self.y:
            return False
        return True

    def expand(self, margin: int) -> Rect:
        """Return a rect grown outward by ``margin`` tiles on all sides."""
        if margin == 0:
            return self
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def contains(self, point: GridPosition) -> bool:
        """Return True if the provided tile lies inside this rect."""
        return self.x <= point.x < self.max_x and self.y <= point.y < self.max_y

    def contains_rect(self, other: Rect) -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.max_x <= self.max_x
            and other.max_y <= self.max_y
        )

    def iter_positions(self) -> Iterator[GridPosition]:
        """Yield every tile in the rect, column by column."""
        for tx in range(self.x, self.max_x):
            for ty in range(self.y, self.max_y):
                yield GridPosition(tx, ty)

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Return the rect as an ``(x, y, width, height)`` tuple."""
        return self.x, self.y, self.width, self.height

    def __str__(self) -> str:
        return f"Rect({self.x}, {self.y}, {self.width}x{self.height})"


def straight_line_step(start: GridPosition, end: GridPosition) -> Tuple[int, int]:
    """Unit step from ``start`` toward ``end`` along each axis."""
    step_x = (end.x > start.x) - (end.x < start.x)
    step_y = (end.y > start.y) - (end.y < start.y)
    return step_x, step_y
