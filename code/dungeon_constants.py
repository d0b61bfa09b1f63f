"""Shared constants for the dungeon generator."""

from __future__ import annotations

RANDOM_SEED = 12345  # Default seed; the CLI overrides it or picks one at random.

# Space partitioning.
MAX_BSP_DEPTH = 6
SPLIT_ASPECT_RATIO = 1.25  # At or above this ratio the split cuts across the long axis.

# Room carving.
ROOM_PADDING = 2
SMALL_ROOM_MAX_AREA = 100
MEDIUM_ROOM_MAX_AREA = 400

# Corridor safety limits. Every loop in the connector is bounded by one of these.
MAX_CORRIDOR_SEGMENT_LENGTH = 200
MAX_CONNECTION_ATTEMPTS = 10
MAX_CONNECTION_DISTANCE = 100.0
MAX_DOORS_PER_ROOM = 4

# Exterior entrance vestibule, carved outside the starting room.
VESTIBULE_DEPTH = 3
VESTIBULE_WIDTH = 3

# Number of room types that count toward variety scoring (all but Corridor).
SCORED_ROOM_TYPE_COUNT = 8
