"""Named generation presets for common layout styles."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional

from dungeon_config import GenerationSettings

PRESETS: Dict[str, GenerationSettings] = {
    # Compact, narrow-corridor layouts with many small rooms.
    "metroidvania": GenerationSettings(
        width=80,
        height=60,
        min_room_size=6,
        max_room_size=15,
        corridor_width=2,
        treasure_room_chance=0.15,
        guard_room_chance=0.25,
        laboratory_chance=0.1,
        boss_room_chance=0.05,
    ),
    "dungeon_crawler": GenerationSettings(
        width=100,
        height=100,
        min_room_size=8,
        max_room_size=25,
        corridor_width=3,
        treasure_room_chance=0.2,
        guard_room_chance=0.3,
        laboratory_chance=0.05,
        boss_room_chance=0.1,
    ),
    "survival_horror": GenerationSettings(
        width=60,
        height=60,
        min_room_size=5,
        max_room_size=12,
        corridor_width=2,
        treasure_room_chance=0.05,
        guard_room_chance=0.1,
        laboratory_chance=0.2,
        boss_room_chance=0.03,
    ),
}


def build_preset(name: str, seed: Optional[int] = None, **overrides) -> GenerationSettings:
    """Return a fresh copy of the named preset, optionally with a seed and field overrides."""
    try:
        base = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r}; expected one of {sorted(PRESETS)}") from None
    if seed is not None:
        overrides["seed"] = seed
    # replace() reruns __post_init__, so overrides are validated too.
    return replace(base, **overrides)
