#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import random
from typing import List, Optional

from dungeon_config import EdgePreference, GenerationSettings, StartingPointCriteria
from dungeon_generator import DungeonGenerator
from dungeon_presets import PRESETS, build_preset
from dungeon_validator import DungeonValidator


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a BSP dungeon layout and print it as ASCII.")
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Start from a named preset.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (picked at random if omitted).")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--min-room-size", type=int, default=None)
    parser.add_argument("--max-room-size", type=int, default=None)
    parser.add_argument("--corridor-width", type=int, default=None)
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum partition depth.")
    parser.add_argument(
        "--preferred-edge",
        choices=[edge.name.lower() for edge in EdgePreference],
        default="any",
        help="Map edge the starting room should favour.",
    )
    parser.add_argument("--no-entrance", action="store_true", help="Do not carve an exterior entrance.")
    parser.add_argument("--no-render", action="store_true", help="Skip printing the ASCII map.")
    parser.add_argument("--validate", action="store_true", help="Run the validator and print its report.")
    parser.add_argument(
        "--max-regenerations",
        type=int,
        default=1,
        help="With --validate, try up to this many seeds until one passes.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> GenerationSettings:
    overrides = {
        "width": args.width,
        "height": args.height,
        "min_room_size": args.min_room_size,
        "max_room_size": args.max_room_size,
        "corridor_width": args.corridor_width,
        "max_bsp_depth": args.max_depth,
    }
    overrides = {name: value for name, value in overrides.items() if value is not None}
    if args.preset:
        return build_preset(args.preset, seed=args.seed, **overrides)
    return GenerationSettings(seed=args.seed, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.seed is None:
        # Pick a random seed and print it, so a run can be reproduced with --seed.
        args.seed = random.randint(0, 1000000)
    print(f"Using random seed {args.seed}")

    try:
        settings = build_settings(args)
        criteria = StartingPointCriteria(
            create_exterior_entrance=not args.no_entrance,
            preferred_edge=EdgePreference[args.preferred_edge.upper()],
        )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        return 2

    generator = DungeonGenerator(settings, criteria)
    if args.validate:
        _, seed, result = generator.generate_until_valid(max(1, args.max_regenerations), args.seed)
        if seed != args.seed:
            print(f"Regenerated with seed {seed}")
    else:
        generator.generate()
        result = None

    print(generator.debug_summary())
    if not args.no_render:
        generator.dungeon.print_grid()
    if result is not None:
        print(result.summary())
        return 0 if result.is_valid else 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
