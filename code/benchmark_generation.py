#!/usr/bin/env python3

# Runs dungeon generation over many seeds, collecting timing and layout-quality metrics.

from __future__ import annotations

import argparse
import json
import logging
import math
import random
import statistics
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import networkx as nx

from dungeon_config import GenerationSettings
from dungeon_generator import DungeonGenerator
from dungeon_presets import PRESETS, build_preset
from dungeon_validator import DungeonValidator, build_room_graph

PERCENTILES = [5.0, 25.0, 50.0, 75.0, 95.0, 99.0]


@dataclass
class GenerationRunResult:
    seed: int
    duration: float
    total_rooms: int
    total_doors: int
    corridor_tiles: int
    is_valid: bool
    error_count: int
    warning_count: int
    completability: float
    balance: float
    component_count: int
    cycle_count: int
    graph_diameter: int
    max_start_distance: int
    room_type_counts: Counter[str] = field(default_factory=Counter)
    phase_metrics: Dict[str, Dict[str, float | int]] = field(default_factory=dict)


@dataclass
class MetricDefinition:
    key: str
    name: str
    values: List[float]
    value_formatter: Callable[[float], str] | None = None


def percentile(values: List[float], pct: float) -> float:
    """Linear-interpolated percentile; ``nan`` for empty input."""
    if not values:
        return float("nan")
    ordered = sorted(values)
    rank = (len(ordered) - 1) * (min(max(pct, 0.0), 100.0) / 100.0)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[lower]
    return ordered[lower] + (ordered[upper] - ordered[lower]) * (rank - lower)


def compute_basic_stats(values: List[float]) -> Dict[str, float]:
    return {
        "mean": statistics.mean(values),
        "median": statistics.median(values),
        "min": min(values),
        "max": max(values),
        "stdev": statistics.stdev(values) if len(values) > 1 else float("nan"),
    }


def json_safe_number(value: float | int | None) -> float | int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def format_value(value: float, formatter: Callable[[float], str] | None = None) -> str:
    if math.isnan(value):
        return "nan"
    return formatter(value) if formatter is not None else f"{value:.3f}"


def format_seconds(value: float) -> str:
    if value >= 1.0:
        return f"{value:.3f}s"
    return f"{value * 1000:.1f}ms"


def summarize_metric(definition: MetricDefinition) -> Dict[str, Any]:
    values = definition.values
    summary: Dict[str, Any] = {"count": len(values)}
    if values:
        summary.update({key: json_safe_number(value) for key, value in compute_basic_stats(values).items()})
    summary["percentiles"] = {
        f"p{pct:g}": json_safe_number(percentile(values, pct)) for pct in PERCENTILES
    }
    return summary


def report_metric(definition: MetricDefinition) -> None:
    print(definition.name + ":")
    if not definition.values:
        print("  (no data)")
        return
    stats = compute_basic_stats(definition.values)
    fmt = definition.value_formatter
    print(
        "  mean {mean}, median {median}, min {min}, max {max}, stdev {stdev}".format(
            **{key: format_value(value, fmt) for key, value in stats.items()}
        )
    )
    parts = [
        f"p{pct:g}={format_value(percentile(definition.values, pct), fmt)}" for pct in PERCENTILES
    ]
    print("  Percentiles: " + ", ".join(parts))


def graph_shape(graph: nx.Graph) -> tuple[int, int, int]:
    """Component count, independent cycle count, and diameter of the largest component."""
    if graph.number_of_nodes() == 0:
        return 0, 0, 0
    components = list(nx.connected_components(graph))
    cycle_count = len(nx.cycle_basis(graph))
    largest = max(components, key=len)
    diameter = 0
    if len(largest) >= 2:
        diameter = int(nx.diameter(graph.subgraph(largest)))
    return len(components), cycle_count, diameter


def run_single_generation(settings: GenerationSettings, seed: int) -> GenerationRunResult:
    """Generate and validate one dungeon with ``seed``."""
    generator = DungeonGenerator(settings)
    start = time.perf_counter()
    dungeon = generator.generate(seed)
    duration = time.perf_counter() - start

    result = DungeonValidator().validate(dungeon)
    component_count, cycle_count, diameter = graph_shape(build_room_graph(dungeon))
    max_distance = max((room.distance_from_start for room in dungeon.rooms), default=-1)

    return GenerationRunResult(
        seed=seed,
        duration=duration,
        total_rooms=len(dungeon.rooms),
        total_doors=len(dungeon.doors),
        corridor_tiles=len(dungeon.corridor_tiles),
        is_valid=result.is_valid,
        error_count=len(result.errors),
        warning_count=len(result.warnings),
        completability=result.completability_score,
        balance=result.balance_score,
        component_count=component_count,
        cycle_count=cycle_count,
        graph_diameter=diameter,
        max_start_distance=max_distance,
        room_type_counts=Counter(room.room_type.name for room in dungeon.rooms),
        phase_metrics=generator.metrics.snapshot() if generator.metrics else {},
    )


def run_benchmark(settings: GenerationSettings, num_runs: int, seed: Optional[int]) -> List[GenerationRunResult]:
    rng = random.Random(seed)
    return [run_single_generation(settings, rng.randint(0, 1_000_000)) for _ in range(num_runs)]


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Run the dungeon generator over many seeds and report timing and quality statistics."
    )
    parser.add_argument("-n", "--runs", type=int, default=20, help="Number of generations (default: 20)")
    parser.add_argument(
        "--seed", type=int, default=None, help="Seed for the harness RNG; keeps run seeds reproducible"
    )
    parser.add_argument("--preset", choices=sorted(PRESETS), default=None)
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--json", dest="json_path", default=None, help="Write results to this JSON file")
    args = parser.parse_args(argv)

    if args.runs <= 0:
        raise SystemExit("Number of runs must be a positive integer")

    logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(name)s: %(message)s")

    overrides = {"collect_metrics": True}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    try:
        if args.preset:
            settings = build_preset(args.preset, **overrides)
        else:
            settings = GenerationSettings(**overrides)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")

    results = run_benchmark(settings, args.runs, args.seed)

    for idx, result in enumerate(results, start=1):
        print(
            "Run {idx:02d}: {time} (seed {seed}) | rooms {rooms}, doors {doors}"
            " | {status} ({errors} errors, {warnings} warnings)"
            " | completability {comp:.2f}, balance {bal:.2f}".format(
                idx=idx,
                time=format_seconds(result.duration),
                seed=result.seed,
                rooms=result.total_rooms,
                doors=result.total_doors,
                status="valid" if result.is_valid else "INVALID",
                errors=result.error_count,
                warnings=result.warning_count,
                comp=result.completability,
                bal=result.balance,
            )
        )

    durations = [result.duration for result in results]
    worst = results[durations.index(max(durations))]
    validity_rate = sum(1 for result in results if result.is_valid) / len(results)

    metrics = [
        MetricDefinition("generation_time", "Generation time", durations, format_seconds),
        MetricDefinition("rooms", "Rooms", [float(r.total_rooms) for r in results], lambda v: f"{v:.0f}"),
        MetricDefinition("doors", "Doors", [float(r.total_doors) for r in results], lambda v: f"{v:.0f}"),
        MetricDefinition("completability", "Completability", [r.completability for r in results]),
        MetricDefinition("balance", "Balance", [r.balance for r in results]),
        MetricDefinition("cycle_count", "Cycle count", [float(r.cycle_count) for r in results], lambda v: f"{v:.1f}"),
        MetricDefinition("graph_diameter", "Graph diameter", [float(r.graph_diameter) for r in results], lambda v: f"{v:.0f}"),
        MetricDefinition(
            "max_start_distance",
            "Deepest room distance",
            [float(r.max_start_distance) for r in results],
            lambda v: f"{v:.0f}",
        ),
    ]

    print()
    print(f"Runs: {len(results)}, validity rate {validity_rate:.1%}")
    print(f"Worst-case generation time: {format_seconds(worst.duration)} (seed {worst.seed})")
    for metric in metrics:
        print()
        report_metric(metric)

    type_totals: Counter[str] = Counter()
    for result in results:
        type_totals.update(result.room_type_counts)
    total_rooms = sum(type_totals.values())
    if total_rooms:
        print()
        print("Room type distribution across runs:")
        for name, count in type_totals.most_common():
            print(f"  {name}: {count} ({count / total_rooms:.1%})")

    if args.json_path:
        data = {
            "parameters": {"runs": args.runs, "seed": args.seed, "preset": args.preset},
            "validity_rate": validity_rate,
            "worst_case_run": {"seed": worst.seed, "duration_seconds": worst.duration},
            "aggregated_results": {metric.key: summarize_metric(metric) for metric in metrics},
            "results": [
                {
                    "seed": r.seed,
                    "duration_seconds": r.duration,
                    "is_valid": r.is_valid,
                    "rooms": r.total_rooms,
                    "doors": r.total_doors,
                    "completability": r.completability,
                    "balance": r.balance,
                    "components": r.component_count,
                    "cycles": r.cycle_count,
                    "phase_metrics": r.phase_metrics,
                }
                for r in results
            ],
        }
        with open(args.json_path, "w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
            handle.write("\n")
        print(f"\nSaved benchmark results to {args.json_path}")


if __name__ == "__main__":
    main()
