"""DungeonGenerator runs the partition, carve, connect and progression phases in order."""

from __future__ import annotations

import logging
import random
from enum import Enum
from time import perf_counter
from typing import Callable, Iterator, Optional, Tuple

from corridor_connector import CorridorConnector
from dungeon_config import GenerationSettings, StartingPointCriteria
from dungeon_geometry import Rect
from dungeon_models import BSPNode, DungeonData
from dungeon_validator import DungeonValidator, ValidationResult
from metrics import GenerationMetrics
from progression_initializer import ProgressionInitializer
from room_carver import RoomCarver
from space_partitioner import SpacePartitioner
from special_room_assigner import SpecialRoomAssigner
from starting_point_selector import StartingPointSelector

logger = logging.getLogger(__name__)


class GenerationPhase(Enum):
    PARTITION = "partition"
    CARVE_ROOMS = "carve_rooms"
    CONNECT = "connect"
    SELECT_START = "select_start"
    PROGRESSION = "progression"
    SPECIAL_ROOMS = "special_rooms"


class DungeonGenerator:
    """Manages the overall process of generating a dungeon floor layout."""

    def __init__(
        self,
        settings: GenerationSettings,
        criteria: Optional[StartingPointCriteria] = None,
    ) -> None:
        if settings is None:
            raise ValueError("DungeonGenerator requires GenerationSettings")
        if criteria is None:
            logger.info("No starting point criteria supplied; using defaults")
            criteria = StartingPointCriteria()
        self.settings = settings
        self.criteria = criteria
        self.seed = settings.seed
        self.rng = random.Random(self.seed)
        self.dungeon = DungeonData(settings.width, settings.height)
        self.root_node: Optional[BSPNode] = None
        self.component_count = 0
        self.metrics = GenerationMetrics() if settings.collect_metrics else None

        self.partitioner = SpacePartitioner(
            settings.min_room_size, settings.max_bsp_depth, settings.room_padding
        )
        self.carver = RoomCarver(settings.min_room_size, settings.max_room_size, settings.room_padding)
        self.connector = CorridorConnector(settings)
        self.start_selector = StartingPointSelector(criteria)
        self.progression = ProgressionInitializer()
        self.special_rooms = SpecialRoomAssigner(settings)

    def _run_phase(self, phase: GenerationPhase, func: Callable[..., object], *args) -> object:
        if self.metrics is None:
            return func(*args)

        rooms_before = len(self.dungeon.rooms)
        doors_before = len(self.dungeon.doors)
        corridor_before = len(self.dungeon.corridor_tiles)
        start = perf_counter()
        try:
            return func(*args)
        finally:
            self.metrics.record_phase(
                phase.value,
                perf_counter() - start,
                len(self.dungeon.rooms) - rooms_before,
                len(self.dungeon.doors) - doors_before,
                len(self.dungeon.corridor_tiles) - corridor_before,
            )

    def iter_generate(self, seed: Optional[int] = None) -> Iterator[GenerationPhase]:
        """Generate a fresh dungeon, yielding after each phase completes.

        Callers that must not block for a whole run can resume the iterator
        between frames; the output is the same as ``generate``.
        """
        if seed is not None:
            self.seed = seed
        self.rng.seed(self.seed)
        self.dungeon = DungeonData(self.settings.width, self.settings.height)
        logger.debug("Generating %dx%d dungeon with seed %d", self.dungeon.width, self.dungeon.height, self.seed)

        domain = Rect(0, 0, self.settings.width, self.settings.height)
        self.root_node = self._run_phase(
            GenerationPhase.PARTITION, self.partitioner.partition, domain, self.rng
        )
        yield GenerationPhase.PARTITION

        self._run_phase(
            GenerationPhase.CARVE_ROOMS, self.carver.carve, self.root_node, self.dungeon, self.rng
        )
        if not self.dungeon.rooms:
            logger.warning("No rooms carved; the grid is too small for min_room_size")
        yield GenerationPhase.CARVE_ROOMS

        self.component_count = self._run_phase(
            GenerationPhase.CONNECT, self.connector.connect, self.root_node, self.dungeon, self.rng
        )
        yield GenerationPhase.CONNECT

        self._run_phase(GenerationPhase.SELECT_START, self.start_selector.select, self.dungeon)
        yield GenerationPhase.SELECT_START

        self._run_phase(GenerationPhase.PROGRESSION, self.progression.initialize, self.dungeon)
        yield GenerationPhase.PROGRESSION

        self._run_phase(
            GenerationPhase.SPECIAL_ROOMS, self.special_rooms.assign, self.dungeon, self.rng
        )
        yield GenerationPhase.SPECIAL_ROOMS

        logger.info(
            "Generated %d rooms, %d doors, %d corridor tiles (seed %d)",
            len(self.dungeon.rooms),
            len(self.dungeon.doors),
            len(self.dungeon.corridor_tiles),
            self.seed,
        )

    def generate(self, seed: Optional[int] = None) -> DungeonData:
        for _ in self.iter_generate(seed):
            pass
        return self.dungeon

    def generate_until_valid(
        self,
        max_attempts: int = 5,
        seed: Optional[int] = None,
        validator: Optional[DungeonValidator] = None,
    ) -> Tuple[DungeonData, int, ValidationResult]:
        """Regenerate with fresh seeds until validation reports no errors.

        Returns the last attempt when none passes.
        """
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        validator = validator if validator is not None else DungeonValidator()
        seed_rng = random.Random(self.seed if seed is None else seed)
        attempt_seed = self.seed if seed is None else seed
        result = ValidationResult()
        for attempt in range(1, max_attempts + 1):
            dungeon = self.generate(attempt_seed)
            result = validator.validate(dungeon)
            if result.is_valid:
                return dungeon, attempt_seed, result
            logger.info(
                "Seed %d failed validation with %d errors (attempt %d/%d)",
                attempt_seed,
                len(result.errors),
                attempt,
                max_attempts,
            )
            attempt_seed = seed_rng.randrange(2**31)
        logger.warning("No valid dungeon after %d attempts", max_attempts)
        return self.dungeon, self.seed, result

    def debug_summary(self) -> str:
        dungeon = self.dungeon
        lines = [
            f"Seed: {self.seed}",
            f"Size: {dungeon.width}x{dungeon.height}",
            f"Rooms: {len(dungeon.rooms)}",
            f"Doors: {len(dungeon.doors)}",
            f"Corridor tiles: {len(dungeon.corridor_tiles)}",
        ]
        if dungeon.starting_room is not None:
            lines.append(f"Starting room: {dungeon.starting_room.center}")
        else:
            lines.append("Starting room: none")
        lines.append(f"All rooms connected: {dungeon.are_all_rooms_connected()}")
        if self.metrics is not None:
            lines.append(f"Generation time: {self.metrics.total_time * 1000:.1f}ms")
        lines.append("Room types:")
        for room_type, count in dungeon.room_type_distribution().items():
            lines.append(f"  {room_type.name}: {count}")
        return "\n".join(lines)
