"""Recursive binary space partitioning of the dungeon domain."""

from __future__ import annotations

import logging
import random

from dungeon_constants import MAX_BSP_DEPTH, ROOM_PADDING, SPLIT_ASPECT_RATIO
from dungeon_geometry import Rect
from dungeon_models import BSPNode

logger = logging.getLogger(__name__)


class SpacePartitioner:
    """Splits a rectangle into a binary tree whose leaves are candidate room footprints.

    Every leaf is at least ``min_room_size + 2 * padding`` on each side, so the
    carver can fit a padded room into any leaf the partitioner produces.
    """

    def __init__(
        self,
        min_room_size: int,
        max_depth: int = MAX_BSP_DEPTH,
        padding: int = ROOM_PADDING,
    ) -> None:
        if min_room_size <= 0:
            raise ValueError("SpacePartitioner min_room_size must be positive")
        if max_depth < 0:
            raise ValueError("SpacePartitioner max_depth cannot be negative")
        if padding < 0:
            raise ValueError("SpacePartitioner padding cannot be negative")
        self.min_room_size = min_room_size
        self.max_depth = max_depth
        self.padding = padding

    @property
    def min_leaf_size(self) -> int:
        return self.min_room_size + 2 * self.padding

    def partition(self, domain: Rect, rng: random.Random) -> BSPNode:
        root = BSPNode(domain)
        self._split(root, 0, rng)
        leaf_count = sum(1 for _ in root.iter_leaves())
        logger.debug("Partitioned %s into %d leaves", domain, leaf_count)
        return root

    def _split(self, node: BSPNode, depth: int, rng: random.Random) -> None:
        bounds = node.bounds
        min_leaf = self.min_leaf_size
        if depth > self.max_depth:
            return
        if bounds.width < 2 * min_leaf or bounds.height < 2 * min_leaf:
            return

        # Always drawn so the RNG sequence does not depend on the node shape.
        split_along_y = rng.random() > 0.5
        if bounds.aspect_ratio() >= SPLIT_ASPECT_RATIO:
            split_along_y = bounds.height > bounds.width

        if split_along_y:
            offset = rng.randint(min_leaf, bounds.height - min_leaf)
            node.left = BSPNode(Rect(bounds.x, bounds.y, bounds.width, offset))
            node.right = BSPNode(
                Rect(bounds.x, bounds.y + offset, bounds.width, bounds.height - offset)
            )
        else:
            offset = rng.randint(min_leaf, bounds.width - min_leaf)
            node.left = BSPNode(Rect(bounds.x, bounds.y, offset, bounds.height))
            node.right = BSPNode(
                Rect(bounds.x + offset, bounds.y, bounds.width - offset, bounds.height)
            )

        self._split(node.left, depth + 1, rng)
        self._split(node.right, depth + 1, rng)
