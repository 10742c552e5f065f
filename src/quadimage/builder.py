"""
Quadtree builder.

This module constructs a quadtree from the top-left block of a raster.
Every pixel of the block becomes a leaf; each branch stores the truncating
average of its four children, computed bottom-up.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from .quadtree import QuadTreeNode, LeafNode, BranchNode, Quadtree
from .raster import Raster


logger = logging.getLogger(__name__)

# Largest side length built or loaded (safety limit)
MAX_RESOLUTION = 16384


@dataclass
class BuilderConfig:
    """Configuration for the quadtree builder."""

    resolution: int
    """Side length of the square block to encode; a power of two."""

    max_resolution: int = MAX_RESOLUTION
    """Largest accepted resolution (safety limit)."""

    def __post_init__(self):
        if self.resolution < 1 or self.resolution & (self.resolution - 1):
            raise ValueError(
                f"resolution must be a positive power of two, got {self.resolution}"
            )
        if self.resolution > self.max_resolution:
            raise ValueError(
                f"resolution {self.resolution} exceeds max_resolution {self.max_resolution}"
            )


@dataclass
class BuilderStats:
    """Statistics collected during tree building."""

    nodes_created: int = 0
    leaves_created: int = 0
    branches_created: int = 0
    pixels_read: int = 0
    max_depth_reached: int = 0


class QuadTreeBuilder:
    """
    Builder for complete quadtrees over a raster block.

    Regions are split into NW, NE, SW, SE quadrants until they reach a
    single pixel.
    """

    def __init__(self, raster: Raster, config: BuilderConfig):
        """
        Initialize the builder.

        Args:
            raster: Source of pixel data
            config: Builder configuration
        """
        if raster.width < config.resolution or raster.height < config.resolution:
            raise ValueError(
                f"Raster of size {raster.width}x{raster.height} is smaller than "
                f"resolution {config.resolution}"
            )
        self.raster = raster
        self.config = config
        self.stats = BuilderStats()

    def build(self) -> Quadtree:
        """
        Build the complete quadtree.

        Returns:
            Quadtree covering the top-left resolution x resolution block
        """
        self.stats = BuilderStats()  # Reset stats
        root = self._build_node(0, 0, self.config.resolution, depth=0)
        logger.debug(
            "Built %dx%d tree: %d nodes, %d leaves, depth %d",
            self.config.resolution, self.config.resolution,
            self.stats.nodes_created, self.stats.leaves_created,
            self.stats.max_depth_reached,
        )
        return Quadtree(root, self.config.resolution)

    def _build_node(self, x: int, y: int, resolution: int, depth: int) -> QuadTreeNode:
        """
        Build a node for the square region at (x, y) of side resolution.

        Args:
            x: Column of the region's top-left corner
            y: Row of the region's top-left corner
            resolution: Side length of the region
            depth: Current depth in the tree

        Returns:
            LeafNode for a single pixel, BranchNode otherwise
        """
        self.stats.max_depth_reached = max(self.stats.max_depth_reached, depth)
        self.stats.nodes_created += 1

        # Base case: single pixel
        if resolution == 1:
            self.stats.pixels_read += 1
            self.stats.leaves_created += 1
            return LeafNode(self.raster.read(x, y))

        r = resolution // 2
        children = [
            self._build_node(x, y, r, depth + 1),          # NW
            self._build_node(x + r, y, r, depth + 1),      # NE
            self._build_node(x, y + r, r, depth + 1),      # SW
            self._build_node(x + r, y + r, r, depth + 1),  # SE
        ]
        self.stats.branches_created += 1
        return BranchNode.from_children(children)


def build_quadtree(
    raster: Raster,
    resolution: int,
    max_resolution: int = MAX_RESOLUTION,
) -> Tuple[Quadtree, BuilderStats]:
    """
    Convenience function to build a quadtree.

    Args:
        raster: Source raster
        resolution: Side length of the block to encode (power of two)
        max_resolution: Largest accepted resolution

    Returns:
        Tuple of (Quadtree, BuilderStats)
    """
    config = BuilderConfig(resolution=resolution, max_resolution=max_resolution)
    builder = QuadTreeBuilder(raster, config)
    tree = builder.build()
    return tree, builder.stats
