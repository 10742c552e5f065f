"""
quadimage: Lossy image compression with color-averaging quadtrees.

This package builds quadtrees over square power-of-two image blocks, where
leaves hold pixel colors and branches hold the average color of their
children. Trees can be rotated, pruned to a color tolerance or a leaf
budget, stored, and decompressed back into images.
"""

__version__ = "0.1.0"

from .pixel import RGBAPixel, color_distance, average_pixel, MIN_TOLERANCE, MAX_TOLERANCE
from .raster import Raster, ArrayRaster
from .quadtree import QuadTreeNode, LeafNode, BranchNode, Quadtree
from .builder import QuadTreeBuilder, BuilderConfig, build_quadtree
from .serialize import serialize_tree, deserialize_tree
from .pngio import load_image, save_image

__all__ = [
    "RGBAPixel",
    "color_distance",
    "average_pixel",
    "MIN_TOLERANCE",
    "MAX_TOLERANCE",
    "Raster",
    "ArrayRaster",
    "QuadTreeNode",
    "LeafNode",
    "BranchNode",
    "Quadtree",
    "QuadTreeBuilder",
    "BuilderConfig",
    "build_quadtree",
    "serialize_tree",
    "deserialize_tree",
    "load_image",
    "save_image",
]
