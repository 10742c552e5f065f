"""
Quadtree data structures for image compression.

This module defines the quadtree nodes and the Quadtree container. Leaves
hold pixel colors; branches hold the average color of their four children
and exactly four children, one per quadrant.
"""

from __future__ import annotations
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, List, Optional, TextIO, Tuple

from .pixel import RGBAPixel, average_pixel
from .raster import Raster, ArrayRaster
from . import pruning


logger = logging.getLogger(__name__)

# Quadrant indices (fixed child order)
NW, NE, SW, SE = 0, 1, 2, 3


class QuadTreeNode(ABC):
    """Abstract base class for quadtree nodes."""

    pixel: RGBAPixel

    @abstractmethod
    def is_leaf(self) -> bool:
        """Return True if this is a leaf node."""
        pass

    def has_children(self) -> bool:
        """Return True if this node has its four children."""
        return not self.is_leaf()

    @abstractmethod
    def clone(self) -> QuadTreeNode:
        """Return a deep copy of this subtree."""
        pass

    @abstractmethod
    def node_count(self) -> int:
        """Return total number of nodes in this subtree."""
        pass

    @abstractmethod
    def leaf_count(self) -> int:
        """Return number of leaf nodes in this subtree."""
        pass

    @abstractmethod
    def max_depth(self) -> int:
        """Return maximum depth of this subtree."""
        pass


@dataclass
class LeafNode(QuadTreeNode):
    """
    A leaf node representing a uniformly colored square region.

    At the deepest level the region is a single pixel. A leaf produced by
    pruning covers a larger region with its former branch's average color.
    """
    pixel: RGBAPixel

    def is_leaf(self) -> bool:
        return True

    def clone(self) -> LeafNode:
        return LeafNode(self.pixel)

    def node_count(self) -> int:
        return 1

    def leaf_count(self) -> int:
        return 1

    def max_depth(self) -> int:
        return 0


@dataclass
class BranchNode(QuadTreeNode):
    """
    A branch node with exactly 4 children.

    Children are ordered: NW, NE, SW, SE (indices 0-3). The pixel is the
    memoized average of the children's pixels.
    """
    pixel: RGBAPixel
    children: List[QuadTreeNode]

    def __post_init__(self):
        if len(self.children) != 4:
            raise ValueError("BranchNode must have exactly 4 children")
        if any(child is None for child in self.children):
            raise ValueError("BranchNode children must all be present")

    @classmethod
    def from_children(cls, children: List[QuadTreeNode]) -> BranchNode:
        """Create a branch whose pixel is the average of its children."""
        if len(children) != 4:
            raise ValueError("BranchNode must have exactly 4 children")
        average = average_pixel(*(child.pixel for child in children))
        return cls(average, list(children))

    def is_leaf(self) -> bool:
        return False

    def clone(self) -> BranchNode:
        return BranchNode(self.pixel, [child.clone() for child in self.children])

    def collapse(self) -> LeafNode:
        """Return a leaf standing in for this subtree, colored with its average."""
        return LeafNode(self.pixel)

    def rotate_clockwise(self) -> None:
        """
        Rotate this subtree 90 degrees clockwise, in place.

        Only child positions change; no pixel is copied or modified.
        """
        c = self.children
        # new NW <- old SW, new NE <- old NW, new SW <- old SE, new SE <- old NE
        self.children = [c[SW], c[NW], c[SE], c[NE]]
        for child in self.children:
            if isinstance(child, BranchNode):
                child.rotate_clockwise()

    def node_count(self) -> int:
        return 1 + sum(child.node_count() for child in self.children)

    def leaf_count(self) -> int:
        return sum(child.leaf_count() for child in self.children)

    def max_depth(self) -> int:
        return 1 + max(child.max_depth() for child in self.children)


class Quadtree:
    """
    A quadtree representing a square, power-of-two sized bitmap.

    An empty tree has no root and a resolution of 0.
    """

    def __init__(self, root: Optional[QuadTreeNode] = None, resolution: int = 0):
        """
        Initialize a quadtree.

        Args:
            root: The root node of the tree, or None for an empty tree
            resolution: Side length in pixels of the region the tree represents
        """
        if root is None and resolution != 0:
            raise ValueError("An empty tree must have resolution 0")
        if root is not None and (resolution < 1 or resolution & (resolution - 1)):
            raise ValueError(f"Resolution must be a power of two, got {resolution}")
        if root is not None and root.max_depth() > resolution.bit_length() - 1:
            raise ValueError(
                f"Tree of depth {root.max_depth()} does not fit resolution {resolution}"
            )
        self.root = root
        self.resolution = resolution

    @classmethod
    def from_raster(cls, raster: Raster, resolution: int) -> Quadtree:
        """
        Build a tree for the top-left resolution x resolution block of a raster.
        """
        tree = cls()
        tree.build_tree(raster, resolution)
        return tree

    def build_tree(self, raster: Raster, resolution: int) -> None:
        """
        Replace the contents of this tree with the top-left
        resolution x resolution block of raster.

        Args:
            raster: Source raster; must be at least resolution wide and high
            resolution: A power of two
        """
        from .builder import build_quadtree
        tree, _ = build_quadtree(raster, resolution)
        self.root = tree.root
        self.resolution = tree.resolution

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def get_pixel(self, x: int, y: int) -> RGBAPixel:
        """
        Look up the color at (x, y).

        Returns the zero pixel if the tree is empty or (x, y) is outside
        the tree. Below a pruned subtree the ancestor leaf's color is
        returned.

        Children are chosen by comparing the absolute coordinates against
        the half-width of the current region at every level; coordinates
        are never translated into the quadrant.
        """
        if self.root is None or not (0 <= x < self.resolution and 0 <= y < self.resolution):
            return RGBAPixel()

        node = self.root
        resolution = self.resolution
        while isinstance(node, BranchNode):
            r = resolution // 2
            if x < r and y < r:
                node = node.children[NW]
            elif x < r:
                node = node.children[SW]
            elif y < r:
                node = node.children[NE]
            else:
                node = node.children[SE]
            resolution = r
        return node.pixel

    def decompress(self) -> ArrayRaster:
        """
        Render the tree back into a raster.

        Returns:
            A resolution x resolution raster, or an empty raster for an
            empty tree
        """
        if self.root is None:
            return ArrayRaster.empty()

        raster = ArrayRaster.blank(self.resolution, self.resolution)
        self._paint(raster, self.root, 0, 0, self.resolution)
        return raster

    def _paint(self, raster: Raster, node: QuadTreeNode, x: int, y: int, resolution: int) -> None:
        """Write node's region into raster; leaves fill their whole square."""
        if isinstance(node, LeafNode):
            raster.fill(x, y, resolution, node.pixel)
            return

        assert isinstance(node, BranchNode)
        r = resolution // 2
        self._paint(raster, node.children[NW], x, y, r)
        self._paint(raster, node.children[NE], x + r, y, r)
        self._paint(raster, node.children[SW], x, y + r, r)
        self._paint(raster, node.children[SE], x + r, y + r, r)

    def clockwise_rotate(self) -> None:
        """Rotate the represented image 90 degrees clockwise, in place."""
        if isinstance(self.root, BranchNode):
            self.root.rotate_clockwise()

    def prune(self, tolerance: int) -> None:
        """
        Collapse every maximal subtree whose leaves all lie within
        tolerance of the subtree's average color.

        Args:
            tolerance: Maximum admissible color_distance(), >= 0
        """
        pruning.check_tolerance(tolerance)
        if self.root is None:
            return
        before = self.root.leaf_count()
        self.root = pruning.prune_node(self.root, tolerance)
        logger.debug(
            "Pruned at tolerance %d: %d -> %d leaves",
            tolerance, before, self.root.leaf_count(),
        )

    def prune_size(self, tolerance: int) -> int:
        """
        Count the leaves this tree would have after prune(tolerance).

        Does not modify the tree.
        """
        pruning.check_tolerance(tolerance)
        if self.root is None:
            return 0
        return pruning.prune_size(self.root, tolerance)

    def ideal_prune(self, num_leaves: int) -> int:
        """
        Find the minimum tolerance such that pruning leaves at most
        num_leaves leaves.

        Args:
            num_leaves: Target leaf count (>= 1 for a non-empty tree)

        Returns:
            The minimum qualifying tolerance (0 for an empty tree)
        """
        if num_leaves < 0:
            raise ValueError(f"num_leaves must be non-negative, got {num_leaves}")
        if self.root is None:
            return 0
        if num_leaves < 1:
            raise ValueError("A non-empty tree cannot be pruned below one leaf")
        return pruning.search_tolerance(self.prune_size, num_leaves)

    def copy(self) -> Quadtree:
        """Return a deep copy of this tree."""
        root = self.root.clone() if self.root is not None else None
        return Quadtree(root, self.resolution)

    def __copy__(self) -> Quadtree:
        return self.copy()

    def __deepcopy__(self, memo) -> Quadtree:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        """Trees are equal if their node structures and pixels match."""
        if not isinstance(other, Quadtree):
            return NotImplemented
        return _compare_nodes(self.root, other.root)

    def iter_preorder(self) -> Iterator[Tuple[int, QuadTreeNode]]:
        """
        Iterate over (depth, node) pairs in preorder: node, then NW, NE,
        SW, SE.
        """
        if self.root is None:
            return
        stack = [(0, self.root)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            if isinstance(node, BranchNode):
                for child in reversed(node.children):
                    stack.append((depth + 1, child))

    def print_tree(self, out: Optional[TextIO] = None, include_branches: bool = False) -> None:
        """
        Print the tree's leaves in preorder, indented by depth.

        Args:
            out: Stream to write to (default: stdout)
            include_branches: Also print branch averages
        """
        out = out if out is not None else sys.stdout
        for depth, node in self.iter_preorder():
            if node.is_leaf():
                kind = "leaf"
            elif include_branches:
                kind = "branch"
            else:
                continue
            out.write(f"{'  ' * depth}{kind} depth={depth} {node.pixel}\n")

    @property
    def node_count(self) -> int:
        """Total number of nodes in the tree."""
        return self.root.node_count() if self.root is not None else 0

    @property
    def leaf_count(self) -> int:
        """Number of leaf nodes in the tree."""
        return self.root.leaf_count() if self.root is not None else 0

    @property
    def depth(self) -> int:
        """Maximum depth of the tree."""
        return self.root.max_depth() if self.root is not None else 0

    def __repr__(self) -> str:
        return f"Quadtree(resolution={self.resolution}, leaves={self.leaf_count})"


def _compare_nodes(a: Optional[QuadTreeNode], b: Optional[QuadTreeNode]) -> bool:
    """Recursively compare two subtrees in NW, NE, SW, SE order."""
    if a is None or b is None:
        return a is None and b is None
    if a.pixel != b.pixel or a.is_leaf() != b.is_leaf():
        return False
    if isinstance(a, BranchNode) and isinstance(b, BranchNode):
        return all(_compare_nodes(ca, cb) for ca, cb in zip(a.children, b.children))
    return True
