"""
Tolerance-based pruning of quadtree subtrees.

A branch is prunable at a tolerance when every leaf below it lies within
that color_distance() of the branch's own average color. Pruning replaces
each maximal prunable branch with a leaf carrying the average.

Prunability is monotone in the tolerance, which lets search_tolerance()
bisect for the smallest tolerance meeting a leaf budget.
"""

import logging
from typing import Callable

from .pixel import RGBAPixel, color_distance, MIN_TOLERANCE, MAX_TOLERANCE


logger = logging.getLogger(__name__)


def check_tolerance(tolerance: int) -> None:
    """Raise ValueError for a negative tolerance."""
    if tolerance < MIN_TOLERANCE:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")


def leaves_within(node, average: RGBAPixel, tolerance: int) -> bool:
    """
    Check that every leaf under node is within tolerance of average.

    Args:
        node: Root of the subtree to check
        average: Color the leaves are compared against
        tolerance: Maximum admissible color distance

    Returns:
        True if no leaf exceeds the tolerance
    """
    if node.is_leaf():
        return color_distance(average, node.pixel) <= tolerance
    return all(leaves_within(child, average, tolerance) for child in node.children)


def is_prunable(node, tolerance: int) -> bool:
    """Return True if node is a branch whose leaves all fit its average."""
    return not node.is_leaf() and leaves_within(node, node.pixel, tolerance)


def prune_node(node, tolerance: int):
    """
    Prune the subtree rooted at node.

    Takes ownership of node and returns the node that replaces it: a leaf
    if node was prunable, otherwise node itself with pruned children.
    Each decision is made on the subtree as built; a pruned child never
    makes its parent prunable within the same call.
    """
    if node.is_leaf():
        return node
    if is_prunable(node, tolerance):
        return node.collapse()
    node.children = [prune_node(child, tolerance) for child in node.children]
    return node


def prune_size(node, tolerance: int) -> int:
    """Count the leaves prune_node() would leave, without modifying anything."""
    if node.is_leaf() or is_prunable(node, tolerance):
        return 1
    return sum(prune_size(child, tolerance) for child in node.children)


def search_tolerance(
    size_of: Callable[[int], int],
    num_leaves: int,
    low: int = MIN_TOLERANCE,
    high: int = MAX_TOLERANCE,
) -> int:
    """
    Binary search for the smallest tolerance t with size_of(t) <= num_leaves.

    size_of must be non-increasing in t and size_of(high) <= num_leaves
    must hold. Each step evaluates size_of at the midpoint and, when the
    midpoint qualifies, at the midpoint minus one to test minimality.

    Args:
        size_of: Leaf count after pruning at a given tolerance
        num_leaves: Leaf budget
        low: Smallest tolerance to consider
        high: Largest tolerance to consider

    Returns:
        The minimal qualifying tolerance
    """
    evaluations = 0
    while True:
        mid = (low + high) // 2
        evaluations += 1
        if size_of(mid) <= num_leaves:
            if mid == low:
                break
            evaluations += 1
            if size_of(mid - 1) > num_leaves:
                break
            # a smaller tolerance also qualifies
            high = mid
        else:
            # mid is too restrictive
            low = mid + 1

    logger.debug(
        "Tolerance %d meets %d leaves after %d evaluations", mid, num_leaves, evaluations
    )
    return mid
