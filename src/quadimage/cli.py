"""
Command-line interface for quadimage.

Provides commands for compressing images into quadtrees, pruning them,
and reconstructing images.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .builder import build_quadtree
from .pngio import load_image, save_image
from .quadtree import Quadtree
from .serialize import serialize_tree, deserialize_tree


logger = logging.getLogger(__name__)


def _add_prune_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the mutually exclusive pruning options."""
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-t", "--tolerance",
        type=int,
        default=None,
        help="Prune with this color tolerance",
    )
    group.add_argument(
        "-n", "--leaves",
        type=int,
        default=None,
        help="Prune with the smallest tolerance that leaves at most this many leaves",
    )
    parser.add_argument(
        "--rotate",
        type=int,
        default=0,
        help="Number of 90 degree clockwise rotations (default: 0)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="quadimage",
        description="Lossy image compression with color-averaging quadtrees",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Compress command
    compress_parser = subparsers.add_parser(
        "compress",
        help="Build (and optionally prune) a quadtree from an image",
    )
    compress_parser.add_argument("input", type=Path, help="Source image")
    compress_parser.add_argument(
        "-r", "--resolution",
        type=int,
        required=True,
        help="Side length of the top-left block to encode (power of two)",
    )
    compress_parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file path (default: <input>.qimg)",
    )
    compress_parser.add_argument(
        "--no-compress",
        action="store_true",
        help="Disable zlib compression of the tree blob",
    )
    _add_prune_arguments(compress_parser)

    # Decompress command
    decompress_parser = subparsers.add_parser(
        "decompress",
        help="Render a stored quadtree back into an image",
    )
    decompress_parser.add_argument("input", type=Path, help="Stored quadtree")
    decompress_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output image path",
    )

    # Roundtrip command
    roundtrip_parser = subparsers.add_parser(
        "roundtrip",
        help="Build, prune and render an image without storing the tree",
    )
    roundtrip_parser.add_argument("input", type=Path, help="Source image")
    roundtrip_parser.add_argument(
        "-r", "--resolution",
        type=int,
        required=True,
        help="Side length of the top-left block to encode (power of two)",
    )
    roundtrip_parser.add_argument(
        "-o", "--output",
        type=Path,
        required=True,
        help="Output image path",
    )
    _add_prune_arguments(roundtrip_parser)

    # Info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show statistics for a stored quadtree",
    )
    info_parser.add_argument("input", type=Path, help="Stored quadtree")
    info_parser.add_argument(
        "--print-tree",
        action="store_true",
        help="List the tree's leaves in preorder",
    )
    info_parser.add_argument(
        "--branches",
        action="store_true",
        help="Include branch averages in --print-tree output",
    )

    return parser


def _build_and_transform(args: argparse.Namespace) -> Quadtree:
    """Load, build, prune and rotate as requested by args."""
    print(f"Loading {args.input}...")
    raster = load_image(args.input)

    print(f"Building {args.resolution}x{args.resolution} quadtree...")
    tree, stats = build_quadtree(raster, args.resolution)
    print(f"  Nodes: {stats.nodes_created}")
    print(f"  Leaves: {stats.leaves_created}")

    tolerance = args.tolerance
    if args.leaves is not None:
        tolerance = tree.ideal_prune(args.leaves)
        print(f"Ideal tolerance for {args.leaves} leaves: {tolerance}")
    if tolerance is not None:
        tree.prune(tolerance)
        print(f"Pruned at tolerance {tolerance}: {tree.leaf_count} leaves")

    for _ in range(args.rotate % 4):
        tree.clockwise_rotate()

    return tree


def cmd_compress(args: argparse.Namespace) -> int:
    """Handle the compress command."""
    tree = _build_and_transform(args)

    data = serialize_tree(tree, compress=not args.no_compress)
    output_path = args.output or args.input.with_suffix(".qimg")
    output_path.write_bytes(data)
    print(f"Wrote {len(data)} bytes to {output_path}")

    return 0


def cmd_decompress(args: argparse.Namespace) -> int:
    """Handle the decompress command."""
    tree = deserialize_tree(args.input.read_bytes())
    if tree.is_empty:
        print("Error: tree is empty, nothing to render")
        return 1

    save_image(tree.decompress(), args.output)
    print(f"Wrote {tree.resolution}x{tree.resolution} image to {args.output}")

    return 0


def cmd_roundtrip(args: argparse.Namespace) -> int:
    """Handle the roundtrip command."""
    tree = _build_and_transform(args)

    save_image(tree.decompress(), args.output)
    print(f"Wrote {tree.resolution}x{tree.resolution} image to {args.output}")

    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Handle the info command."""
    tree = deserialize_tree(args.input.read_bytes())

    print(f"Quadtree {args.input}:")
    print(f"  Resolution: {tree.resolution}")
    print(f"  Nodes: {tree.node_count}")
    print(f"  Leaves: {tree.leaf_count}")
    print(f"  Depth: {tree.depth}")

    if args.print_tree:
        tree.print_tree(sys.stdout, include_branches=args.branches)

    return 0


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "compress": cmd_compress,
        "decompress": cmd_decompress,
        "roundtrip": cmd_roundtrip,
        "info": cmd_info,
    }

    try:
        return commands[args.command](args)
    except (OSError, ValueError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
