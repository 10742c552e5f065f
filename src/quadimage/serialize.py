"""
Quadtree serialization module.

This module handles serialization of a (possibly pruned) quadtree to a
compact binary format, so a compressed image can be stored and later
decompressed.

Binary Format:
- Header: magic b"QIMG", 1 version byte, resolution as a varint
- Tree is serialized in preorder traversal (node, NW, NE, SW, SE)
- Each node starts with a tag byte followed by its 4 RGBA bytes:
  - 0x00 = Branch node (followed by its 4 children)
  - 0x01 = Leaf node
- An empty tree has resolution 0 and no node bytes

Branches always have four children, so no presence bits are needed.
"""

from typing import Optional
import logging
import zlib

from .builder import MAX_RESOLUTION
from .pixel import RGBAPixel
from .quadtree import QuadTreeNode, LeafNode, BranchNode, Quadtree


logger = logging.getLogger(__name__)

MAGIC = b"QIMG"
FORMAT_VERSION = 1

# Node type tags
TAG_BRANCH = 0x00
TAG_LEAF = 0x01


class TreeSerializer:
    """Serializes a quadtree to compact binary format."""

    def serialize(self, tree: Quadtree) -> bytes:
        """
        Serialize a quadtree to bytes.

        Args:
            tree: The quadtree to serialize

        Returns:
            Serialized bytes
        """
        buffer = bytearray(MAGIC)
        buffer.append(FORMAT_VERSION)
        buffer.extend(self._encode_varint(tree.resolution))
        if tree.root is not None:
            self._serialize_node(tree.root, buffer)
        return bytes(buffer)

    def _encode_varint(self, value: int) -> bytes:
        """Encode an integer using variable-length encoding."""
        result = bytearray()
        while value >= 0x80:
            result.append((value & 0x7F) | 0x80)
            value >>= 7
        result.append(value)
        return bytes(result)

    def _serialize_node(self, node: QuadTreeNode, buffer: bytearray) -> None:
        """Recursively serialize a node."""
        if node.is_leaf():
            buffer.append(TAG_LEAF)
            buffer.extend(node.pixel.as_tuple())
        else:
            assert isinstance(node, BranchNode)
            buffer.append(TAG_BRANCH)
            buffer.extend(node.pixel.as_tuple())
            for child in node.children:
                self._serialize_node(child, buffer)


class TreeDeserializer:
    """Deserializes a quadtree from binary format."""

    def __init__(self):
        self._data: bytes = b""
        self._pos: int = 0

    def deserialize(self, data: bytes) -> Quadtree:
        """
        Deserialize a quadtree from bytes.

        Args:
            data: Serialized tree bytes

        Returns:
            Deserialized Quadtree
        """
        self._data = data
        self._pos = 0

        if self._read_bytes(len(MAGIC)) != MAGIC:
            raise ValueError("Not a serialized quadtree (bad magic)")
        version = self._read_byte()
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported format version {version}")

        resolution = self._read_varint()
        if resolution == 0:
            root = None
        elif resolution & (resolution - 1):
            raise ValueError(f"Resolution must be a power of two, got {resolution}")
        elif resolution > MAX_RESOLUTION:
            raise ValueError(f"Resolution {resolution} exceeds maximum {MAX_RESOLUTION}")
        else:
            root = self._deserialize_node(resolution)

        if self._pos != len(self._data):
            raise ValueError(f"{len(self._data) - self._pos} trailing bytes after tree")
        return Quadtree(root, resolution)

    def _read_byte(self) -> int:
        """Read a single byte."""
        if self._pos >= len(self._data):
            raise ValueError("Unexpected end of data")
        b = self._data[self._pos]
        self._pos += 1
        return b

    def _read_bytes(self, count: int) -> bytes:
        """Read count bytes."""
        if self._pos + count > len(self._data):
            raise ValueError("Unexpected end of data")
        chunk = self._data[self._pos:self._pos + count]
        self._pos += count
        return chunk

    def _read_varint(self) -> int:
        """Read a variable-length integer."""
        result = 0
        shift = 0
        while True:
            b = self._read_byte()
            result |= (b & 0x7F) << shift
            if (b & 0x80) == 0:
                break
            shift += 7
        return result

    def _deserialize_node(self, resolution: int) -> QuadTreeNode:
        """Recursively deserialize a node covering a region of side resolution."""
        tag = self._read_byte()
        pixel = RGBAPixel(*self._read_bytes(4))

        if tag == TAG_LEAF:
            return LeafNode(pixel)
        if tag != TAG_BRANCH:
            raise ValueError(f"Unknown node tag 0x{tag:02x}")
        if resolution == 1:
            raise ValueError("Branch node below single-pixel resolution")

        children = [self._deserialize_node(resolution // 2) for _ in range(4)]
        return BranchNode(pixel, children)


def serialize_tree(tree: Quadtree, compress: bool = True) -> bytes:
    """
    Serialize a quadtree to bytes, optionally with compression.

    Args:
        tree: Quadtree to serialize
        compress: Whether to apply zlib compression

    Returns:
        Serialized (and optionally compressed) bytes
    """
    serializer = TreeSerializer()
    data = serializer.serialize(tree)
    raw_size = len(data)

    if compress:
        data = zlib.compress(data, level=9)

    logger.debug("Serialized %d leaves into %d bytes (raw %d)", tree.leaf_count, len(data), raw_size)
    return data


def deserialize_tree(data: bytes, compressed: Optional[bool] = None) -> Quadtree:
    """
    Deserialize a quadtree from bytes.

    Args:
        data: Serialized tree bytes
        compressed: Whether data is zlib compressed; None detects it from
            the magic bytes

    Returns:
        Deserialized Quadtree
    """
    if compressed is None:
        compressed = not data.startswith(MAGIC)
    if compressed:
        try:
            data = zlib.decompress(data)
        except zlib.error as e:
            raise ValueError(f"Corrupt compressed tree: {e}") from e

    deserializer = TreeDeserializer()
    return deserializer.deserialize(data)
