"""
Raster interface for quadtree construction and reconstruction.

This module defines the raster protocol the builder reads pixels from and
the decompressor writes pixels to, and provides a numpy-backed
implementation.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .pixel import RGBAPixel


class Raster(ABC):
    """
    Abstract base class for a 2D grid of RGBA pixels.

    Coordinates are zero-based with the origin at the top-left corner;
    x grows to the right and y grows downward.
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Number of columns."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Number of rows."""
        pass

    @abstractmethod
    def read(self, x: int, y: int) -> RGBAPixel:
        """
        Read the pixel at (x, y).

        Args:
            x: Column index
            y: Row index

        Returns:
            The pixel at that position
        """
        pass

    @abstractmethod
    def write(self, x: int, y: int, pixel: RGBAPixel) -> None:
        """
        Write a pixel at (x, y).

        Args:
            x: Column index
            y: Row index
            pixel: Pixel to store
        """
        pass

    def fill(self, x: int, y: int, size: int, pixel: RGBAPixel) -> None:
        """
        Paint the size x size square whose top-left corner is (x, y).

        Default implementation calls write() for each pixel.
        Subclasses may override for better performance.
        """
        for j in range(y, y + size):
            for i in range(x, x + size):
                self.write(i, j, pixel)

    def contains(self, x: int, y: int) -> bool:
        """Check if (x, y) is a valid coordinate."""
        return 0 <= x < self.width and 0 <= y < self.height


class ArrayRaster(Raster):
    """
    Raster stored in a numpy array of shape (height, width, 4), dtype uint8.
    """

    def __init__(self, pixels: Optional[np.ndarray] = None):
        if pixels is None:
            pixels = np.zeros((0, 0, 4), dtype=np.uint8)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")
        self.pixels = pixels

    @classmethod
    def blank(cls, width: int, height: int) -> ArrayRaster:
        """Create a raster of the given size filled with the zero pixel."""
        if width < 0 or height < 0:
            raise ValueError(f"Invalid raster size: {width}x{height}")
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @classmethod
    def empty(cls) -> ArrayRaster:
        """Create a 0x0 raster."""
        return cls()

    @classmethod
    def from_array(cls, array: np.ndarray) -> ArrayRaster:
        """
        Create a raster from an RGB or RGBA array.

        RGB input gets a fully opaque alpha channel. The data is copied.
        """
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) array, got shape {array.shape}")

        pixels = np.empty(array.shape[:2] + (4,), dtype=np.uint8)
        pixels[:, :, :3] = array[:, :, :3]
        if array.shape[2] == 4:
            pixels[:, :, 3] = array[:, :, 3]
        else:
            pixels[:, :, 3] = 255
        return cls(pixels)

    def to_array(self) -> np.ndarray:
        """Return a copy of the pixel array."""
        return self.pixels.copy()

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def _check(self, x: int, y: int) -> None:
        if not self.contains(x, y):
            raise IndexError(
                f"Pixel ({x}, {y}) outside raster of size {self.width}x{self.height}"
            )

    def read(self, x: int, y: int) -> RGBAPixel:
        self._check(x, y)
        r, g, b, a = (int(c) for c in self.pixels[y, x])
        return RGBAPixel(r, g, b, a)

    def write(self, x: int, y: int, pixel: RGBAPixel) -> None:
        self._check(x, y)
        self.pixels[y, x] = pixel.as_tuple()

    def fill(self, x: int, y: int, size: int, pixel: RGBAPixel) -> None:
        self._check(x, y)
        self._check(x + size - 1, y + size - 1)
        self.pixels[y:y + size, x:x + size] = pixel.as_tuple()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayRaster):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"ArrayRaster({self.width}x{self.height})"
