"""Tests for the raster interface."""

import numpy as np
import pytest
from quadimage.pixel import RGBAPixel
from quadimage.raster import ArrayRaster, Raster


class DictRaster(Raster):
    """Minimal raster relying on the default fill()."""

    def __init__(self, width, height):
        self._width = width
        self._height = height
        self.data = {}

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    def read(self, x, y):
        return self.data.get((x, y), RGBAPixel())

    def write(self, x, y, pixel):
        self.data[(x, y)] = pixel


class TestArrayRaster:
    """Tests for ArrayRaster."""

    def test_blank(self):
        """Test blank rasters are zero-filled."""
        r = ArrayRaster.blank(5, 3)
        assert r.width == 5
        assert r.height == 3
        assert r.read(4, 2) == RGBAPixel()

    def test_empty(self):
        r = ArrayRaster.empty()
        assert r.width == 0
        assert r.height == 0

    def test_read_write(self):
        """Test that x is the column and y the row."""
        r = ArrayRaster.blank(4, 2)
        r.write(3, 1, RGBAPixel(1, 2, 3, 4))
        assert r.read(3, 1) == RGBAPixel(1, 2, 3, 4)
        assert tuple(r.pixels[1, 3]) == (1, 2, 3, 4)

    def test_read_returns_ints(self):
        """Test channels are widened to Python ints."""
        r = ArrayRaster(np.full((1, 1, 4), 200, dtype=np.uint8))
        p = r.read(0, 0)
        assert type(p.red) is int
        assert p.red + p.green == 400

    def test_out_of_range(self):
        """Test out of range access raises IndexError (no negative wrap)."""
        r = ArrayRaster.blank(2, 2)
        with pytest.raises(IndexError):
            r.read(2, 0)
        with pytest.raises(IndexError):
            r.read(-1, 0)
        with pytest.raises(IndexError):
            r.write(0, 2, RGBAPixel())

    def test_fill(self):
        """Test square fill."""
        r = ArrayRaster.blank(4, 4)
        r.fill(2, 0, 2, RGBAPixel(9, 9, 9, 9))
        assert r.read(2, 0) == RGBAPixel(9, 9, 9, 9)
        assert r.read(3, 1) == RGBAPixel(9, 9, 9, 9)
        assert r.read(1, 0) == RGBAPixel()
        assert r.read(2, 2) == RGBAPixel()

    def test_from_rgb_array(self):
        """Test RGB input gets opaque alpha."""
        rgb = np.zeros((2, 3, 3), dtype=np.uint8)
        rgb[0, 1] = (5, 6, 7)
        r = ArrayRaster.from_array(rgb)
        assert r.width == 3
        assert r.height == 2
        assert r.read(1, 0) == RGBAPixel(5, 6, 7, 255)

    def test_invalid_shape(self):
        with pytest.raises(ValueError):
            ArrayRaster(np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            ArrayRaster(np.zeros((2, 2, 4), dtype=np.int32))

    def test_equality(self):
        a = ArrayRaster.blank(2, 2)
        b = ArrayRaster.blank(2, 2)
        assert a == b
        b.write(0, 0, RGBAPixel(1, 0, 0, 0))
        assert a != b
        assert a != ArrayRaster.blank(3, 2)


class TestDefaultFill:
    """Tests for Raster.fill() default implementation."""

    def test_fill_writes_each_pixel(self):
        r = DictRaster(4, 4)
        r.fill(1, 1, 2, RGBAPixel(1, 1, 1, 1))
        assert sorted(r.data) == [(1, 1), (1, 2), (2, 1), (2, 2)]

    def test_contains(self):
        r = DictRaster(3, 2)
        assert r.contains(2, 1)
        assert not r.contains(3, 0)
        assert not r.contains(0, -1)
