"""Shared raster fixtures."""

import numpy as np
import pytest

from quadimage.raster import ArrayRaster


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
YELLOW = (255, 255, 0, 255)


@pytest.fixture
def four_block_raster():
    """4x4 raster: red, green, blue and yellow 2x2 blocks (TL, TR, BL, BR)."""
    pixels = np.zeros((4, 4, 4), dtype=np.uint8)
    pixels[0:2, 0:2] = RED
    pixels[0:2, 2:4] = GREEN
    pixels[2:4, 0:2] = BLUE
    pixels[2:4, 2:4] = YELLOW
    return ArrayRaster(pixels)


@pytest.fixture
def solid_raster():
    """8x8 raster of a single color."""
    pixels = np.zeros((8, 8, 4), dtype=np.uint8)
    pixels[:, :] = (10, 20, 30, 255)
    return ArrayRaster(pixels)


@pytest.fixture
def random_raster():
    """12 wide, 9 high raster of random pixels (not square, not a power of two)."""
    rng = np.random.default_rng(1234)
    return ArrayRaster(rng.integers(0, 256, size=(9, 12, 4), dtype=np.uint8))


@pytest.fixture
def gradient_raster():
    """16x16 smooth gradient; prunes gradually as tolerance grows."""
    pixels = np.zeros((16, 16, 4), dtype=np.uint8)
    for y in range(16):
        for x in range(16):
            pixels[y, x] = (x * 16, y * 16, (x + y) * 8, 255)
    return ArrayRaster(pixels)


@pytest.fixture
def red_channel_raster():
    """Factory: raster whose red channel is rows; other channels 0, alpha 255."""
    def make(rows):
        red = np.array(rows, dtype=np.uint8)
        pixels = np.zeros(red.shape + (4,), dtype=np.uint8)
        pixels[:, :, 0] = red
        pixels[:, :, 3] = 255
        return ArrayRaster(pixels)
    return make
