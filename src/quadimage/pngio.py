"""
Image file I/O backed by Pillow.

Loads image files into ArrayRaster objects and saves rasters back to disk.
The file format is chosen by Pillow from the path suffix.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage, UnidentifiedImageError

from .raster import ArrayRaster, Raster


logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> ArrayRaster:
    """
    Load an image file as an RGBA raster.

    Args:
        path: Image file path

    Returns:
        ArrayRaster with the decoded pixels
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")

    try:
        with PILImage.open(path) as img:
            pixels = np.array(img.convert("RGBA"), dtype=np.uint8)
    except UnidentifiedImageError as e:
        raise ValueError(f"Not a readable image: {path}") from e

    raster = ArrayRaster(pixels)
    logger.debug("Loaded %s (%dx%d)", path, raster.width, raster.height)
    return raster


def save_image(raster: Raster, path: Union[str, Path]) -> None:
    """
    Save a raster to an image file.

    Args:
        raster: Raster to save; must not be empty
        path: Destination path
    """
    path = Path(path)
    if raster.width == 0 or raster.height == 0:
        raise ValueError("Cannot save an empty raster")

    if isinstance(raster, ArrayRaster):
        pixels = raster.pixels
    else:
        pixels = np.array(
            [[raster.read(x, y).as_tuple() for x in range(raster.width)]
             for y in range(raster.height)],
            dtype=np.uint8,
        )

    PILImage.fromarray(pixels).save(path)
    logger.debug("Saved %s (%dx%d)", path, raster.width, raster.height)
