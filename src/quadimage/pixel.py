"""
Pixel model and color arithmetic.

This module defines the RGBA pixel stored in every quadtree node and the
two numeric operations the tree needs on it: the truncating average of four
pixels and the color distance used by pruning.

All arithmetic is done on Python ints, so channel sums never wrap the way
8-bit arithmetic would.
"""

from dataclasses import dataclass
from typing import Tuple


CHANNEL_MAX = 255

# Distance between black and white under color_distance().
MIN_TOLERANCE = 0
MAX_TOLERANCE = 3 * CHANNEL_MAX * CHANNEL_MAX


@dataclass(frozen=True)
class RGBAPixel:
    """
    A pixel with four 8-bit channels.

    The default pixel is all zeros, including alpha.
    """
    red: int = 0
    green: int = 0
    blue: int = 0
    alpha: int = 0

    def __post_init__(self):
        for name, value in zip(("red", "green", "blue", "alpha"), self.as_tuple()):
            if not 0 <= value <= CHANNEL_MAX:
                raise ValueError(f"Invalid {name} channel: {value}")

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """Return the channels as (red, green, blue, alpha)."""
        return self.red, self.green, self.blue, self.alpha

    def __str__(self) -> str:
        return f"RGBA({self.red}, {self.green}, {self.blue}, {self.alpha})"


def color_distance(a: RGBAPixel, b: RGBAPixel) -> int:
    """
    Compute the distance between two colors.

    Args:
        a: First pixel
        b: Second pixel

    Returns:
        Sum of squared red, green and blue differences. Alpha is ignored.
    """
    dr = a.red - b.red
    dg = a.green - b.green
    db = a.blue - b.blue
    return dr * dr + dg * dg + db * db


def average_pixel(
    p1: RGBAPixel, p2: RGBAPixel, p3: RGBAPixel, p4: RGBAPixel
) -> RGBAPixel:
    """
    Average four pixels channel by channel.

    Each channel is the floor of the mean of the four inputs, alpha
    included. Applied bottom-up this is an average of averages, which
    truncates at every level and can differ from the mean of all leaves.

    Args:
        p1, p2, p3, p4: The pixels to average (quadrant order)

    Returns:
        The averaged pixel
    """
    return RGBAPixel(
        (p1.red + p2.red + p3.red + p4.red) // 4,
        (p1.green + p2.green + p3.green + p4.green) // 4,
        (p1.blue + p2.blue + p3.blue + p4.blue) // 4,
        (p1.alpha + p2.alpha + p3.alpha + p4.alpha) // 4,
    )
