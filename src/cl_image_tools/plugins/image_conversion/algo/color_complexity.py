"""Content-adaptive JPEG quality selection.

The number of distinct colors found on a sparse pixel grid, divided by the
number of samples taken, is used as a cheap stand-in for image complexity.
Diverse images keep a higher quality; flat ones can be compressed harder.
The walk stops once ``MAX_DISTINCT_COLORS`` keys were seen.
"""

from dataclasses import dataclass

import numpy as np
from loguru import logger
from numpy.typing import NDArray
from PIL import Image

ADAPTIVE_PIXEL_THRESHOLD = 2_000_000
COARSE_STRIDE_PIXEL_THRESHOLD = 10_000_000
FINE_STRIDE = 10
COARSE_STRIDE = 20
MAX_DISTINCT_COLORS = 3000

QUALITY_FLOOR = 75
QUALITY_SPAN = 30


@dataclass(frozen=True)
class ColorSample:
    distinct: int
    samples: int

    @property
    def diversity(self) -> float:
        return self.distinct / self.samples if self.samples else 0.0


def clamp_quality(quality: int) -> int:
    return max(1, min(100, quality))


def sampling_stride(pixel_count: int) -> int:
    return COARSE_STRIDE if pixel_count > COARSE_STRIDE_PIXEL_THRESHOLD else FINE_STRIDE


def _grid_color_keys(image: Image.Image, stride: int) -> NDArray[np.uint32]:
    """24-bit RGB keys of every ``stride``-th pixel, in row-major order."""
    grid = np.asarray(image)[::stride, ::stride]
    if grid.ndim == 2:
        gray = grid.astype(np.uint32)
        return (gray << 16) | (gray << 8) | gray
    channels = grid.reshape(-1, grid.shape[-1]).astype(np.uint32)
    if channels.shape[1] < 3:
        gray = channels[:, 0]
        return (gray << 16) | (gray << 8) | gray
    return (channels[:, 0] << 16) | (channels[:, 1] << 8) | channels[:, 2]


def sample_colors(
    image: Image.Image,
    stride: int,
    max_distinct: int = MAX_DISTINCT_COLORS,
) -> ColorSample:
    keys = _grid_color_keys(image, stride).ravel()
    if keys.size == 0:
        return ColorSample(distinct=0, samples=0)

    _, first_seen = np.unique(keys, return_index=True)
    if first_seen.size < max_distinct:
        return ColorSample(distinct=int(first_seen.size), samples=int(keys.size))

    # The walk stops at the sample that introduced the max_distinct-th color
    first_seen.sort()
    return ColorSample(distinct=max_distinct, samples=int(first_seen[max_distinct - 1]) + 1)


def advise_jpeg_quality(image: Image.Image, requested: int) -> int:
    """Pick a JPEG quality for ``image`` no higher than ``requested``.

    Images up to 2 megapixels get the clamped request back unchanged. Larger
    ones never go below 75.
    """
    requested = clamp_quality(requested)
    pixel_count = image.width * image.height
    if pixel_count <= ADAPTIVE_PIXEL_THRESHOLD:
        return requested

    stride = sampling_stride(pixel_count)
    sample = sample_colors(image, stride)
    candidate = max(QUALITY_FLOOR, min(100, round(QUALITY_FLOOR + sample.diversity * QUALITY_SPAN)))
    quality = max(QUALITY_FLOOR, min(requested, candidate))

    logger.debug(
        f"Color sampling: stride={stride} distinct={sample.distinct} "
        + f"samples={sample.samples} diversity={sample.diversity:.4f} quality={quality}"
    )
    return quality
