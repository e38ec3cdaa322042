"""Full-frame pixel traversal.

Every traversal visits pixels row-major (y outer, x inner). The error
diffusion kernels depend on this order: a pixel is read only after all
earlier pixels have pushed their error into it.
"""

from __future__ import annotations

from typing import Callable, Iterator

import numpy as np

from rasterkit.core.image import Color, Image

Position = tuple[int, int]


def positions(width: int, height: int) -> Iterator[Position]:
    """Yield (x, y) coordinates in row-major order."""
    for y in range(height):
        for x in range(width):
            yield x, y


def for_each_pixel(img: Image, fn: Callable[[Position], Color]) -> None:
    """Overwrite every pixel with ``fn((x, y))``."""
    for x, y in positions(img.width, img.height):
        img.set_pixel(x, y, fn((x, y)))


def map_pixel(img: Image, fn: Callable[[Position, np.ndarray], Color]) -> None:
    """Overwrite every pixel with a function of its position and current value."""
    for x, y in positions(img.width, img.height):
        img.set_pixel(x, y, fn((x, y), img.get_pixel(x, y)))


def sample_pixel(img: Image, fn: Callable[[Position, np.ndarray], None]) -> None:
    """Visit every pixel without writing back.

    The value passed to ``fn`` is read at visit time, so changes that
    ``fn`` makes to not-yet-visited pixels are seen later in the scan.
    """
    for x, y in positions(img.width, img.height):
        fn((x, y), img.get_pixel(x, y))


def transform(
    source: Image, output: Image, fn: Callable[[np.ndarray], Color]
) -> None:
    """Write ``fn(source pixel)`` into ``output`` at the same coordinate.

    ``source`` and ``output`` may be the same image.
    """
    for x, y in positions(source.width, source.height):
        output.set_pixel(x, y, fn(source.get_pixel(x, y)))


def transform_at(
    source: Image, output: Image, fn: Callable[[Position, np.ndarray], Color]
) -> None:
    """Like transform() but ``fn`` also receives the (x, y) position."""
    for x, y in positions(source.width, source.height):
        output.set_pixel(x, y, fn((x, y), source.get_pixel(x, y)))
