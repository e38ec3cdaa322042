"""Error diffusion dithering.

Each pixel is quantised in row-major order and the quantisation error is
pushed into neighbours that have not been visited yet, weighted by a fixed
kernel. Error that would land outside the raster is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from rasterkit.core.filters import Quantiser
from rasterkit.core.image import Image, to_rgba
from rasterkit.core.render import sample_pixel


@dataclass(frozen=True)
class DiffusionKernel:
    """Neighbour offsets (dx, dy, weight); weights sum to ``divisor``."""

    name: str
    divisor: float
    taps: tuple[tuple[int, int, float], ...]


#     *  7
#  3  5  1
FLOYD_STEINBERG = DiffusionKernel(
    name="floyd-steinberg",
    divisor=16.0,
    taps=(
        (+1, 0, 7.0),
        (-1, +1, 3.0),
        (0, +1, 5.0),
        (+1, +1, 1.0),
    ),
)

#        *  7  5
#  3  5  7  5  3
#  1  3  5  3  1
MINIMIZED_AVERAGE_ERROR = DiffusionKernel(
    name="minimized-average-error",
    divisor=48.0,
    taps=(
        (+1, 0, 7.0),
        (+2, 0, 5.0),
        (-2, +1, 3.0),
        (-1, +1, 5.0),
        (0, +1, 7.0),
        (+1, +1, 5.0),
        (+2, +1, 3.0),
        (-2, +2, 1.0),
        (-1, +2, 3.0),
        (0, +2, 5.0),
        (+1, +2, 3.0),
        (+2, +2, 1.0),
    ),
)

KERNELS: dict[str, DiffusionKernel] = {
    k.name: k for k in (FLOYD_STEINBERG, MINIMIZED_AVERAGE_ERROR)
}


def error_diffusion(
    source: Image,
    destination: Image,
    quantise: Quantiser,
    kernel: DiffusionKernel,
) -> None:
    """Dither ``source`` into ``destination`` with the given kernel.

    The source buffer is copied verbatim into the destination first and
    the destination is then scanned in place. Diffused neighbours get
    alpha forced to 1.0.

    Args:
        source: image to dither, left untouched.
        destination: image with the same shape as ``source``.
        quantise: maps an RGBA pixel to its quantised RGBA value.
        kernel: diffusion offsets and weights.
    """
    destination.copy_from(source)
    weights = [(dx, dy, w / kernel.divisor) for dx, dy, w in kernel.taps]

    def diffuse(pos: tuple[int, int], pixel: np.ndarray) -> None:
        x, y = pos
        quantised = to_rgba(quantise(pixel))
        err = pixel - quantised
        destination.set_pixel(x, y, quantised)

        for dx, dy, weight in weights:
            nx, ny = x + dx, y + dy
            k = destination.get_pixel(nx, ny) + err * weight
            destination.set_pixel(nx, ny, (k[0], k[1], k[2], 1.0))

    sample_pixel(destination, diffuse)


def dither_floyd_steinberg(
    source: Image, destination: Image, quantise: Quantiser
) -> None:
    error_diffusion(source, destination, quantise, FLOYD_STEINBERG)


def dither_minimized_average_error(
    source: Image, destination: Image, quantise: Quantiser
) -> None:
    error_diffusion(source, destination, quantise, MINIMIZED_AVERAGE_ERROR)


def dither(
    source: Image,
    quantise: Quantiser,
    kernel: DiffusionKernel | str = FLOYD_STEINBERG,
) -> Image:
    """Dither into a freshly allocated image and return it."""
    if isinstance(kernel, str):
        try:
            kernel = KERNELS[kernel]
        except KeyError:
            raise ValueError(f"Unknown diffusion kernel: {kernel}") from None
    destination = source.blank_like()
    error_diffusion(source, destination, quantise, kernel)
    return destination
