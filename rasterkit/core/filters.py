"""Per-pixel colour functions and small-kernel blurs.

The blurs use the same zero-fill edge policy as Image.get_pixel():
neighbours outside the raster count as zero and the kernel is never
renormalised, so edges darken toward black.
"""

from __future__ import annotations

import math
from typing import Callable

import cv2
import numpy as np

from rasterkit.core.image import Image
from rasterkit.core.render import transform

Quantiser = Callable[[np.ndarray], np.ndarray]

# Rec. 709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722


def rgb_to_greyscale(pixel: np.ndarray) -> np.ndarray:
    """Luma of an RGBA pixel, replicated to RGB. Alpha is kept."""
    grey = LUMA_R * pixel[0] + LUMA_G * pixel[1] + LUMA_B * pixel[2]
    return np.array((grey, grey, grey, pixel[3]), dtype=np.float32)


def to_greyscale(img: Image) -> None:
    """Convert an image to greyscale in place."""
    transform(img, img, rgb_to_greyscale)


def threshold_quantiser(threshold: float = 0.5) -> Quantiser:
    """Return a 1-bit quantiser on the red component.

    Values below ``threshold`` become black, everything else white.
    """

    def quantise(pixel: np.ndarray) -> np.ndarray:
        level = 0.0 if pixel[0] < threshold else 1.0
        return np.array((level, level, level, pixel[3]), dtype=np.float32)

    return quantise


quantise_greyscale_1bit = threshold_quantiser(0.5)


def uniform_quantiser(levels: int) -> Quantiser:
    """Return a quantiser rounding each colour component to ``levels`` steps.

    Args:
        levels: number of evenly spaced output values in [0.0, 1.0], >= 2.
    """
    if levels < 2:
        raise ValueError(f"levels must be >= 2, got {levels}")
    step = 1.0 / (levels - 1)

    def quantise(pixel: np.ndarray) -> np.ndarray:
        out = np.empty(4, dtype=np.float32)
        out[:3] = np.clip(np.round(pixel[:3] / step) * step, 0.0, 1.0)
        out[3] = pixel[3]
        return out

    return quantise


def _convolve_zero_border(img: Image, apply: Callable[[np.ndarray], np.ndarray]) -> Image:
    """Run an OpenCV filter over the samples and wrap the result."""
    src = np.ascontiguousarray(img.pixels, dtype=np.float32)
    filtered = apply(src)
    out = img.blank_like()
    out.pixels[...] = filtered.reshape(img.pixels.shape)
    return out


def box_blur(img: Image, radius: int = 1) -> Image:
    """Uniform (2r+1)x(2r+1) average, zero-fill edges.

    The divisor is always the full tap count, so a border pixel of a
    uniform image ends up scaled by (in-bounds taps / total taps).
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    taps = 2 * radius + 1
    kernel = np.full((taps, taps), 1.0 / (taps * taps), dtype=np.float32)
    return _convolve_zero_border(
        img,
        lambda src: cv2.filter2D(src, -1, kernel, borderType=cv2.BORDER_CONSTANT),
    )


def gaussian_blur(img: Image, sigma: float = 1.0, radius: int | None = None) -> Image:
    """Separable Gaussian blur, zero-fill edges.

    Args:
        img: source image, left untouched.
        sigma: standard deviation in pixels, > 0.
        radius: kernel half-width. Defaults to ceil(3 * sigma).
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be > 0, got {sigma}")
    if radius is None:
        radius = math.ceil(3 * sigma)
    ksize = 2 * radius + 1
    kernel = cv2.getGaussianKernel(ksize, sigma, cv2.CV_32F)
    return _convolve_zero_border(
        img,
        lambda src: cv2.sepFilter2D(
            src, -1, kernel, kernel, borderType=cv2.BORDER_CONSTANT
        ),
    )
