"""Demo pipelines.

blur:      source -> box blur
gaussian:  source -> gaussian blur
dither:    source -> greyscale -> quantise / error diffusion
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rasterkit.core.dither import KERNELS, dither
from rasterkit.core.filters import (
    Quantiser,
    box_blur,
    gaussian_blur,
    threshold_quantiser,
    to_greyscale,
    uniform_quantiser,
)
from rasterkit.core.image import Image
from rasterkit.core.render import transform
from rasterkit.core.writer import write_png

logger = logging.getLogger(__name__)

BOX_BLUR_OUTPUT = "box_blur_out.png"
GAUSSIAN_BLUR_OUTPUT = "gaussian_blur_out.png"
GREYSCALE_OUTPUT = "greyscale.png"
QUANTISE_OUTPUT = "quantise.png"
DITHERED_OUTPUT = "dithered.png"


class KernelName(str, Enum):
    FLOYD_STEINBERG = "floyd-steinberg"
    MINIMIZED_AVERAGE_ERROR = "minimized-average-error"


class Stage(str, Enum):
    SOURCE = "source"
    GREYSCALE = "greyscale"
    QUANTISE = "quantise"
    DITHERED = "dithered"


@dataclass(frozen=True)
class Settings:
    """Processing settings that affect output."""

    kernel: KernelName = KernelName.FLOYD_STEINBERG
    threshold: float = 0.5  # 1-bit cut-off, used when levels == 2
    levels: int = 2  # output levels per channel
    blur_radius: int = 1
    sigma: float = 1.0

    def hash(self) -> str:
        """Deterministic hash for cache keying."""
        data = (
            f"{self.kernel.value}:{self.threshold}:{self.levels}:"
            f"{self.blur_radius}:{self.sigma}"
        )
        return hashlib.md5(data.encode()).hexdigest()[:12]

    def quantiser(self) -> Quantiser:
        if self.levels == 2:
            return threshold_quantiser(self.threshold)
        return uniform_quantiser(self.levels)


@dataclass
class DitherResult:
    """Every stage of the dither pipeline."""

    source: Image
    greyscale: Image
    quantised: Image
    dithered: Image

    def stage(self, stage: Stage) -> Image:
        if stage == Stage.SOURCE:
            return self.source
        if stage == Stage.GREYSCALE:
            return self.greyscale
        if stage == Stage.QUANTISE:
            return self.quantised
        return self.dithered


def run_box_blur(img: Image, settings: Settings) -> Image:
    logger.debug("Box blur, radius %d: %r", settings.blur_radius, img)
    return box_blur(img, settings.blur_radius)


def run_gaussian_blur(img: Image, settings: Settings) -> Image:
    logger.debug("Gaussian blur, sigma %s: %r", settings.sigma, img)
    return gaussian_blur(img, settings.sigma)


def run_dither(img: Image, settings: Settings) -> DitherResult:
    """Greyscale the image, then quantise it both directly and dithered.

    The input image is not modified.
    """
    quantise = settings.quantiser()

    grey = img.copy()
    to_greyscale(grey)
    logger.debug("Greyscale done: %r", grey)

    quantised = grey.blank_like()
    transform(grey, quantised, quantise)

    dithered = dither(grey, quantise, KERNELS[settings.kernel.value])
    logger.debug("Dithered with %s", settings.kernel.value)

    return DitherResult(
        source=img,
        greyscale=grey,
        quantised=quantised,
        dithered=dithered,
    )


def dither_outputs(result: DitherResult) -> list[tuple[str, Image]]:
    """Output file name and image for each saved stage."""
    return [
        (GREYSCALE_OUTPUT, result.greyscale),
        (QUANTISE_OUTPUT, result.quantised),
        (DITHERED_OUTPUT, result.dithered),
    ]


def save_dither_outputs(result: DitherResult, output_dir: Path) -> list[Path]:
    """Write greyscale.png, quantise.png and dithered.png; return their paths."""
    written = []
    for name, image in dither_outputs(result):
        path = output_dir / name
        write_png(path, image)
        written.append(path)
    return written
