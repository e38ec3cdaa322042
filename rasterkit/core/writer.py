"""Convert float images to 8-bit samples and save them as PNG.

Clamping to [0, 1] happens here and nowhere else in the pipeline.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from rasterkit.core.image import Image

logger = logging.getLogger(__name__)


def to_bytes(img: Image) -> np.ndarray:
    """Return the samples as a (H, W, C) uint8 array.

    Each sample becomes ``uint8(clamp(x * 255, 0, 255))``; the fractional
    part is truncated.
    """
    return np.clip(img.pixels * 255.0, 0.0, 255.0).astype(np.uint8)


def to_pillow(img: Image) -> PILImage.Image:
    """Wrap the 8-bit samples in a Pillow image (L, LA, RGB or RGBA)."""
    arr = to_bytes(img)
    if img.channels == 1:
        arr = arr[:, :, 0]
    return PILImage.fromarray(arr)


def write_png(path: str | Path, img: Image) -> None:
    """Encode an image as 8-bit PNG with its own channel count.

    Encoder errors (bad directory, permissions) propagate from Pillow.
    """
    to_pillow(img).save(str(path), format="PNG")
    logger.debug("Wrote %s (%dx%d, %d channels)", path, img.width, img.height, img.channels)


def frame_bytes(img: Image) -> bytes:
    """One byte per pixel, taken from the red component, row-major."""
    return to_bytes(img)[:, :, 0].tobytes()
