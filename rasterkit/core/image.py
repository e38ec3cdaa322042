"""Float image buffer with bounds-checked pixel access.

Samples are stored as a single contiguous float32 array of
``width * height * channels`` values, row-major and channel-interleaved,
normalised to [0.0, 1.0] on load. Nothing clamps them while processing;
only the PNG writer does.

Pixel access uses a zero-fill boundary policy: reads outside the raster
return ``(0, 0, 0, 0)`` and writes outside it are dropped, so kernels never
need their own edge tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Pillow mode for each supported channel count
CHANNEL_MODES = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}

Color = Sequence[float]


class ImageLoadError(OSError):
    """Raised when an image file cannot be decoded."""

    def __init__(self, path: str | Path) -> None:
        super().__init__(f'error reading file: "{path}"')
        self.path = Path(path)


def to_rgba(color: Color) -> np.ndarray:
    """Widen a 3- or 4-component colour to an RGBA float32 vector."""
    rgba = np.ones(4, dtype=np.float32)
    n = min(len(color), 4)
    rgba[:n] = color[:n]
    return rgba


def _pillow_to_array(im: PILImage.Image) -> np.ndarray:
    """Convert a decoded Pillow image to a (H, W, C) uint8 array.

    L, LA, RGB and RGBA keep their layout. 16-bit and 32-bit integer
    greyscale drop to 8 bits by keeping the high byte, float greyscale is
    clipped to 0..255; both stay single-channel. Everything else (palette,
    bilevel, CMYK, ...) becomes RGB, or RGBA when it carries transparency.
    """
    if im.mode.startswith("I;16") or im.mode == "I":
        wide = np.asarray(im).astype(np.int64) >> 8
        return np.clip(wide, 0, 255).astype(np.uint8)[:, :, np.newaxis]
    if im.mode == "F":
        return np.clip(np.asarray(im), 0, 255).astype(np.uint8)[:, :, np.newaxis]
    if im.mode not in CHANNEL_MODES.values():
        has_alpha = "transparency" in im.info or im.mode.endswith(("A", "a"))
        im = im.convert("RGBA" if has_alpha else "RGB")
    arr = np.asarray(im, dtype=np.uint8)
    if arr.ndim == 2:
        arr = arr[:, :, np.newaxis]
    return arr


class Image:
    """Owned float sample buffer plus its dimensions."""

    def __init__(self, width: int, height: int, channels: int = 3) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid image size: {width}x{height}")
        if channels not in CHANNEL_MODES:
            raise ValueError(f"Unsupported channel count: {channels}")
        self._width = width
        self._height = height
        self._channels = channels
        self._pixels = np.zeros((height, width, channels), dtype=np.float32)
        self.path: Path | None = None

    @classmethod
    def square(cls, size: int, channels: int = 3) -> Image:
        return cls(size, size, channels)

    @classmethod
    def from_array(cls, arr: np.ndarray, path: str | Path | None = None) -> Image:
        """Build an image from a (H, W) or (H, W, C) array.

        Integer arrays are treated as 8-bit samples and divided by 255;
        float arrays are copied as-is.
        """
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        h, w, c = arr.shape
        img = cls(w, h, c)
        if np.issubdtype(arr.dtype, np.integer):
            img._pixels[...] = arr.astype(np.float32) / 255.0
        else:
            img._pixels[...] = arr
        img.path = Path(path) if path is not None else None
        return img

    @classmethod
    def open(cls, path: str | Path) -> Image:
        """Decode an image file.

        Raises:
            ImageLoadError: if Pillow cannot read or decode the file.
        """
        path = Path(path)
        try:
            with PILImage.open(path) as im:
                arr = _pillow_to_array(im)
        except (OSError, ValueError) as e:
            raise ImageLoadError(path) from e

        img = cls.from_array(arr, path=path)
        logger.debug("Loaded %r", img)
        return img

    # --- Metadata ---

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def size(self) -> int:
        """Number of samples in the buffer."""
        return self._pixels.size

    @property
    def buffer(self) -> np.ndarray:
        """Flat, writable view of every sample in storage order."""
        return self._pixels.reshape(-1)

    @property
    def pixels(self) -> np.ndarray:
        """Writable (height, width, channels) view of the samples."""
        return self._pixels

    def __repr__(self) -> str:
        file = str(self.path) if self.path is not None else ""
        return (
            f"Image(file={file!r}, width={self._width}, height={self._height}, "
            f"channels={self._channels}, size={self.size})"
        )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # --- Pixel access ---

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        """Read a pixel as RGBA.

        Greyscale images replicate their grey value into RGB; images
        without an alpha channel read alpha as 1.0. Outside the raster
        the result is all zeros.
        """
        if not self.in_bounds(x, y):
            return np.zeros(4, dtype=np.float32)
        px = self._pixels[y, x]
        c = self._channels
        if c >= 3:
            alpha = px[3] if c == 4 else 1.0
            return np.array((px[0], px[1], px[2], alpha), dtype=np.float32)
        alpha = px[1] if c == 2 else 1.0
        return np.array((px[0], px[0], px[0], alpha), dtype=np.float32)

    def get_pixel_rgb(self, x: int, y: int) -> np.ndarray:
        return self.get_pixel(x, y)[:3]

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        """Write a 3- or 4-component colour.

        Greyscale images store the red component. Alpha is only written
        when the image has an alpha channel and the colour carries one.
        Writes outside the raster are ignored.
        """
        if not self.in_bounds(x, y):
            return
        px = self._pixels[y, x]
        c = self._channels
        if c >= 3:
            px[0] = color[0]
            px[1] = color[1]
            px[2] = color[2]
        else:
            px[0] = color[0]
        if c in (2, 4) and len(color) >= 4:
            px[c - 1] = color[3]

    # --- Whole-buffer operations ---

    def normalise(self) -> None:
        """Rescale every sample by the buffer maximum."""
        peak = float(self._pixels.max())
        if peak == 0.0:
            logger.debug("normalise: buffer is all zero, leaving unchanged")
            return
        self._pixels /= peak

    def flipv(self) -> None:
        """Flip rows in place (top becomes bottom)."""
        self._pixels[...] = self._pixels[::-1].copy()

    def fliph(self) -> None:
        """Flip columns in place (left becomes right)."""
        self._pixels[...] = self._pixels[:, ::-1].copy()

    def copy(self) -> Image:
        img = self.blank_like()
        img._pixels[...] = self._pixels
        img.path = self.path
        return img

    def copy_from(self, other: Image) -> None:
        """Overwrite this buffer with another image's samples verbatim."""
        if other.size != self.size:
            raise ValueError(
                f"Cannot copy {other.size} samples into a buffer of {self.size}"
            )
        self.buffer[:] = other.buffer

    def blank_like(self) -> Image:
        """New zeroed image with the same dimensions and channel count."""
        return Image(self._width, self._height, self._channels)
