"""Terminal size detection utilities."""

from __future__ import annotations

import shutil

# A half-block cell shows two pixels stacked vertically.
PIXELS_PER_CELL_Y = 2


def get_terminal_size(
    fallback_width: int = 80,
    fallback_height: int = 24,
) -> tuple[int, int]:
    """Get current terminal size in columns and rows.

    Returns (width, height). Falls back to provided defaults
    if terminal size cannot be determined.
    """
    try:
        size = shutil.get_terminal_size(fallback=(fallback_width, fallback_height))
        return size.columns, size.lines
    except (ValueError, OSError):
        return fallback_width, fallback_height


def fit_to_terminal(
    img_width: int,
    img_height: int,
    max_width: int | None = None,
    max_height: int | None = None,
) -> tuple[int, int]:
    """Pixel dimensions that fit a half-block preview into the terminal.

    Each character cell covers one pixel across and two down, so the
    available pixel area is ``max_width x 2 * max_height``. The image is
    never scaled up.

    Args:
        img_width: original image width in pixels.
        img_height: original image height in pixels.
        max_width: maximum character columns (defaults to terminal width).
        max_height: maximum character rows (defaults to terminal height - 4 for UI).

    Returns:
        (pixel_width, pixel_height) tuple.
    """
    if max_width is None or max_height is None:
        tw, th = get_terminal_size()
        if max_width is None:
            max_width = tw
        if max_height is None:
            max_height = max(th - 4, 10)  # Leave room for UI chrome

    avail_w = max(max_width, 1)
    avail_h = max(max_height, 1) * PIXELS_PER_CELL_Y

    scale = min(avail_w / img_width, avail_h / img_height, 1.0)
    return max(1, int(img_width * scale)), max(1, int(img_height * scale))
