"""Half-block image preview widget for the TUI."""

from __future__ import annotations

import numpy as np
from PIL import Image as PILImage
from rich.text import Text
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import Static

from rasterkit.core.image import Image
from rasterkit.core.writer import to_pillow

UPPER_HALF_BLOCK = "▀"
EMPTY_MESSAGE = "No file loaded. Press 'o' to open a file."


def image_to_text(img: Image, width: int, height: int) -> Text:
    """Render an image as rows of half-block characters.

    The image is resized to ``width x height`` pixels first. Each output
    character covers two pixel rows: foreground is the upper pixel,
    background the lower one.
    """
    pil = to_pillow(img).convert("RGB")
    if pil.size != (width, height):
        pil = pil.resize((width, height), PILImage.Resampling.BOX)
    rgb = np.asarray(pil, dtype=np.uint8)

    text = Text()
    for y in range(0, height, 2):
        if y > 0:
            text.append("\n")
        for x in range(width):
            r, g, b = (int(v) for v in rgb[y, x])
            style = f"rgb({r},{g},{b})"
            if y + 1 < height:
                r2, g2, b2 = (int(v) for v in rgb[y + 1, x])
                style += f" on rgb({r2},{g2},{b2})"
            text.append(UPPER_HALF_BLOCK, style=style)
    return text


class ImagePreview(Widget):
    """Widget that displays one pipeline stage as coloured half-blocks."""

    DEFAULT_CSS = """
    ImagePreview {
        width: 1fr;
        height: 1fr;
        overflow: auto;
        background: $surface;
    }

    ImagePreview #preview-content {
        width: auto;
        height: auto;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(EMPTY_MESSAGE, id="preview-content")

    def show(self, img: Image, width: int, height: int) -> None:
        """Render ``img`` scaled to ``width x height`` pixels."""
        content = self.query_one("#preview-content", Static)
        content.update(image_to_text(img, width, height))

    def clear(self) -> None:
        content = self.query_one("#preview-content", Static)
        content.update(EMPTY_MESSAGE)
