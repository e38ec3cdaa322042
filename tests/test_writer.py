"""Tests for the PNG writer."""

import numpy as np
import pytest
from PIL import Image as PILImage

from rasterkit.core.image import Image
from rasterkit.core.writer import frame_bytes, to_bytes, to_pillow, write_png


def _make_random_bytes(width=9, height=7, channels=3, seed=1):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, channels), dtype=np.uint8)


class TestToBytes:
    def test_clamps_out_of_range(self):
        img = Image(3, 1, 1)
        img.buffer[:] = [-0.5, 1.5, 0.5]
        assert to_bytes(img)[0, :, 0].tolist() == [0, 255, 127]

    def test_truncates(self):
        img = Image(1, 1, 1)
        img.buffer[:] = [0.999]
        assert to_bytes(img)[0, 0, 0] == 254

    def test_shape(self):
        assert to_bytes(Image(4, 2, 4)).shape == (2, 4, 4)


class TestToPillow:
    @pytest.mark.parametrize(
        "channels, mode",
        [(1, "L"), (2, "LA"), (3, "RGB"), (4, "RGBA")],
    )
    def test_mode_matches_channels(self, channels, mode):
        pil = to_pillow(Image(3, 2, channels))
        assert pil.mode == mode
        assert pil.size == (3, 2)


class TestWritePng:
    @pytest.mark.parametrize("channels", [1, 3, 4])
    def test_roundtrip_within_one_step(self, tmp_path, channels):
        arr = _make_random_bytes(channels=channels)
        img = Image.from_array(arr)
        path = tmp_path / "out.png"

        write_png(path, img)
        reloaded = Image.open(path)

        assert reloaded.channels == channels
        assert np.allclose(reloaded.buffer, img.buffer, atol=1.0 / 255 + 1e-6)

    def test_is_png(self, tmp_path):
        path = tmp_path / "out.png"
        write_png(path, Image(4, 4))
        with PILImage.open(path) as im:
            assert im.format == "PNG"
            assert im.size == (4, 4)

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(OSError):
            write_png(tmp_path / "nope" / "out.png", Image(2, 2))


class TestFrameBytes:
    def test_one_byte_per_pixel(self):
        img = Image(5, 3, 3)
        assert len(frame_bytes(img)) == 15

    def test_uses_red_component_row_major(self):
        img = Image(2, 2, 3)
        img.set_pixel(1, 0, (1.0, 0.0, 0.0))
        img.set_pixel(0, 1, (0.0, 1.0, 1.0))
        assert frame_bytes(img) == bytes([0, 255, 0, 0])

    def test_greyscale(self):
        img = Image(2, 1, 1)
        img.buffer[:] = [0.0, 1.0]
        assert frame_bytes(img) == b"\x00\xff"
