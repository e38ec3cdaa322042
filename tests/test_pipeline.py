"""Tests for the demo pipelines."""

import numpy as np
import pytest

from rasterkit.core.image import Image
from rasterkit.core.pipeline import (
    DITHERED_OUTPUT,
    GREYSCALE_OUTPUT,
    QUANTISE_OUTPUT,
    DitherResult,
    KernelName,
    Settings,
    Stage,
    dither_outputs,
    run_box_blur,
    run_dither,
    run_gaussian_blur,
    save_dither_outputs,
)


def _make_test_image(width=12, height=8, color=(0.8, 0.4, 0.2)):
    """Create a solid-color RGB test image."""
    img = Image(width, height, 3)
    img.pixels[...] = color
    return img


class TestSettings:
    def test_default_settings(self):
        s = Settings()
        assert s.kernel == KernelName.FLOYD_STEINBERG
        assert s.threshold == 0.5
        assert s.levels == 2
        assert s.blur_radius == 1

    def test_hash_deterministic(self):
        assert Settings().hash() == Settings().hash()

    def test_hash_changes_with_settings(self):
        s1 = Settings()
        s2 = Settings(kernel=KernelName.MINIMIZED_AVERAGE_ERROR)
        s3 = Settings(threshold=0.6)
        assert len({s1.hash(), s2.hash(), s3.hash()}) == 3

    def test_two_levels_uses_threshold(self):
        quantise = Settings(threshold=0.9).quantiser()
        assert quantise(np.array([0.8, 0.8, 0.8, 1.0]))[0] == 0.0

    def test_more_levels_uses_uniform_steps(self):
        quantise = Settings(levels=3).quantiser()
        assert quantise(np.array([0.4, 0.4, 0.4, 1.0]))[0] == pytest.approx(0.5)


class TestRunDither:
    def test_stages(self):
        img = _make_test_image()
        result = run_dither(img, Settings())

        assert isinstance(result, DitherResult)
        assert result.source is img
        for stage in (result.greyscale, result.quantised, result.dithered):
            assert (stage.width, stage.height, stage.channels) == (12, 8, 3)

    def test_input_not_modified(self):
        img = _make_test_image()
        before = img.buffer.copy()
        run_dither(img, Settings())
        assert np.array_equal(img.buffer, before)

    def test_greyscale_stage(self):
        result = run_dither(_make_test_image(), Settings())
        expected = 0.2126 * 0.8 + 0.7152 * 0.4 + 0.0722 * 0.2
        assert np.allclose(result.greyscale.buffer, expected, atol=1e-6)

    def test_quantised_is_flat_threshold(self):
        # luma ~0.47 sits just under the threshold
        result = run_dither(_make_test_image(), Settings())
        assert np.allclose(result.quantised.buffer, 0.0)

    def test_dithered_is_binary_and_mixed(self):
        result = run_dither(_make_test_image(), Settings())
        values = set(np.unique(result.dithered.buffer).tolist())
        assert values == {0.0, 1.0}

    def test_kernels_differ(self):
        img = _make_test_image(width=16, height=16)
        fs = run_dither(img, Settings())
        mae = run_dither(img, Settings(kernel=KernelName.MINIMIZED_AVERAGE_ERROR))
        assert not np.array_equal(fs.dithered.buffer, mae.dithered.buffer)

    def test_stage_lookup(self):
        result = run_dither(_make_test_image(), Settings())
        assert result.stage(Stage.SOURCE) is result.source
        assert result.stage(Stage.GREYSCALE) is result.greyscale
        assert result.stage(Stage.QUANTISE) is result.quantised
        assert result.stage(Stage.DITHERED) is result.dithered


class TestBlurs:
    def test_box_blur(self):
        out = run_box_blur(_make_test_image(), Settings())
        assert np.allclose(out.get_pixel_rgb(5, 4), [0.8, 0.4, 0.2], atol=1e-6)

    def test_gaussian_blur(self):
        out = run_gaussian_blur(_make_test_image(width=20, height=20), Settings(sigma=1.0))
        assert np.allclose(out.get_pixel_rgb(10, 10), [0.8, 0.4, 0.2], atol=1e-5)


class TestSaveOutputs:
    def test_output_names(self):
        result = run_dither(_make_test_image(), Settings())
        names = [name for name, _ in dither_outputs(result)]
        assert names == [GREYSCALE_OUTPUT, QUANTISE_OUTPUT, DITHERED_OUTPUT]

    def test_writes_three_files(self, tmp_path):
        result = run_dither(_make_test_image(), Settings())
        written = save_dither_outputs(result, tmp_path)

        assert [p.name for p in written] == ["greyscale.png", "quantise.png", "dithered.png"]
        for path in written:
            assert path.exists()
            reloaded = Image.open(path)
            assert (reloaded.width, reloaded.height, reloaded.channels) == (12, 8, 3)
