"""Tests for full-frame pixel traversal."""

import numpy as np
import pytest

from rasterkit.core.image import Image
from rasterkit.core.render import (
    for_each_pixel,
    map_pixel,
    positions,
    sample_pixel,
    transform,
    transform_at,
)


class TestPositions:
    def test_row_major(self):
        assert list(positions(3, 2)) == [
            (0, 0), (1, 0), (2, 0),
            (0, 1), (1, 1), (2, 1),
        ]

    def test_count(self):
        assert len(list(positions(7, 5))) == 35


class TestForEachPixel:
    def test_sets_by_position(self):
        img = Image(4, 3, 3)
        for_each_pixel(img, lambda pos: (pos[0] / 10, pos[1] / 10, 0.0))
        assert np.allclose(img.get_pixel_rgb(3, 2), [0.3, 0.2, 0.0])
        assert np.allclose(img.get_pixel_rgb(0, 0), [0.0, 0.0, 0.0])


class TestMapPixel:
    def test_receives_current_value(self):
        img = Image(3, 3, 1)
        img.buffer[:] = 0.25
        map_pixel(img, lambda pos, px: px * 2)
        assert np.allclose(img.buffer, 0.5)

    def test_sees_earlier_writes(self):
        img = Image(3, 1, 1)

        def push_right(pos, px):
            x, y = pos
            right = img.get_pixel(x + 1, y)
            img.set_pixel(x + 1, y, right + 1.0)
            return px

        map_pixel(img, push_right)
        # Each pixel got +1 from its left neighbour before being visited
        assert np.allclose(img.buffer, [0.0, 1.0, 1.0])


class TestSamplePixel:
    def test_visits_every_pixel_in_order(self):
        img = Image(2, 2, 1)
        img.buffer[:] = [0.1, 0.2, 0.3, 0.4]
        seen = []
        sample_pixel(img, lambda pos, px: seen.append((pos, round(float(px[0]), 3))))
        assert seen == [((0, 0), 0.1), ((1, 0), 0.2), ((0, 1), 0.3), ((1, 1), 0.4)]

    def test_does_not_write(self):
        img = Image(2, 2, 3)
        img.buffer[:] = 0.5
        sample_pixel(img, lambda pos, px: None)
        assert np.allclose(img.buffer, 0.5)

    def test_value_read_at_visit_time(self):
        img = Image(2, 1, 1)
        seen = []

        def visit(pos, px):
            seen.append(float(px[0]))
            img.set_pixel(pos[0] + 1, pos[1], (0.9, 0.9, 0.9))

        sample_pixel(img, visit)
        assert seen == [0.0, pytest.approx(0.9)]


class TestTransform:
    def test_into_other_image(self):
        src = Image(2, 2, 3)
        src.buffer[:] = 0.2
        out = src.blank_like()
        transform(src, out, lambda px: 1.0 - px)
        assert np.allclose(out.buffer, 0.8)
        assert np.allclose(src.buffer, 0.2)

    def test_in_place(self):
        img = Image(2, 2, 3)
        img.buffer[:] = 0.2
        transform(img, img, lambda px: px + 0.1)
        assert np.allclose(img.buffer, 0.3)

    def test_transform_at_gets_position(self):
        src = Image(3, 1, 1)
        out = src.blank_like()
        transform_at(src, out, lambda pos, px: (pos[0] * 0.5, 0.0, 0.0))
        assert np.allclose(out.buffer, [0.0, 0.5, 1.0])
