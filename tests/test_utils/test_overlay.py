"""Tests for failing-pixel overlays."""

from __future__ import annotations

import numpy as np
from PIL import Image

from contrastsight.utils.overlay import HIGHLIGHT_RGBA, render_highlight, render_overlay, save_overlay, to_png_bytes
from tests.conftest import solid


def _mask():
    mask = np.zeros((4, 5), dtype=bool)
    mask[1, 2] = True
    return mask


class TestOverlay:
    def test_render_overlay(self):
        img = render_overlay(_mask())
        assert img.mode == "RGBA"
        assert img.size == (5, 4)
        assert img.getpixel((2, 1)) == HIGHLIGHT_RGBA
        assert img.getpixel((0, 0)) == (0, 0, 0, 0)

    def test_highlight_flattens_onto_background(self):
        pixels = solid(5, 4, (0, 0, 0, 0))
        img = render_highlight(pixels, _mask(), (255, 255, 255))
        assert img.getpixel((0, 0)) == (255, 255, 255, 255)
        assert img.getpixel((2, 1)) != (255, 255, 255, 255)

    def test_png_bytes(self):
        data = to_png_bytes(render_overlay(_mask()))
        assert data.startswith(b"\x89PNG")

    def test_save_creates_parent_dirs(self, tmp_path):
        target = tmp_path / "nested" / "out" / "x.fail.png"
        path = save_overlay(target, solid(5, 4, (0, 0, 0, 255)), _mask(), (0, 0, 0))
        assert path == target
        with Image.open(path) as img:
            assert img.size == (5, 4)
