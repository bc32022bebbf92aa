"""Failing-pixel overlays for visual review."""

from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image

# Semi-transparent red-orange, readable over both light and dark artwork
HIGHLIGHT_RGBA = (242, 80, 60, 180)


def render_overlay(mask: NDArray[np.bool_], color: tuple[int, int, int, int] = HIGHLIGHT_RGBA) -> Image.Image:
    """Transparent RGBA image with ``color`` wherever ``mask`` is set."""
    h, w = mask.shape
    out = np.zeros((h, w, 4), dtype=np.uint8)
    out[mask] = color
    return Image.fromarray(out)


def render_highlight(
    pixels: NDArray[np.uint8],
    mask: NDArray[np.bool_],
    background: tuple[int, int, int],
    color: tuple[int, int, int, int] = HIGHLIGHT_RGBA,
) -> Image.Image:
    """Artwork flattened onto ``background`` with the overlay drawn on top."""
    h, w = mask.shape
    base = Image.new("RGBA", (w, h), (*background, 255))
    base.alpha_composite(Image.fromarray(np.ascontiguousarray(pixels)))
    base.alpha_composite(render_overlay(mask, color))
    return base


def to_png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def save_overlay(
    path: str | Path,
    pixels: NDArray[np.uint8],
    mask: NDArray[np.bool_],
    background: tuple[int, int, int],
) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    render_highlight(pixels, mask, background).save(path, format="PNG")
    return path
