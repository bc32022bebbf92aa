"""WCAG 2.1 contrast between sampled pixels and a solid background.

Each sampled pixel is alpha-composited onto the opaque background, the
composite channels are rounded to integers (round half up), and the contrast
ratio (L1 + 0.05) / (L2 + 0.05) is taken with L1 >= L2. Ratios therefore
always lie in [1, 21].

The scalar helpers and the vectorized path perform the same float64
operations in the same order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from contrastsight.engine.colors import BackgroundSpec

# sRGB transfer function (IEC 61966-2-1) as used by WCAG 2.1
_SRGB_LINEAR_CUTOFF = 0.04045
_SRGB_LINEAR_SLOPE = 12.92
_SRGB_OFFSET = 0.055
_SRGB_SCALE = 1.055
_SRGB_GAMMA = 2.4

# Rec. 709 luma coefficients
_LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)

# Flare term from the WCAG contrast definition
_FLARE = 0.05


@dataclass(frozen=True)
class RatioSample:
    """One scored pixel: ratio, position and raw RGBA."""

    ratio: float
    x: int
    y: int
    rgba: tuple[int, int, int, int]


@dataclass
class RatioSet:
    """All ratios for one background, in row-major order of the sample mask."""

    background: BackgroundSpec
    ratios: NDArray[np.float64]
    ys: NDArray[np.intp]
    xs: NDArray[np.intp]
    rgba: NDArray[np.uint8]

    def __len__(self) -> int:
        return int(self.ratios.size)

    def worst(self) -> RatioSample | None:
        """Lowest ratio; ties go to the first pixel in row-major order."""
        if self.ratios.size == 0:
            return None
        i = int(np.argmin(self.ratios))
        return RatioSample(
            ratio=float(self.ratios[i]),
            x=int(self.xs[i]),
            y=int(self.ys[i]),
            rgba=tuple(int(c) for c in self.rgba[i]),
        )


def srgb_to_linear(c: float) -> float:
    return c / _SRGB_LINEAR_SLOPE if c <= _SRGB_LINEAR_CUTOFF else ((c + _SRGB_OFFSET) / _SRGB_SCALE) ** _SRGB_GAMMA


def relative_luminance(r: int, g: int, b: int) -> float:
    """Relative luminance of an 8-bit sRGB colour, in [0, 1]."""
    wr, wg, wb = _LUMA_WEIGHTS
    return wr * srgb_to_linear(r / 255) + wg * srgb_to_linear(g / 255) + wb * srgb_to_linear(b / 255)


def composite(rgba: tuple[int, int, int, int], bg: tuple[int, int, int]) -> tuple[int, int, int]:
    """Alpha-blend an unassociated RGBA pixel onto an opaque background."""
    a = rgba[3] / 255
    return tuple(math.floor(a * c + (1 - a) * b + 0.5) for c, b in zip(rgba[:3], bg))


def luminance_ratio(l1: float, l2: float) -> float:
    hi, lo = max(l1, l2), min(l1, l2)
    return (hi + _FLARE) / (lo + _FLARE)


def contrast_ratio(rgba: tuple[int, int, int, int], bg: tuple[int, int, int]) -> float:
    """WCAG contrast ratio of one pixel composited over ``bg``."""
    return luminance_ratio(relative_luminance(*composite(rgba, bg)), relative_luminance(*bg))


# ---------------------------------------------------------------------------
# Vectorized
# ---------------------------------------------------------------------------

def _linearize(c: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.where(
        c <= _SRGB_LINEAR_CUTOFF,
        c / _SRGB_LINEAR_SLOPE,
        ((c + _SRGB_OFFSET) / _SRGB_SCALE) ** _SRGB_GAMMA,
    )


def luminance_array(rgb: NDArray) -> NDArray[np.float64]:
    """Relative luminance for an (..., 3) array of 8-bit channel values."""
    lin = _linearize(np.asarray(rgb, dtype=np.float64) / 255)
    wr, wg, wb = _LUMA_WEIGHTS
    return wr * lin[..., 0] + wg * lin[..., 1] + wb * lin[..., 2]


def composite_array(rgba: NDArray[np.uint8], bg: tuple[int, int, int]) -> NDArray[np.float64]:
    a = rgba[:, 3:4].astype(np.float64) / 255
    blended = a * rgba[:, :3].astype(np.float64) + (1 - a) * np.asarray(bg, dtype=np.float64)
    return np.floor(blended + 0.5)


def evaluate(pixels: NDArray[np.uint8], sample_mask: NDArray[np.bool_], background: BackgroundSpec) -> RatioSet:
    """Contrast ratio of every sampled pixel against one background colour."""
    ys, xs = np.nonzero(sample_mask)
    rgba = pixels[ys, xs]
    bg_lum = relative_luminance(*background.rgb)
    lum = luminance_array(composite_array(rgba, background.rgb))
    hi = np.maximum(lum, bg_lum)
    lo = np.minimum(lum, bg_lum)
    ratios = (hi + _FLARE) / (lo + _FLARE)
    return RatioSet(background=background, ratios=ratios, ys=ys, xs=xs, rgba=rgba)
