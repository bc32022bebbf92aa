"""Sample mask — which foreground pixels are actually scored."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import maximum_filter

from contrastsight.engine.config import AnalysisConfig, SampleMode
from contrastsight.engine.contrast import luminance_array
from contrastsight.engine.segmentation import Segmentation


def edge_band(background: NDArray[np.bool_], radius: int) -> NDArray[np.bool_]:
    """Foreground pixels with a background pixel in their (2r+1)² neighbourhood.

    The neighbourhood is clipped at the grid bounds (outside counts as
    not-background).
    """
    near = maximum_filter(background.astype(np.uint8), size=2 * radius + 1, mode="constant", cval=0)
    return (near > 0) & ~background


def border_band(shape: tuple[int, int], radius: int) -> NDArray[np.bool_]:
    """Pixels within ``radius`` of any grid edge (inclusive on both sides)."""
    h, w = shape
    ys = np.arange(h)[:, None]
    xs = np.arange(w)[None, :]
    return (xs <= radius) | (ys <= radius) | (xs >= w - 1 - radius) | (ys >= h - 1 - radius)


def build_sample_mask(
    pixels: NDArray[np.uint8],
    segmentation: Segmentation,
    config: AnalysisConfig,
) -> NDArray[np.bool_]:
    """Derive the scored pixel set for the configured sample mode.

    When segmentation abstained the border band is used regardless of
    mode. The minimum-alpha gate applies in every case.
    """
    background = segmentation.mask
    mode = config.sample_mode

    if segmentation.abstained:
        mask = border_band(background.shape, config.band_radius)
    elif mode is SampleMode.ALL:
        mask = ~background
    else:
        mask = edge_band(background, config.band_radius)
        if mode is SampleMode.STROKE:
            mask &= luminance_array(pixels[:, :, :3]) <= config.stroke_luminance_max

    if config.minimum_alpha > 0:
        mask &= pixels[:, :, 3] >= config.minimum_alpha
    return mask
