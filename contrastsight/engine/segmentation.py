"""Background segmentation — which pixels are the surrounding background.

Background is defined topologically: a pixel is background when it can be
reached from the image border through a 4-connected run of background-like
pixels. A background-coloured hole enclosed by the artwork stays foreground.

Fallback tiers for degenerate images:

1. Border-seeded flood fill (the normal case).
2. Full-bleed art (nothing reachable from the border): every pixel that is
   background-like on its own, ignoring connectivity.
3. No background-like pixel anywhere: abstain with an empty mask. Sampling
   then falls back to a fixed-width band along the grid edges.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from contrastsight.engine.config import AnalysisConfig

logger = logging.getLogger(__name__)

TIER_FLOOD_FILL = 1
TIER_GLOBAL = 2
TIER_ABSTAIN = 3


@dataclass
class Segmentation:
    """Background mask plus the tier that produced it."""

    mask: NDArray[np.bool_]
    tier: int

    @property
    def abstained(self) -> bool:
        return self.tier == TIER_ABSTAIN

    @property
    def background_pixels(self) -> int:
        return int(np.count_nonzero(self.mask))


def near_background(pixels: NDArray[np.uint8], config: AnalysisConfig) -> NDArray[np.bool_]:
    """Per-pixel near-background predicate (alpha cutoff OR RGB distance)."""
    rgb = pixels[:, :, :3].astype(np.float64)
    ref = np.asarray(config.segmentation_background.rgb, dtype=np.float64)
    dist = np.sqrt(np.sum((rgb - ref) ** 2, axis=-1))
    transparent = pixels[:, :, 3] <= config.alpha_background_cutoff
    return transparent | (dist <= config.near_bg_distance)


def flood_fill_from_border(admit: NDArray[np.bool_]) -> NDArray[np.bool_]:
    """Multi-source BFS (4-connected) seeded from every admissible border pixel.

    Pixels are marked when queued and never queued twice. FIFO order; the
    result is a set, so traversal order is not observable.
    """
    h, w = admit.shape
    allowed = admit.ravel().tolist()
    marked = bytearray(h * w)
    queue: deque[int] = deque()

    def push(idx: int) -> None:
        if not marked[idx] and allowed[idx]:
            marked[idx] = 1
            queue.append(idx)

    for x in range(w):
        push(x)
        push((h - 1) * w + x)
    for y in range(h):
        push(y * w)
        push(y * w + (w - 1))

    while queue:
        idx = queue.popleft()
        y, x = divmod(idx, w)
        if x > 0:
            push(idx - 1)
        if x < w - 1:
            push(idx + 1)
        if y > 0:
            push(idx - w)
        if y < h - 1:
            push(idx + w)

    return np.frombuffer(bytes(marked), dtype=np.uint8).reshape(h, w).astype(bool)


def segment_background(pixels: NDArray[np.uint8], config: AnalysisConfig) -> Segmentation:
    """Classify every pixel as background or foreground."""
    admit = near_background(pixels, config)

    mask = flood_fill_from_border(admit)
    if mask.any():
        return Segmentation(mask=mask, tier=TIER_FLOOD_FILL)

    if admit.any():
        logger.debug("No border-connected background; using global predicate (%d px)", int(admit.sum()))
        return Segmentation(mask=admit.copy(), tier=TIER_GLOBAL)

    logger.debug("No background-like pixels; segmentation abstains")
    return Segmentation(mask=np.zeros(admit.shape, dtype=bool), tier=TIER_ABSTAIN)
