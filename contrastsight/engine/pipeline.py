"""Analysis orchestrator — segmentation → sample mask → contrast → statistics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from contrastsight.engine.config import AnalysisConfig
from contrastsight.engine.contrast import evaluate
from contrastsight.engine.sampling import build_sample_mask
from contrastsight.engine.segmentation import segment_background
from contrastsight.engine.stats import BackgroundStats, combine, summarize_ratio_set
from contrastsight.errors import DecodeError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class AnalysisResult:
    """Complete output of one image analysis."""

    width: int
    height: int
    background_pixels: int
    foreground_pixels: int
    sample_pixels: int
    segmentation_tier: int
    backgrounds: dict[str, BackgroundStats] = field(default_factory=dict)
    passed: bool = False
    background_mask: NDArray[np.bool_] | None = None
    sample_mask: NDArray[np.bool_] | None = None
    failing_masks: dict[str, NDArray[np.bool_]] = field(default_factory=dict)

    @property
    def failing_mask(self) -> NDArray[np.bool_]:
        """Sampled pixels below threshold against any evaluated background."""
        union = np.zeros((self.height, self.width), dtype=bool)
        for mask in self.failing_masks.values():
            union |= mask
        return union

    @property
    def passes_by_background(self) -> dict[str, bool]:
        return {label: st.passed for label, st in self.backgrounds.items()}

    def to_dict(self) -> dict:
        return {
            "size": {"width": self.width, "height": self.height},
            "segmentation": {
                "tier": self.segmentation_tier,
                "bg_pixels": self.background_pixels,
                "fg_pixels": self.foreground_pixels,
                "sample_pixels": self.sample_pixels,
            },
            "backgrounds": {label: st.to_dict() for label, st in self.backgrounds.items()},
            "pass": {"overall": self.passed, "by_background": self.passes_by_background},
        }


def _check_pixels(pixels: NDArray) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise DecodeError(f"Expected an (H, W, 4) RGBA buffer, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise DecodeError(f"Image has zero dimensions: {pixels.shape[1]}x{pixels.shape[0]}")
    if pixels.dtype != np.uint8:
        raise DecodeError(f"Expected uint8 channels, got {pixels.dtype}")


def analyze_image(pixels: NDArray[np.uint8], config: AnalysisConfig | None = None) -> AnalysisResult:
    """Run the full analysis on one RGBA8 buffer. Pure: no I/O, no shared state."""
    config = config or AnalysisConfig()
    _check_pixels(pixels)
    start = time.perf_counter()
    h, w = pixels.shape[:2]

    segmentation = segment_background(pixels, config)
    sample_mask = build_sample_mask(pixels, segmentation, config)
    bg_count = segmentation.background_pixels

    result = AnalysisResult(
        width=w,
        height=h,
        background_pixels=bg_count,
        foreground_pixels=h * w - bg_count,
        sample_pixels=int(np.count_nonzero(sample_mask)),
        segmentation_tier=segmentation.tier,
        background_mask=segmentation.mask,
        sample_mask=sample_mask,
    )

    for bg in config.evaluation_backgrounds:
        ratio_set = evaluate(pixels, sample_mask, bg)
        result.backgrounds[bg.label] = summarize_ratio_set(
            ratio_set,
            config.contrast_threshold,
            config.percentile,
            config.max_percent_below_threshold,
        )
        failing = np.zeros((h, w), dtype=bool)
        failing[ratio_set.ys, ratio_set.xs] = ratio_set.ratios < config.contrast_threshold
        result.failing_masks[bg.label] = failing

    result.passed = combine(
        (st.passed for st in result.backgrounds.values()),
        config.require_all_backgrounds_to_pass,
    )

    logger.debug(
        "Analyzed %dx%d image: tier %d, %d sampled px, pass=%s in %.1fms",
        w,
        h,
        segmentation.tier,
        result.sample_pixels,
        result.passed,
        (time.perf_counter() - start) * 1000,
    )
    return result
