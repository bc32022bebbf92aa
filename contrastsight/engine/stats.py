"""Ratio statistics and the pass rule."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from contrastsight.engine.colors import BackgroundSpec
from contrastsight.engine.contrast import RatioSample, RatioSet


@dataclass
class BackgroundStats:
    """Summary of all sampled ratios against one background colour.

    Statistics are None when nothing was sampled; such a background never
    passes.
    """

    label: str
    rgb: tuple[int, int, int]
    count: int = 0
    min: float | None = None
    percentile_value: float | None = None
    median: float | None = None
    max: float | None = None
    percent_below_threshold: float = 0.0
    passed: bool = False
    worst: RatioSample | None = None

    def to_dict(self) -> dict:
        worst = None
        if self.worst is not None:
            worst = {
                "ratio": self.worst.ratio,
                "x": self.worst.x,
                "y": self.worst.y,
                "rgba": list(self.worst.rgba),
            }
        return {
            "label": self.label,
            "rgb": list(self.rgb),
            "count": self.count,
            "min": self.min,
            "pX": self.percentile_value,
            "median": self.median,
            "max": self.max,
            "pct_below": self.percent_below_threshold,
            "pass": self.passed,
            "worst": worst,
        }


def percentile(sorted_values: Sequence[float], p: float) -> float | None:
    """Linear interpolation between order statistics at index (n-1)·p."""
    n = len(sorted_values)
    if n == 0:
        return None
    idx = (n - 1) * p
    lo = math.floor(idx)
    hi = math.ceil(idx)
    if lo == hi:
        return float(sorted_values[lo])
    w = idx - lo
    return float(sorted_values[lo]) * (1 - w) + float(sorted_values[hi]) * w


def percent_below(ratios: Sequence[float], threshold: float) -> float:
    n = len(ratios)
    if n == 0:
        return 0.0
    below = int(np.count_nonzero(np.asarray(ratios, dtype=np.float64) < threshold))
    return 100.0 * below / n


def summarize(
    ratios: Sequence[float],
    threshold: float,
    p: float,
    max_percent_below: float,
    background: BackgroundSpec | None = None,
    worst: RatioSample | None = None,
) -> BackgroundStats:
    """Reduce one background's ratios to statistics and a verdict."""
    label = background.label if background else ""
    rgb = background.rgb if background else (0, 0, 0)
    values = np.sort(np.asarray(ratios, dtype=np.float64))
    n = int(values.size)
    if n == 0:
        return BackgroundStats(label=label, rgb=rgb)

    p_value = percentile(values, p)
    pct = percent_below(values, threshold)
    return BackgroundStats(
        label=label,
        rgb=rgb,
        count=n,
        min=float(values[0]),
        percentile_value=p_value,
        median=percentile(values, 0.5),
        max=float(values[-1]),
        percent_below_threshold=pct,
        passed=p_value >= threshold and pct <= max_percent_below,
        worst=worst,
    )


def summarize_ratio_set(ratio_set: RatioSet, threshold: float, p: float, max_percent_below: float) -> BackgroundStats:
    return summarize(
        ratio_set.ratios,
        threshold,
        p,
        max_percent_below,
        background=ratio_set.background,
        worst=ratio_set.worst(),
    )


def combine(passes: Iterable[bool], require_all: bool) -> bool:
    """AND across backgrounds when require_all, otherwise OR. Empty → False."""
    verdicts = list(passes)
    if not verdicts:
        return False
    return all(verdicts) if require_all else any(verdicts)
