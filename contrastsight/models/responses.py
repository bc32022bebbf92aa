"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contrastsight.engine.pipeline import AnalysisResult
from contrastsight.engine.stats import BackgroundStats


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class WorstPixel(BaseModel):
    ratio: float
    x: int
    y: int
    rgba: tuple[int, int, int, int]


class BackgroundStatsModel(BaseModel):
    label: str
    rgb: tuple[int, int, int]
    count: int = 0
    min: float | None = None
    percentile_value: float | None = None
    median: float | None = None
    max: float | None = None
    percent_below_threshold: float = 0.0
    passed: bool = False
    worst: WorstPixel | None = None

    @classmethod
    def from_stats(cls, st: BackgroundStats) -> BackgroundStatsModel:
        worst = None
        if st.worst is not None:
            worst = WorstPixel(ratio=st.worst.ratio, x=st.worst.x, y=st.worst.y, rgba=st.worst.rgba)
        return cls(
            label=st.label,
            rgb=st.rgb,
            count=st.count,
            min=st.min,
            percentile_value=st.percentile_value,
            median=st.median,
            max=st.max,
            percent_below_threshold=st.percent_below_threshold,
            passed=st.passed,
            worst=worst,
        )


class AnalyzeResponse(BaseModel):
    width: int
    height: int
    background_pixels: int = 0
    foreground_pixels: int = 0
    sample_pixels: int = 0
    segmentation_tier: int = 1
    backgrounds: list[BackgroundStatsModel] = Field(default_factory=list)
    passed: bool = False
    failing_pixels: int = 0
    overlay_png: str | None = Field(default=None, description="Base64 PNG of failing pixels")
    processing_time_ms: float = 0.0

    @classmethod
    def from_result(cls, result: AnalysisResult, **extra) -> AnalyzeResponse:
        return cls(
            width=result.width,
            height=result.height,
            background_pixels=result.background_pixels,
            foreground_pixels=result.foreground_pixels,
            sample_pixels=result.sample_pixels,
            segmentation_tier=result.segmentation_tier,
            backgrounds=[BackgroundStatsModel.from_stats(st) for st in result.backgrounds.values()],
            passed=result.passed,
            failing_pixels=int(result.failing_mask.sum()),
            **extra,
        )
