"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AnalyzeOptions(BaseModel):
    backgrounds: list[str] = Field(
        default_factory=lambda: ["white", "black"],
        description="Background colours to evaluate against",
    )
    segmentation_background: str | None = Field(
        default=None,
        description="Colour used for background segmentation (default: first background)",
    )
    near_bg_distance: float = 160.0
    alpha_background_cutoff: int = 10
    band_radius: int = 2
    minimum_alpha: int = 0
    sample_mode: str = Field(default="band", description="band, all or stroke")
    stroke_luminance_max: float = 0.5
    contrast_threshold: float = 3.0
    max_percent_below_threshold: float = 2.0
    percentile: float = 0.05
    require_all_backgrounds_to_pass: bool = False


class AnalyzeRequest(BaseModel):
    image: str = Field(..., description="Base64-encoded image bytes (PNG, JPEG or SVG)")
    filename: str = Field(default="", description="Original file name, used to detect the format")
    options: AnalyzeOptions = Field(default_factory=AnalyzeOptions)
    max_size: int = Field(default=0, ge=0, description="Downscale so the longest side fits (0: off)")
    include_overlay: bool = Field(default=False, description="Return a failing-pixel overlay PNG")
