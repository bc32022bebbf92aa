"""Analysis configuration — every option the engine recognises, with defaults."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable

from contrastsight.engine.colors import BLACK, WHITE, BackgroundSpec, parse_color
from contrastsight.errors import ConfigurationError


class SampleMode(str, enum.Enum):
    BAND = "band"
    ALL = "all"
    STROKE = "stroke"


@dataclass(frozen=True)
class AnalysisConfig:
    """Controls segmentation, sampling and the pass rule."""

    # Segmentation
    near_bg_distance: float = 160.0  # Euclidean RGB distance
    alpha_background_cutoff: int = 10  # alpha <= this is always background-like
    segmentation_background: BackgroundSpec | None = None  # None: first evaluation background

    # Sampling
    band_radius: int = 2  # Chebyshev radius of the edge band
    minimum_alpha: int = 0  # 0 disables the gate
    sample_mode: SampleMode = SampleMode.BAND
    stroke_luminance_max: float = 0.5

    # Evaluation
    evaluation_backgrounds: tuple[BackgroundSpec, ...] = field(default=(WHITE, BLACK))

    # Pass rule (WCAG 1.4.11 non-text contrast = 3:1)
    contrast_threshold: float = 3.0
    max_percent_below_threshold: float = 2.0
    percentile: float = 0.05
    require_all_backgrounds_to_pass: bool = False

    def __post_init__(self) -> None:
        if self.segmentation_background is None and self.evaluation_backgrounds:
            object.__setattr__(self, "segmentation_background", self.evaluation_backgrounds[0])
        self.validate()

    def validate(self) -> None:
        if not self.near_bg_distance >= 0:
            raise ConfigurationError(f"near_bg_distance must be >= 0, got {self.near_bg_distance}")
        _check_byte("alpha_background_cutoff", self.alpha_background_cutoff)
        _check_byte("minimum_alpha", self.minimum_alpha)
        if self.band_radius < 0 or int(self.band_radius) != self.band_radius:
            raise ConfigurationError(f"band_radius must be a non-negative integer, got {self.band_radius}")
        if not isinstance(self.sample_mode, SampleMode):
            raise ConfigurationError(f"Unknown sample mode: {self.sample_mode!r}")
        if not 0.0 <= self.stroke_luminance_max <= 1.0:
            raise ConfigurationError(f"stroke_luminance_max must be in [0, 1], got {self.stroke_luminance_max}")
        if not self.evaluation_backgrounds:
            raise ConfigurationError("At least one evaluation background is required")
        labels = [bg.label for bg in self.evaluation_backgrounds]
        if len(set(labels)) != len(labels):
            raise ConfigurationError(f"Duplicate evaluation backgrounds: {labels}")
        if not self.contrast_threshold > 0:
            raise ConfigurationError(f"contrast_threshold must be > 0, got {self.contrast_threshold}")
        if not 0.0 <= self.max_percent_below_threshold <= 100.0:
            raise ConfigurationError(
                f"max_percent_below_threshold must be in [0, 100], got {self.max_percent_below_threshold}"
            )
        if not 0.0 <= self.percentile <= 1.0:
            raise ConfigurationError(f"percentile must be in [0, 1], got {self.percentile}")


def _check_byte(name: str, value: int) -> None:
    if int(value) != value or not 0 <= value <= 255:
        raise ConfigurationError(f"{name} must be an integer in [0, 255], got {value}")


def parse_sample_mode(value: str | SampleMode) -> SampleMode:
    if isinstance(value, SampleMode):
        return value
    try:
        return SampleMode(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(m.value for m in SampleMode)
        raise ConfigurationError(f"Unknown sample mode {value!r} (expected one of: {choices})") from None


def build_config(
    backgrounds: Iterable[str] | None = None,
    segmentation_background: str | None = None,
    sample_mode: str | SampleMode = SampleMode.BAND,
    **options,
) -> AnalysisConfig:
    """Build a validated AnalysisConfig from user-facing strings.

    Shared by the CLI and the HTTP API. The segmentation colour defaults
    to the first evaluation background.
    """
    bg_specs = tuple(parse_color(b) for b in backgrounds) if backgrounds else (WHITE, BLACK)
    seg = parse_color(segmentation_background) if segmentation_background else None
    return AnalysisConfig(
        evaluation_backgrounds=bg_specs,
        segmentation_background=seg,
        sample_mode=parse_sample_mode(sample_mode),
        **options,
    )
