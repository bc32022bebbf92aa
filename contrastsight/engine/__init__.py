"""ContrastSight pixel classification and contrast statistics engine."""

from contrastsight.engine.colors import BackgroundSpec, parse_color
from contrastsight.engine.config import AnalysisConfig, SampleMode, build_config
from contrastsight.engine.pipeline import AnalysisResult, analyze_image
from contrastsight.engine.stats import BackgroundStats

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "BackgroundSpec",
    "BackgroundStats",
    "SampleMode",
    "analyze_image",
    "build_config",
    "parse_color",
]
