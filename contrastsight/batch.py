"""Batch runs — directory traversal and per-file isolation.

Images are independent, so a batch fans out over a process pool. One bad
file never prevents reporting on the rest; configuration errors are raised
before the pool starts and abort the run.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from itertools import repeat
from pathlib import Path
from typing import Sequence

from contrastsight.engine.config import AnalysisConfig
from contrastsight.engine.pipeline import AnalysisResult, analyze_image
from contrastsight.errors import ConfigurationError, ContrastSightError, DecodeError, ExternalToolError
from contrastsight.utils.decoder import SUPPORTED_EXTENSIONS, DecodeOptions, decode_image
from contrastsight.utils.overlay import save_overlay

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9]+")


@dataclass(eq=False)
class FileReport:
    """Result or error for one input file."""

    file: str
    result: AnalysisResult | None = None
    error: str = ""
    error_kind: str = ""  # "decode", "external_tool", "error" or "overlay"
    overlays: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict:
        if self.result is None:
            return {"file": self.file, "error": self.error, "error_kind": self.error_kind}
        data = {"file": self.file, **self.result.to_dict()}
        if self.error:
            data["error"] = self.error
            data["error_kind"] = self.error_kind
        if self.overlays:
            data["overlays"] = list(self.overlays)
        return data


def find_images(target: str | Path) -> list[Path]:
    """Supported images under ``target`` (recursive, sorted); a file yields itself."""
    target = Path(target)
    if target.is_file():
        return [target]
    if not target.is_dir():
        raise ConfigurationError(f"No such file or directory: {target}")
    return sorted(
        p for p in target.rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def _error_kind(exc: Exception) -> str:
    if isinstance(exc, ExternalToolError):
        return "external_tool"
    if isinstance(exc, DecodeError):
        return "decode"
    return "error"


def overlay_path(overlay_dir: Path, source: str | Path, label: str) -> Path:
    """``<stem>.<digest>.<label>.fail.png``.

    The digest of the absolute source path keeps same-named files from
    different folders apart.
    """
    source = Path(source)
    digest = hashlib.sha1(str(source.resolve()).encode("utf-8")).hexdigest()[:8]
    safe_label = _UNSAFE_FILENAME_RE.sub("_", label).strip("_") or "bg"
    return overlay_dir / f"{source.stem}.{digest}.{safe_label}.fail.png"


def analyze_file(
    path: str | Path,
    config: AnalysisConfig,
    options: DecodeOptions | None = None,
    overlay_dir: Path | None = None,
) -> FileReport:
    """Decode and analyze one file; failures are captured on the report.

    With ``overlay_dir`` set, one highlight PNG per evaluation background is
    written for review.
    """
    source = str(path)
    t0 = time.perf_counter()
    try:
        pixels = decode_image(path, options)
        result = analyze_image(pixels, config)
    except ConfigurationError:
        raise
    except ContrastSightError as e:
        logger.warning("  %s FAILED: %s", source, e)
        return FileReport(file=source, error=str(e), error_kind=_error_kind(e))
    except Exception as e:
        logger.warning("  %s FAILED: %s", source, e)
        return FileReport(file=source, error=str(e), error_kind="error")

    report = FileReport(file=source, result=result)
    if overlay_dir is not None:
        try:
            for bg in config.evaluation_backgrounds:
                out = save_overlay(overlay_path(overlay_dir, source, bg.label), pixels, result.failing_masks[bg.label], bg.rgb)
                report.overlays.append(str(out))
        except (OSError, ValueError) as e:
            logger.warning("  %s overlay FAILED: %s", source, e)
            report.error = f"Could not write overlay: {e}"
            report.error_kind = "overlay"

    logger.debug("  %s analyzed in %.1fms", source, (time.perf_counter() - t0) * 1000)
    return report


def default_workers() -> int:
    return os.cpu_count() or 1


def run_batch(
    paths: Sequence[str | Path],
    config: AnalysisConfig,
    options: DecodeOptions | None = None,
    workers: int = 0,
    overlay_dir: Path | None = None,
) -> list[FileReport]:
    """Analyze every path, preserving input order in the output."""
    options = options or DecodeOptions()
    workers = workers or default_workers()
    start = time.perf_counter()

    if workers <= 1 or len(paths) <= 1:
        reports = [analyze_file(p, config, options, overlay_dir) for p in paths]
    else:
        with ProcessPoolExecutor(max_workers=min(workers, len(paths))) as pool:
            reports = list(pool.map(analyze_file, paths, repeat(config), repeat(options), repeat(overlay_dir)))

    logger.info(
        "Batch complete: %d files (%d failed) in %.0fms",
        len(reports),
        sum(1 for r in reports if not r.ok),
        (time.perf_counter() - start) * 1000,
    )
    return reports
