"""Command-line batch path.

Usage:
    contrastsight <file-or-folder> [options]

A single file prints the full JSON result; a folder prints one tab-separated
summary line per image (or writes CSV with --csv). Exit status is 0 when
every image passes, 1 when any fails or could not be analyzed, 2 on invalid
options.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from contrastsight.batch import find_images, run_batch
from contrastsight.config import settings
from contrastsight.engine.config import SampleMode, build_config
from contrastsight.errors import ConfigurationError
from contrastsight.reports import render_json, render_table, write_csv
from contrastsight.utils.decoder import DecodeOptions

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_CONFIG = 2


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contrastsight",
        description="Contrast audit for multi-colour symbols against solid backgrounds (WCAG 2.1 non-text contrast).",
    )
    parser.add_argument("target", help="image file or folder (searched recursively)")

    seg = parser.add_argument_group("segmentation")
    seg.add_argument(
        "--near-bg-dist", "--near-white-dist",
        dest="near_bg_distance", type=float, default=160.0,
        help="RGB distance below which a pixel counts as background (default: 160)",
    )
    seg.add_argument(
        "--alpha-bg", dest="alpha_background_cutoff", type=int, default=10,
        help="pixels with alpha <= this are background (default: 10)",
    )
    seg.add_argument(
        "--seg-bg", dest="segmentation_background", default=None,
        help="colour used for background segmentation (default: first --bg)",
    )

    sampling = parser.add_argument_group("sampling")
    sampling.add_argument(
        "--band-radius", dest="band_radius", type=int, default=2,
        help="edge band width in pixels (default: 2)",
    )
    sampling.add_argument(
        "--sample-mode", dest="sample_mode", default=SampleMode.BAND.value,
        choices=[m.value for m in SampleMode],
        help="band: silhouette edge, all: every foreground pixel, stroke: dark edge pixels only",
    )
    sampling.add_argument(
        "--stroke-luma-max", dest="stroke_luminance_max", type=float, default=0.5,
        help="max relative luminance for stroke mode (default: 0.5)",
    )
    sampling.add_argument(
        "--min-alpha", dest="minimum_alpha", type=int, default=0,
        help="skip pixels with alpha below this (default: 0)",
    )

    rule = parser.add_argument_group("pass rule")
    rule.add_argument(
        "--bg", dest="backgrounds", action="append", default=None,
        help="background colour to test against, repeatable (default: white and black)",
    )
    rule.add_argument(
        "--threshold", dest="contrast_threshold", type=float, default=3.0,
        help="contrast ratio threshold (default: 3, WCAG 1.4.11)",
    )
    rule.add_argument(
        "--max-pct-below", dest="max_percent_below_threshold", type=float, default=2.0,
        help="max percent of tested pixels allowed below threshold (default: 2)",
    )
    rule.add_argument(
        "--p", dest="percentile", type=float, default=0.05,
        help="percentile used as the pass metric (default: 0.05)",
    )
    rule.add_argument(
        "--require-all", "--require-both",
        dest="require_all_backgrounds_to_pass", action="store_true",
        help="require a pass on every background (default: any one)",
    )

    raster = parser.add_argument_group("rasterization")
    raster.add_argument("--svg-density", type=int, default=settings.svg_density, help="DPI for SVG")
    raster.add_argument("--vector-density", type=int, default=settings.vector_density, help="DPI for EMF/WMF")
    raster.add_argument(
        "--max-size", type=int, default=settings.max_image_size,
        help="downscale so the longest side is at most this many px (0: off)",
    )

    out = parser.add_argument_group("output")
    out.add_argument("--csv", dest="csv_path", default=None, help="write a CSV report to this path")
    out.add_argument("--json", dest="as_json", action="store_true", help="print JSON for folders too")
    out.add_argument("--overlay-dir", default=None, help="write failing-pixel highlight PNGs here")
    out.add_argument("--workers", type=int, default=settings.workers, help="worker processes (0: one per CPU)")
    out.add_argument("--log-level", default=settings.contrastsight_log_level, help="logging level (default: info)")
    return parser


_CONFIG_FIELDS = (
    "near_bg_distance",
    "alpha_background_cutoff",
    "band_radius",
    "stroke_luminance_max",
    "minimum_alpha",
    "contrast_threshold",
    "max_percent_below_threshold",
    "percentile",
    "require_all_backgrounds_to_pass",
)


def main(argv: Sequence[str] | None = None) -> int:
    args = get_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        config = build_config(
            backgrounds=args.backgrounds,
            segmentation_background=args.segmentation_background,
            sample_mode=args.sample_mode,
            **{name: getattr(args, name) for name in _CONFIG_FIELDS},
        )
        files = find_images(args.target)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CONFIG

    if not files:
        print(f"error: no supported images found under {args.target}", file=sys.stderr)
        return EXIT_FAIL

    options = DecodeOptions(
        svg_density=args.svg_density,
        vector_density=args.vector_density,
        max_size=args.max_size,
    )
    overlay_dir = Path(args.overlay_dir) if args.overlay_dir else None
    logger.info("Analyzing %d file(s)", len(files))
    reports = run_batch(files, config, options, workers=args.workers, overlay_dir=overlay_dir)
    backgrounds = config.evaluation_backgrounds

    if args.csv_path:
        path = write_csv(args.csv_path, reports, backgrounds)
        print(f"Wrote CSV report to {path}")
    elif len(reports) == 1 and Path(args.target).is_file():
        rep = reports[0]
        if rep.result is None:
            print(f"error: {rep.error}", file=sys.stderr)
            return EXIT_FAIL
        print(render_json(rep))
    elif args.as_json:
        print(render_json(reports))
    else:
        print(render_table(reports, backgrounds))

    all_passed = all(r.result is not None and r.result.passed for r in reports)
    return EXIT_PASS if all_passed else EXIT_FAIL


if __name__ == "__main__":
    sys.exit(main())
