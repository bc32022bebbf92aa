"""Report rendering — CSV, JSON and tab-separated table."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Sequence

from contrastsight.batch import FileReport
from contrastsight.engine.colors import BackgroundSpec

_PER_BACKGROUND_COLUMNS = ("pass", "pX", "pctBelow", "min", "median", "count", "worst")


def _fmt(value: float | None, digits: int = 3) -> str:
    return "" if value is None else f"{value:.{digits}f}"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def csv_header(backgrounds: Sequence[BackgroundSpec]) -> list[str]:
    header = ["file", "width", "height", "overall", "error"]
    for bg in backgrounds:
        header.extend(f"{bg.label}_{col}" for col in _PER_BACKGROUND_COLUMNS)
    return header


def csv_rows(reports: Sequence[FileReport], backgrounds: Sequence[BackgroundSpec]) -> list[list[str]]:
    rows: list[list[str]] = []
    for rep in reports:
        if rep.result is None:
            rows.append([rep.file, "", "", "", rep.error] + [""] * (len(_PER_BACKGROUND_COLUMNS) * len(backgrounds)))
            continue
        res = rep.result
        row = [rep.file, str(res.width), str(res.height), _bool(res.passed), rep.error]
        for bg in backgrounds:
            st = res.backgrounds[bg.label]
            row.extend([
                _bool(st.passed),
                _fmt(st.percentile_value),
                _fmt(st.percent_below_threshold if st.count else None, 2),
                _fmt(st.min),
                _fmt(st.median),
                str(st.count),
                _fmt(st.worst.ratio if st.worst else None),
            ])
        rows.append(row)
    return rows


def render_csv(reports: Sequence[FileReport], backgrounds: Sequence[BackgroundSpec]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(csv_header(backgrounds))
    writer.writerows(csv_rows(reports, backgrounds))
    return buf.getvalue()


def write_csv(path: str | Path, reports: Sequence[FileReport], backgrounds: Sequence[BackgroundSpec]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_csv(reports, backgrounds), encoding="utf-8")
    return path


def render_json(reports: FileReport | Sequence[FileReport]) -> str:
    """A single report renders as an object, several as a list."""
    if isinstance(reports, FileReport):
        return json.dumps(reports.to_dict(), indent=2)
    return json.dumps([r.to_dict() for r in reports], indent=2)


def render_table(reports: Sequence[FileReport], backgrounds: Sequence[BackgroundSpec]) -> str:
    """Compact tab-separated summary, one line per file."""
    header = ["file", "overall"]
    for bg in backgrounds:
        header.extend([f"pass({bg.label})", f"pX_{bg.label}", f"pctBelow_{bg.label}"])
    lines = ["\t".join(header)]
    for rep in reports:
        if rep.result is None:
            lines.append("\t".join([rep.file, "ERR"] + ["ERR", "-", "-"] * len(backgrounds)))
            continue
        row = [rep.file, _bool(rep.result.passed)]
        for bg in backgrounds:
            st = rep.result.backgrounds[bg.label]
            row.extend([
                _bool(st.passed),
                _fmt(st.percentile_value) or "-",
                _fmt(st.percent_below_threshold, 2) if st.count else "-",
            ])
        lines.append("\t".join(row))
    return "\n".join(lines)
