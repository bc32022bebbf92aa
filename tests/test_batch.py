"""Tests for batch traversal and per-file isolation."""

from __future__ import annotations

from pathlib import Path

import pytest

from contrastsight.batch import analyze_file, find_images, overlay_path, run_batch
from contrastsight.engine.config import AnalysisConfig
from contrastsight.errors import ConfigurationError
from tests.conftest import centered_square, save_png

BLACK_PX = (0, 0, 0, 255)


@pytest.fixture
def image_dir(tmp_path):
    save_png(tmp_path / "b.png", centered_square(10, 4, BLACK_PX))
    save_png(tmp_path / "a.png", centered_square(10, 4, (200, 200, 200, 255)))
    (tmp_path / "sub").mkdir()
    save_png(tmp_path / "sub" / "c.PNG", centered_square(10, 4, BLACK_PX))
    (tmp_path / "notes.txt").write_text("not an image")
    return tmp_path


class TestFindImages:
    def test_recursive_sorted_filtered(self, image_dir):
        found = find_images(image_dir)
        assert [p.relative_to(image_dir).as_posix() for p in found] == ["a.png", "b.png", "sub/c.PNG"]

    def test_single_file(self, image_dir):
        assert find_images(image_dir / "b.png") == [image_dir / "b.png"]

    def test_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            find_images(tmp_path / "missing")


class TestAnalyzeFile:
    def test_success(self, image_dir):
        report = analyze_file(image_dir / "b.png", AnalysisConfig())
        assert report.ok
        assert report.result.passed
        assert report.to_dict()["file"].endswith("b.png")

    def test_decode_error_captured(self, tmp_path):
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"nope")
        report = analyze_file(bad, AnalysisConfig())
        assert not report.ok
        assert report.error_kind == "decode"
        assert report.to_dict() == {"file": str(bad), "error": report.error, "error_kind": "decode"}

    def test_overlays_written_per_background(self, image_dir, tmp_path):
        out_dir = tmp_path / "overlays"
        report = analyze_file(image_dir / "b.png", AnalysisConfig(), overlay_dir=out_dir)
        names = [Path(p).name for p in report.overlays]
        assert len(names) == 2
        assert names[0].startswith("b.") and names[0].endswith(".white.fail.png")
        assert names[1].startswith("b.") and names[1].endswith(".black.fail.png")
        assert all(Path(p).is_file() for p in report.overlays)

    def test_overlay_label_sanitized(self, tmp_path):
        name = overlay_path(tmp_path, "x/icon.svg", "rgb(1,2,3)").name
        assert name.startswith("icon.") and name.endswith(".rgb_1_2_3.fail.png")
        assert overlay_path(tmp_path, "icon.png", "#ff0000").name.endswith(".ff0000.fail.png")

    def test_same_name_in_different_folders(self, tmp_path):
        for sub in ("a", "b"):
            (tmp_path / sub).mkdir()
            save_png(tmp_path / sub / "icon.png", centered_square(10, 4, BLACK_PX))
        out_dir = tmp_path / "overlays"
        first = analyze_file(tmp_path / "a" / "icon.png", AnalysisConfig(), overlay_dir=out_dir)
        second = analyze_file(tmp_path / "b" / "icon.png", AnalysisConfig(), overlay_dir=out_dir)
        assert set(first.overlays).isdisjoint(second.overlays)
        assert len(list(out_dir.iterdir())) == 4

    def test_unwritable_overlay_dir_keeps_result(self, image_dir, tmp_path, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")
        report = analyze_file(image_dir / "b.png", AnalysisConfig(), overlay_dir=blocker)
        assert report.ok
        assert report.result.passed
        assert report.error_kind == "overlay"
        assert report.overlays == []
        assert report.to_dict()["error_kind"] == "overlay"
        assert "overlay FAILED" in caplog.text


class TestRunBatch:
    def test_bad_file_does_not_stop_batch(self, image_dir):
        (image_dir / "broken.png").write_bytes(b"garbage")
        files = find_images(image_dir)
        reports = run_batch(files, AnalysisConfig(), workers=1)
        assert [Path(r.file).name for r in reports] == ["a.png", "b.png", "broken.png", "c.PNG"]
        assert [r.ok for r in reports] == [True, True, False, True]

    def test_overlay_failure_does_not_stop_batch(self, image_dir, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("occupied")
        reports = run_batch(find_images(image_dir), AnalysisConfig(), workers=1, overlay_dir=blocker)
        assert len(reports) == 3
        assert all(r.ok and r.error_kind == "overlay" for r in reports)

    def test_pool_preserves_order(self, image_dir):
        files = find_images(image_dir)
        serial = run_batch(files, AnalysisConfig(), workers=1)
        pooled = run_batch(files, AnalysisConfig(), workers=2)
        assert [r.file for r in pooled] == [str(p) for p in files]
        assert [r.result.to_dict() for r in pooled] == [r.result.to_dict() for r in serial]

    def test_empty(self):
        assert run_batch([], AnalysisConfig(), workers=1) == []
