"""Tests for sample mask construction."""

from __future__ import annotations

import numpy as np

from contrastsight.engine.config import AnalysisConfig, SampleMode
from contrastsight.engine.sampling import border_band, build_sample_mask, edge_band
from contrastsight.engine.segmentation import segment_background
from tests.conftest import BLACK_PX, centered_square, solid


def _mask(pixels, **options):
    config = AnalysisConfig(**options)
    return build_sample_mask(pixels, segment_background(pixels, config), config)


class TestEdgeBand:
    def test_radius_covers_whole_small_square(self, black_square_image):
        mask = _mask(black_square_image)
        assert mask.sum() == 16
        assert mask[3:7, 3:7].all()

    def test_radius_one_is_perimeter_only(self, black_square_image):
        mask = _mask(black_square_image, band_radius=1)
        assert mask.sum() == 12
        assert not mask[4:6, 4:6].any()

    def test_radius_zero_samples_nothing(self, black_square_image):
        assert not _mask(black_square_image, band_radius=0).any()

    def test_neighbourhood_clipped_at_grid_edge(self):
        background = np.zeros((3, 3), dtype=bool)
        background[0, 0] = True
        band = edge_band(background, 1)
        expected = np.zeros((3, 3), dtype=bool)
        expected[0, 1] = expected[1, 0] = expected[1, 1] = True
        assert np.array_equal(band, expected)

    def test_band_never_includes_background(self, ring_image):
        config = AnalysisConfig()
        seg = segment_background(ring_image, config)
        mask = build_sample_mask(ring_image, seg, config)
        assert not (mask & seg.mask).any()


class TestSampleModes:
    def test_all_mode_samples_every_foreground_pixel(self):
        pixels = centered_square(12, 8, BLACK_PX)
        band = _mask(pixels, band_radius=1)
        everything = _mask(pixels, sample_mode=SampleMode.ALL)
        assert band.sum() == 28
        assert everything.sum() == 64
        assert not (band & ~everything).any()

    def test_stroke_mode_keeps_dark_pixels(self, black_square_image):
        band = _mask(black_square_image)
        stroke = _mask(black_square_image, sample_mode=SampleMode.STROKE)
        assert np.array_equal(band, stroke)

    def test_stroke_mode_drops_light_fills(self, gray_square_image):
        # mid gray has luminance ≈ 0.22
        assert _mask(gray_square_image, sample_mode=SampleMode.STROKE).sum() == 16
        assert not _mask(gray_square_image, sample_mode=SampleMode.STROKE, stroke_luminance_max=0.1).any()


class TestAlphaGate:
    def test_low_alpha_pixels_excluded(self, black_square_image):
        black_square_image[3, 3] = (0, 0, 0, 100)
        black_square_image[6, 6] = (0, 0, 0, 100)
        assert _mask(black_square_image).sum() == 16
        gated = _mask(black_square_image, minimum_alpha=200)
        assert gated.sum() == 14
        assert not gated[3, 3] and not gated[6, 6]

    def test_gate_is_inclusive(self, black_square_image):
        assert _mask(black_square_image, minimum_alpha=255).sum() == 16


class TestBorderBand:
    def test_inclusive_width(self):
        band = border_band((10, 10), 1)
        assert band.sum() == 100 - 36
        assert band[1, 5] and band[8, 5] and band[5, 1] and band[5, 8]
        assert not band[2, 2]

    def test_radius_zero_is_outer_ring(self):
        assert border_band((10, 10), 0).sum() == 36

    def test_used_when_segmentation_abstains(self):
        pixels = solid(10, 10, BLACK_PX)
        mask = _mask(pixels, band_radius=1)
        assert np.array_equal(mask, border_band((10, 10), 1))

    def test_alpha_gate_applies_to_fallback(self):
        pixels = solid(10, 10, BLACK_PX)
        pixels[0, :, 3] = 50
        mask = _mask(pixels, band_radius=1, minimum_alpha=100)
        assert not mask[0].any()
        assert mask.sum() == 64 - 10
