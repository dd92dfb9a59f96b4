"""Unit tests for grayscale conversion and quality statistics."""
import numpy as np
import pytest

from solarscan.core.raster import RasterBuffer
from solarscan.utils.quality import (
    analyze_quality, brightness, contrast, histogram, sharpness, to_grayscale,
)


class TestGrayscale:
    """Test suite for luma conversion."""

    def test_known_values(self):
        buf = RasterBuffer(3, 1, 3, [255, 255, 255, 10, 20, 30, 0, 0, 0])
        gray = to_grayscale(buf)
        assert gray.shape == (1, 3)
        assert gray.tolist() == [[255, 18, 0]]

    def test_ignores_alpha(self):
        buf = RasterBuffer(1, 1, 4, [100, 100, 100, 0])
        assert to_grayscale(buf)[0, 0] == 100


class TestStatistics:
    """Test suite for brightness, contrast and sharpness."""

    def test_uniform_image(self):
        gray = to_grayscale(RasterBuffer.filled(8, 8, (128, 128, 128)))
        assert brightness(gray) == pytest.approx(128 / 255)
        assert contrast(gray) == 0.0
        assert sharpness(gray, 8, 8) == 0.0

    def test_contrast_of_two_levels(self):
        gray = np.array([[0, 255]], dtype=np.uint8)
        assert contrast(gray) == pytest.approx(0.5)
        assert contrast(gray, brightness(gray)) == pytest.approx(0.5)

    def test_sharpness_saturates(self):
        pixels = np.indices((9, 9)).sum(axis=0) % 2 * 255
        gray = pixels.astype(np.uint8)
        assert sharpness(gray, 9, 9) == 1.0

    @pytest.mark.parametrize("width,height", [(2, 5), (5, 2)])
    def test_sharpness_small_images(self, width, height):
        gray = np.full((height, width), 50, dtype=np.uint8)
        assert sharpness(gray, width, height) == 0.0

    @pytest.mark.parametrize("seed", range(5))
    def test_quality_in_unit_range(self, seed, test_data_generator):
        buf = test_data_generator.create_test_buffer(20, 15, seed=seed)
        quality = analyze_quality(buf)
        for value in (quality.brightness, quality.contrast, quality.sharpness):
            assert 0.0 <= value <= 1.0


class TestHistogram:
    """Test suite for channel histograms."""

    @pytest.mark.parametrize("pattern", ["random", "gradient", "checkerboard", "solid"])
    def test_each_channel_sums_to_pixel_count(self, pattern, test_data_generator):
        buf = test_data_generator.create_test_buffer(23, 17, pattern=pattern)
        hist = histogram(buf)

        assert set(hist) == {"red", "green", "blue", "gray"}
        for counts in hist.values():
            assert len(counts) == 256
            assert counts.sum() == 23 * 17

    def test_solid_color_bins(self):
        hist = histogram(RasterBuffer.filled(4, 4, (10, 20, 30)))
        assert hist["red"][10] == 16
        assert hist["green"][20] == 16
        assert hist["blue"][30] == 16
        assert hist["gray"][18] == 16
