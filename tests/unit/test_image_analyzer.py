"""
Tests for image analysis.

Tests cover:
- Brightness and edge map construction
- Per-pixel accessors and coordinate clamping
- Local contrast and edge direction
- Neutral answers before an image is loaded
"""

import math

import numpy as np
import pytest

from patchbay.analysis.image_analyzer import EDGE_ON, ImageAnalyzer, angular_distance


class TestImageLoading:
    """Tests for pixel buffer normalization."""

    def test_grayscale_buffer_expanded_to_rgb(self):
        """Test that a 2D buffer becomes an HxWx3 image."""
        analyzer = ImageAnalyzer(image=np.full((4, 6), 90, dtype=np.uint8))

        assert analyzer.image.shape == (4, 6, 3)
        assert analyzer.width == 6
        assert analyzer.height == 4
        assert analyzer.color_at(0, 0) == (90, 90, 90)

    def test_alpha_channel_dropped(self):
        """Test that RGBA input keeps only the color channels."""
        pixels = np.zeros((3, 3, 4), dtype=np.uint8)
        pixels[..., 0] = 200
        pixels[..., 3] = 17
        analyzer = ImageAnalyzer(image=pixels)

        assert analyzer.image.shape == (3, 3, 3)
        assert analyzer.color_at(1, 1) == (200, 0, 0)

    def test_bad_shape_rejected(self):
        """Test that a buffer that is not an image raises ValueError."""
        analyzer = ImageAnalyzer()
        with pytest.raises(ValueError):
            analyzer.set_image(np.zeros((5,), dtype=np.uint8))

    def test_empty_buffer_rejected(self):
        analyzer = ImageAnalyzer()
        with pytest.raises(ValueError):
            analyzer.set_image(np.zeros((0, 10, 3), dtype=np.uint8))

    def test_set_image_discards_previous_maps(self, split_analyzer, flat_image):
        """Test that replacing the image requires a new analysis."""
        assert split_analyzer.analyzed

        split_analyzer.set_image(flat_image)

        assert not split_analyzer.analyzed
        assert split_analyzer.edge_value(49, 50) == 0


class TestEdgeMap:
    """Tests for brightness and edge maps."""

    def test_flat_image_has_no_edges(self, flat_analyzer):
        """Test that a uniform image produces an all-zero edge map."""
        assert not flat_analyzer.edge_map.any()

    def test_brightness_is_channel_mean(self):
        pixels = np.zeros((3, 3, 3), dtype=np.uint8)
        pixels[..., 0] = 30
        pixels[..., 1] = 60
        pixels[..., 2] = 90
        analyzer = ImageAnalyzer(image=pixels)
        analyzer.analyze()

        assert analyzer.brightness_at(1, 1) == pytest.approx(60.0)

    def test_split_image_edge_columns(self, split_analyzer):
        """Test that both columns adjacent to the boundary are edges."""
        assert split_analyzer.edge_value(49, 50) == 255
        assert split_analyzer.edge_value(50, 50) == 255
        assert split_analyzer.edge_value(48, 50) == 0
        assert split_analyzer.edge_value(51, 50) == 0
        assert split_analyzer.edge_value(10, 50) == 0

    def test_border_pixels_never_edges(self, split_analyzer):
        """Test that the outermost rows are left at zero."""
        assert split_analyzer.edge_value(49, 0) == 0
        assert split_analyzer.edge_value(50, 99) == 0

    def test_edge_values_binary(self, split_analyzer):
        values = set(np.unique(split_analyzer.edge_map).tolist())
        assert values == {0, 255}

    def test_threshold_above_gradient_suppresses_edges(self, split_image):
        """Test that a threshold above the gradient magnitude finds nothing."""
        analyzer = ImageAnalyzer(edge_threshold=1000.0, image=split_image)
        analyzer.analyze()

        assert not analyzer.edge_map.any()

    def test_is_edge_uses_edge_on_level(self, split_analyzer):
        assert EDGE_ON < 255
        assert split_analyzer.is_edge(49, 50)
        assert not split_analyzer.is_edge(20, 50)

    def test_tiny_image_has_no_edges(self):
        """Test that images smaller than the 3x3 kernel analyze cleanly."""
        analyzer = ImageAnalyzer(image=np.zeros((2, 2, 3), dtype=np.uint8))
        analyzer.analyze()

        assert analyzer.edge_map.shape == (2, 2)
        assert not analyzer.edge_map.any()


class TestAccessors:
    """Tests for per-pixel queries."""

    def test_coordinates_clamped(self, split_analyzer):
        """Test that out-of-range coordinates read the nearest pixel."""
        assert split_analyzer.color_at(-5, 500) == (20, 20, 20)
        assert split_analyzer.color_at(1000, -3) == (230, 230, 230)

    def test_fractional_coordinates_truncate(self, split_analyzer):
        assert split_analyzer.color_at(49.9, 10.5) == (20, 20, 20)
        assert split_analyzer.color_at(50.1, 10.5) == (230, 230, 230)

    def test_unloaded_analyzer_is_neutral(self):
        """Test that accessors answer neutrally without an image."""
        analyzer = ImageAnalyzer()

        assert not analyzer.loaded
        assert analyzer.color_at(3, 4) == (0, 0, 0)
        assert analyzer.brightness_at(3, 4) == 0.0
        assert analyzer.edge_value(3, 4) == 0
        assert analyzer.local_contrast(3, 4) == 0.0
        assert analyzer.edge_direction(3, 4) == 0.0

    def test_analyze_without_image_does_not_raise(self):
        analyzer = ImageAnalyzer()
        analyzer.analyze()
        assert not analyzer.analyzed


class TestLocalContrast:
    """Tests for neighborhood contrast."""

    def test_flat_region_has_zero_contrast(self, flat_analyzer):
        assert flat_analyzer.local_contrast(50, 50) == 0.0

    def test_boundary_contrast(self, split_analyzer):
        """Test that a neighborhood half dark, half bright has std 105."""
        assert split_analyzer.local_contrast(49, 50) == pytest.approx(105.0 / 255.0)

    def test_contrast_near_corner(self, split_analyzer):
        """Test that samples clamp at the image border."""
        assert split_analyzer.local_contrast(0, 0) == 0.0


class TestEdgeDirection:
    """Tests for edge tangent estimation."""

    def test_vertical_edge_points_down(self, split_analyzer):
        """Test that a vertical boundary yields a vertical tangent."""
        assert split_analyzer.edge_direction(49, 50) == pytest.approx(math.pi / 2)

    def test_no_neighbors_gives_zero(self, split_analyzer):
        assert split_analyzer.edge_direction(10, 50) == 0.0


class TestAngularDistance:
    """Tests for wrapped angle differences."""

    def test_simple_difference(self):
        assert angular_distance(0.1, 0.4) == pytest.approx(0.3)

    def test_wraps_to_shortest(self):
        assert angular_distance(0.0, 1.5 * math.pi) == pytest.approx(-0.5 * math.pi)

    def test_negative_direction(self):
        assert angular_distance(0.1, -0.1) == pytest.approx(-0.2)

    def test_range(self):
        for a in (-7.0, -1.0, 0.0, 2.5, 9.0):
            for b in (-4.0, 0.3, 3.1, 6.0):
                d = angular_distance(a, b)
                assert -math.pi < d <= math.pi
