"""Tests for Canny edge detection."""

import numpy as np
import pytest

from braille_art.core.canny import (
    CannyParams,
    canny,
    gaussian_blur,
    hysteresis,
    non_max_suppression,
    quantize_direction,
)


def _vertical_step(size: int = 16) -> np.ndarray:
    gray = np.zeros((size, size))
    gray[:, size // 2 :] = 1.0
    return gray


class TestGaussianBlur:
    def test_preserves_flat_image(self):
        gray = np.full((8, 8), 0.3)
        assert np.allclose(gaussian_blur(gray, 2.0), 0.3)

    def test_smooths_step(self):
        blurred = gaussian_blur(_vertical_step(), 1.0)
        row = blurred[0]
        assert 0.0 < row[7] < row[8] < 1.0
        # Replicated borders keep the far edges at their original values
        assert row[0] == pytest.approx(0.0, abs=1e-6)
        assert row[-1] == pytest.approx(1.0, abs=1e-6)


class TestDirection:
    def test_bins(self):
        gx = np.array([[1.0, 0.0, 1.0, -1.0]])
        gy = np.array([[0.0, 1.0, 1.0, 1.0]])
        assert quantize_direction(gx, gy).tolist() == [[0, 2, 1, 3]]

    def test_opposite_gradients_share_a_bin(self):
        gx = np.array([[-1.0, 0.0]])
        gy = np.array([[0.0, -1.0]])
        assert quantize_direction(gx, gy).tolist() == [[0, 2]]


class TestNonMaxSuppression:
    def test_keeps_peak_only(self):
        magnitude = np.array([[1.0, 3.0, 2.0, 0.5]])
        direction = np.zeros_like(magnitude, dtype=np.uint8)
        result = non_max_suppression(magnitude, direction)
        assert result.tolist() == [[0.0, 3.0, 0.0, 0.0]]

    def test_vertical_direction_uses_rows(self):
        magnitude = np.array([[1.0], [3.0], [2.0]])
        direction = np.full(magnitude.shape, 2, dtype=np.uint8)
        result = non_max_suppression(magnitude, direction)
        assert result[:, 0].tolist() == [0.0, 3.0, 0.0]

    def test_tied_pair_keeps_one(self):
        magnitude = np.array([[0.0, 2.0, 2.0, 0.0]])
        direction = np.zeros_like(magnitude, dtype=np.uint8)
        result = non_max_suppression(magnitude, direction)
        assert result.tolist() == [[0.0, 0.0, 2.0, 0.0]]

    def test_plateau_thins_to_one_pixel(self):
        magnitude = np.array([[0.0, 2.0, 2.0, 2.0, 2.0, 0.0]])
        direction = np.zeros_like(magnitude, dtype=np.uint8)
        result = non_max_suppression(magnitude, direction)
        assert np.count_nonzero(result) == 1

    def test_vertical_plateau_thins_to_one_pixel(self):
        magnitude = np.array([[0.0], [1.5], [1.5], [1.5], [0.0]])
        direction = np.full(magnitude.shape, 2, dtype=np.uint8)
        result = non_max_suppression(magnitude, direction)
        assert np.count_nonzero(result) == 1


class TestHysteresis:
    def test_weak_connected_to_strong_is_kept(self):
        suppressed = np.zeros((6, 6))
        suppressed[0, 0] = 1.0  # strong
        suppressed[1, 1] = 0.5  # weak, diagonal neighbour
        suppressed[2, 2] = 0.5  # weak, chained through (1, 1)
        suppressed[4, 4] = 0.5  # weak, isolated
        edges = hysteresis(suppressed, low=0.3, high=0.8)
        assert edges[0, 0] and edges[1, 1] and edges[2, 2]
        assert not edges[4, 4]

    def test_below_low_is_dropped(self):
        suppressed = np.zeros((4, 4))
        suppressed[0, 0] = 1.0
        suppressed[0, 1] = 0.1
        edges = hysteresis(suppressed, low=0.3, high=0.8)
        assert edges[0, 0]
        assert not edges[0, 1]

    def test_all_zero(self):
        edges = hysteresis(np.zeros((4, 4)), low=0.1, high=0.2)
        assert edges.dtype == bool
        assert not edges.any()


class TestCanny:
    def test_flat_image_has_no_edges(self):
        edges = canny(np.full((16, 16), 0.7), CannyParams())
        assert not edges.any()

    def test_vertical_step_edge(self):
        edges = canny(_vertical_step(), CannyParams(sigma=1.0, low=0.1, high=0.2))
        # Each row has an edge on the step and nowhere else
        assert edges[:, 7:9].any(axis=1).all()
        assert not edges[:, :6].any()
        assert not edges[:, 10:].any()

    def test_step_edge_is_one_pixel_wide(self):
        edges = canny(_vertical_step(), CannyParams(sigma=1.0, low=0.1, high=0.2))
        assert edges.sum(axis=1).tolist() == [1] * 16

    def test_output_shape_and_type(self):
        gray = np.random.default_rng(0).random((12, 10))
        edges = canny(gray, CannyParams())
        assert edges.shape == (12, 10)
        assert edges.dtype == bool

    def test_raising_thresholds_never_adds_edges(self):
        gray = np.random.default_rng(42).random((32, 32))
        counts = [
            int(canny(gray, CannyParams(sigma=1.0, low=low, high=high)).sum())
            for low, high in [(0.0, 0.1), (0.1, 0.2), (0.2, 0.4), (0.4, 0.6), (0.6, 1.0)]
        ]
        assert counts == sorted(counts, reverse=True)

    def test_raising_low_alone_never_adds_edges(self):
        gray = np.random.default_rng(7).random((24, 24))
        counts = [
            int(canny(gray, CannyParams(sigma=0.8, low=low, high=0.5)).sum())
            for low in (0.0, 0.1, 0.2, 0.3, 0.5)
        ]
        assert counts == sorted(counts, reverse=True)
