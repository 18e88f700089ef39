"""Luminance extraction, gray-level quantization and thresholding."""

from __future__ import annotations

from enum import Enum

import numpy as np

from braille_art.core.frame import PixelBuffer


class GrayMethod(str, Enum):
    LUMINOSITY = "luminosity"
    AVERAGE = "average"
    LIGHTNESS = "lightness"
    MAX = "max"
    MIN = "min"


# ITU-R BT.601 luma weights, per mille so white sums to exactly 1.0
BT601_WEIGHTS = np.array([299, 587, 114])


def to_luminance(
    buffer: PixelBuffer, method: GrayMethod = GrayMethod.LUMINOSITY
) -> np.ndarray:
    """Convert pixels to a float luminance grid in [0.0, 1.0].

    Alpha is ignored.
    """
    rgb = buffer.rgb.astype(np.float64) / 255.0

    if method == GrayMethod.LUMINOSITY:
        gray = (buffer.rgb.astype(np.int64) @ BT601_WEIGHTS) / 255000.0
    elif method == GrayMethod.AVERAGE:
        gray = rgb.mean(axis=2)
    elif method == GrayMethod.LIGHTNESS:
        gray = (rgb.max(axis=2) + rgb.min(axis=2)) / 2.0
    elif method == GrayMethod.MAX:
        gray = rgb.max(axis=2)
    elif method == GrayMethod.MIN:
        gray = rgb.min(axis=2)
    else:
        raise ValueError(f"Unknown gray method: {method}")

    return np.clip(gray, 0.0, 1.0)


def quantize(gray: np.ndarray, levels: int) -> np.ndarray:
    """Bucket luminance into `levels` evenly spaced steps.

    Bucket k covers [k/levels, (k+1)/levels) and maps to k/(levels-1), so
    0.0 and 1.0 are preserved. levels < 2 leaves the grid unchanged.
    """
    if levels < 2:
        return gray
    buckets = np.minimum(np.floor(gray * levels), levels - 1)
    return buckets / (levels - 1)


def binarize(gray: np.ndarray, threshold: float) -> np.ndarray:
    """Mark pixels darker than the threshold.

    Args:
        gray: luminance grid in [0.0, 1.0].
        threshold: threshold on the 0-255 scale.

    Returns:
        Boolean grid, True where a dot is drawn (luminance < threshold).
        Pixels at or above the threshold are lit and left blank.
    """
    return gray < threshold / 255.0


def threshold_mask(
    buffer: PixelBuffer,
    threshold: float,
    invert: bool = False,
    gray_levels: int = 0,
    method: GrayMethod = GrayMethod.LUMINOSITY,
) -> np.ndarray:
    """Full threshold path: luminance, optional quantization and inversion."""
    gray = quantize(to_luminance(buffer, method), gray_levels)
    if invert:
        gray = 1.0 - gray
    return binarize(gray, threshold)
