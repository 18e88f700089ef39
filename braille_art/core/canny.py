"""Canny edge detection on a luminance grid.

Gaussian smoothing -> Sobel gradients -> non-maximum suppression ->
double-threshold hysteresis. Thresholds are fractions of the strongest
gradient in the image, so results do not depend on absolute contrast.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import cv2
import numpy as np

# Magnitudes below this are float noise from blurring a flat region
_EPSILON = 1e-9


@dataclass(frozen=True)
class CannyParams:
    sigma: float = 1.0
    low: float = 0.1
    high: float = 0.2


def gaussian_blur(gray: np.ndarray, sigma: float) -> np.ndarray:
    """Smooth with a Gaussian of radius ceil(3*sigma), replicating borders."""
    radius = max(1, math.ceil(3 * sigma))
    ksize = 2 * radius + 1
    return cv2.GaussianBlur(
        gray.astype(np.float64),
        (ksize, ksize),
        sigmaX=sigma,
        sigmaY=sigma,
        borderType=cv2.BORDER_REPLICATE,
    )


def sobel_gradients(gray: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Horizontal and vertical 3x3 Sobel derivatives."""
    gx = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
    gy = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
    return gx, gy


def quantize_direction(gx: np.ndarray, gy: np.ndarray) -> np.ndarray:
    """Bin gradient angles into 0, 45, 90 and 135 degrees (as 0..3).

    Rows grow downward, so 45 points down-right and 135 down-left.
    """
    angle = np.rad2deg(np.arctan2(gy, gx)) % 180.0
    bins = np.zeros(angle.shape, dtype=np.uint8)
    bins[(angle >= 22.5) & (angle < 67.5)] = 1
    bins[(angle >= 67.5) & (angle < 112.5)] = 2
    bins[(angle >= 112.5) & (angle < 157.5)] = 3
    return bins


# (dy, dx) of one neighbour along each direction bin; the other is mirrored
_NEIGHBOUR_OFFSETS = [(0, 1), (1, 1), (1, 0), (1, -1)]


def non_max_suppression(magnitude: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """Zero every pixel that is not a local maximum along its gradient.

    Neighbours outside the image count as zero. A pixel must be strictly
    greater than its forward neighbour and at least its backward one, so a
    run of equal magnitudes thins to its last pixel.
    """
    h, w = magnitude.shape
    padded = np.pad(magnitude, 1, mode="constant", constant_values=0.0)
    keep = np.zeros(magnitude.shape, dtype=bool)

    for bin_idx, (dy, dx) in enumerate(_NEIGHBOUR_OFFSETS):
        forward = padded[1 + dy : 1 + dy + h, 1 + dx : 1 + dx + w]
        backward = padded[1 - dy : 1 - dy + h, 1 - dx : 1 - dx + w]
        local_max = (magnitude > forward) & (magnitude >= backward)
        keep |= (direction == bin_idx) & local_max

    return np.where(keep & (magnitude > 0), magnitude, 0.0)


def hysteresis(suppressed: np.ndarray, low: float, high: float) -> np.ndarray:
    """Keep weak pixels only when 8-connected to a strong one.

    Args:
        suppressed: gradient magnitudes after non-maximum suppression.
        low, high: fractions of the maximum magnitude in [0, 1].
    """
    max_mag = float(suppressed.max()) if suppressed.size else 0.0
    if max_mag <= 0.0:
        return np.zeros(suppressed.shape, dtype=bool)

    nonzero = suppressed > 0
    candidates = nonzero & (suppressed >= low * max_mag)
    strong = nonzero & (suppressed >= high * max_mag)

    num_labels, labels = cv2.connectedComponents(
        candidates.astype(np.uint8), connectivity=8
    )
    if num_labels <= 1:
        return np.zeros(suppressed.shape, dtype=bool)

    has_strong = np.zeros(num_labels, dtype=bool)
    has_strong[np.unique(labels[strong])] = True
    has_strong[0] = False  # background
    return has_strong[labels]


def gradient(gray: np.ndarray, sigma: float) -> tuple[np.ndarray, np.ndarray]:
    """Blurred gradient magnitude and quantized direction."""
    blurred = gaussian_blur(gray, sigma)
    gx, gy = sobel_gradients(blurred)
    magnitude = np.hypot(gx, gy)
    magnitude[magnitude < _EPSILON] = 0.0
    return magnitude, quantize_direction(gx, gy)


def canny(gray: np.ndarray, params: CannyParams) -> np.ndarray:
    """Binary edge mask (True = edge) of a [0, 1] luminance grid."""
    magnitude, direction = gradient(gray, params.sigma)
    suppressed = non_max_suppression(magnitude, direction)
    return hysteresis(suppressed, params.low, params.high)
