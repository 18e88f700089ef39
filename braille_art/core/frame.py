"""Pixel buffer ingestion.

Validates a raw interleaved RGB/RGBA byte buffer against its declared width
and exposes it as a read-only (height, width, channels) array.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from braille_art.core.errors import DimensionMismatch, InvalidDimension

SUPPORTED_CHANNELS = (4, 3)

CELL_WIDTH = 2
CELL_HEIGHT = 4


@dataclass(frozen=True)
class PixelBuffer:
    """An immutable, validated pixel grid."""

    width: int
    height: int
    channels: int
    data: np.ndarray  # uint8, shape (height, width, channels), read-only

    def pixel(self, x: int, y: int) -> tuple[int, ...]:
        """Return the channel values of the pixel at column x, row y."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        return tuple(int(v) for v in self.data[y, x])

    @property
    def rgb(self) -> np.ndarray:
        """RGB channels only (alpha dropped), shape (height, width, 3)."""
        return self.data[:, :, :3]


def _resolve_channels(length: int, width: int) -> int:
    """Infer channels per pixel from the buffer length.

    Picks the only layout that divides the buffer into a positive number of
    rows that is a multiple of 4. If both layouts fit, the caller must say
    which one it means. If neither fits, the first layout that divides the
    buffer at all is returned so the height check reports the problem.
    """
    dividing = [c for c in SUPPORTED_CHANNELS if length % (width * c) == 0]
    if not dividing:
        raise DimensionMismatch(
            f"Buffer of {length} bytes does not hold whole rows of width "
            f"{width} as RGB or RGBA"
        )
    valid = [
        c for c in dividing
        if length and (length // (width * c)) % CELL_HEIGHT == 0
    ]
    if len(valid) > 1:
        raise DimensionMismatch(
            f"Buffer of {length} bytes at width {width} fits both RGB and RGBA; "
            f"pass channels explicitly"
        )
    return valid[0] if valid else dividing[0]


def ingest(
    pixels: bytes | bytearray | memoryview | np.ndarray,
    width: int,
    channels: int | None = None,
) -> PixelBuffer:
    """Validate a raw pixel buffer and wrap it as a PixelBuffer.

    Height is derived as ``len(pixels) / channels / width``. When channels
    is omitted it is inferred from the buffer length.

    Raises:
        InvalidDimension: width not even/positive, or height not a positive
            multiple of 4.
        DimensionMismatch: buffer length is not width * height * channels,
            the layout is ambiguous, or an array is not uint8.
    """
    if isinstance(pixels, np.ndarray):
        if pixels.dtype != np.uint8:
            raise DimensionMismatch(
                f"Pixel array must be uint8 bytes, got dtype {pixels.dtype}"
            )
        raw = np.ascontiguousarray(pixels).reshape(-1)
    else:
        raw = np.frombuffer(bytes(pixels), dtype=np.uint8)

    if width <= 0:
        raise InvalidDimension(f"Width must be positive, got {width}")
    if width % CELL_WIDTH != 0:
        raise InvalidDimension(f"Width must be even, got {width}")

    length = raw.size
    if channels is None:
        channels = _resolve_channels(length, width)
    elif channels not in SUPPORTED_CHANNELS:
        raise DimensionMismatch(f"Unsupported channel count: {channels}")

    height = length // channels // width
    if height * width * channels != length:
        raise DimensionMismatch(
            f"Buffer of {length} bytes is not {width} x {height} x {channels}"
        )
    if height == 0 or height % CELL_HEIGHT != 0:
        raise InvalidDimension(
            f"Height must be a positive multiple of {CELL_HEIGHT}, got {height}"
        )

    data = raw.reshape(height, width, channels).copy()
    data.flags.writeable = False
    return PixelBuffer(width=width, height=height, channels=channels, data=data)


def from_array(array: np.ndarray) -> PixelBuffer:
    """Ingest an (height, width, channels) uint8 array, e.g. from Pillow."""
    if array.ndim != 3:
        raise DimensionMismatch(f"Expected a 3-D pixel array, got shape {array.shape}")
    _, width, channels = array.shape
    return ingest(array, width, channels)
