"""Conversion pipeline.

Ingest -> luminance -> threshold or Canny mask -> braille cells -> text.
"""

from __future__ import annotations

import hashlib
import logging
import math
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image

from braille_art.core.braille import cells_to_lines, encode_cells
from braille_art.core.canny import CannyParams, canny
from braille_art.core.errors import InvalidParameter
from braille_art.core.frame import PixelBuffer, from_array, ingest
from braille_art.core.luminance import GrayMethod, quantize, threshold_mask, to_luminance
from braille_art.core.reader import Frame, load_image

logger = logging.getLogger(__name__)

OPTIONS_VERSION = 1

# Single dot (dot 3) used for empty cells when the output font is proportional
PROPORTIONAL_BLANK = 0x04

DEFAULT_SIGMA = CannyParams.sigma
DEFAULT_LOW = CannyParams.low
DEFAULT_HIGH = CannyParams.high


@dataclass(frozen=True)
class ConversionOptions:
    """Settings that affect output."""

    invert: bool = False
    monospace: bool = True
    gray_method: GrayMethod = GrayMethod.LUMINOSITY
    gray_levels: int = 0  # 0 or 1 = no quantization, otherwise 2 to 256
    threshold: float = 128  # 0 to 255
    canny_enabled: bool = False
    canny_sigma: float | None = None  # > 0, blur standard deviation
    canny_low: float | None = None  # 0 to 1, fraction of max gradient
    canny_high: float | None = None  # 0 to 1, >= canny_low
    version: int = OPTIONS_VERSION

    @classmethod
    def from_raw(
        cls,
        invert: bool = False,
        monospace: bool = True,
        gray_levels: int = 0,
        threshold: float = 128,
        sigma: float | None = None,
        low: float | None = None,
        high: float | None = None,
        gray_method: GrayMethod | str = GrayMethod.LUMINOSITY,
    ) -> ConversionOptions:
        """Build options from raw slider values.

        sigma is on a 0-100 scale (divided by 10); low and high are
        percentages (divided by 100). Canny is enabled only when all three
        are given.
        """
        canny_fields = (sigma, low, high)
        given = [v is not None for v in canny_fields]
        if any(given) and not all(given):
            raise InvalidParameter("Canny needs sigma, low and high together")

        return cls(
            invert=invert,
            monospace=monospace,
            gray_method=GrayMethod(gray_method),
            gray_levels=gray_levels,
            threshold=threshold,
            canny_enabled=all(given),
            canny_sigma=sigma / 10.0 if sigma is not None else None,
            canny_low=low / 100.0 if low is not None else None,
            canny_high=high / 100.0 if high is not None else None,
        )

    @property
    def canny_params(self) -> CannyParams | None:
        if not self.canny_enabled:
            return None
        return CannyParams(
            sigma=DEFAULT_SIGMA if self.canny_sigma is None else self.canny_sigma,
            low=DEFAULT_LOW if self.canny_low is None else self.canny_low,
            high=DEFAULT_HIGH if self.canny_high is None else self.canny_high,
        )

    def validate(self) -> None:
        """Raise InvalidParameter if any option is out of range."""
        if self.version != OPTIONS_VERSION:
            raise InvalidParameter(f"Unsupported options version: {self.version}")
        if not 0 <= self.threshold <= 255:
            raise InvalidParameter(f"Threshold must be in [0, 255], got {self.threshold}")
        try:
            levels = float(self.gray_levels)
        except (TypeError, ValueError) as e:
            raise InvalidParameter(
                f"Gray levels must be a number, got {self.gray_levels!r}"
            ) from e
        if not levels.is_integer() or not 0 <= levels <= 256:
            raise InvalidParameter(
                f"Gray levels must be an integer in [0, 256], got {self.gray_levels}"
            )
        try:
            GrayMethod(self.gray_method)
        except ValueError as e:
            raise InvalidParameter(f"Unknown gray method: {self.gray_method}") from e

        params = self.canny_params
        if params is None:
            return
        if not (math.isfinite(params.sigma) and params.sigma > 0):
            raise InvalidParameter(f"Canny sigma must be positive, got {params.sigma}")
        if not 0.0 <= params.low <= 1.0:
            raise InvalidParameter(f"Canny low must be in [0, 1], got {params.low}")
        if not 0.0 <= params.high <= 1.0:
            raise InvalidParameter(f"Canny high must be in [0, 1], got {params.high}")
        if params.low > params.high:
            raise InvalidParameter(
                f"Canny low ({params.low}) must not exceed high ({params.high})"
            )

    def hash(self) -> str:
        """Deterministic hash for cache keying."""
        data = (
            f"{self.version}:{self.invert}:{self.monospace}:"
            f"{GrayMethod(self.gray_method).value}:{self.gray_levels}:"
            f"{self.threshold}:{self.canny_params}"
        )
        return hashlib.md5(data.encode()).hexdigest()[:12]


@dataclass(frozen=True)
class ConversionResult:
    """Braille text and its size."""

    text: str
    char_count: int
    columns: int
    rows: int

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")


def build_mask(buffer: PixelBuffer, options: ConversionOptions) -> np.ndarray:
    """Boolean dot mask for a pixel buffer (True = dot present)."""
    method = GrayMethod(options.gray_method)
    levels = int(options.gray_levels)

    params = options.canny_params
    if params is None:
        return threshold_mask(buffer, options.threshold, options.invert, levels, method)

    mask = canny(quantize(to_luminance(buffer, method), levels), params)
    logger.debug("Canny marked %d edge pixels", int(mask.sum()))
    return ~mask if options.invert else mask


def format_cells(codes: np.ndarray, monospace: bool = True) -> str:
    """Join cell rows with line breaks and trim surrounding whitespace.

    When not monospace, empty cells get a single dot so proportional fonts
    keep the columns aligned.
    """
    if not monospace:
        codes = np.where(codes == 0, PROPORTIONAL_BLANK, codes)
    return "\n".join(cells_to_lines(codes)).strip()


def convert_buffer(buffer: PixelBuffer, options: ConversionOptions) -> ConversionResult:
    """Run mask, encode and format on an ingested buffer."""
    mask = build_mask(buffer, options)
    codes = encode_cells(mask)
    text = format_cells(codes, options.monospace)
    rows, columns = codes.shape
    logger.debug(
        "Converted %dx%d pixels to %dx%d cells",
        buffer.width, buffer.height, columns, rows,
    )
    return ConversionResult(text=text, char_count=len(text), columns=columns, rows=rows)


def convert(
    pixels: bytes | bytearray | memoryview | np.ndarray,
    width: int,
    options: ConversionOptions | None = None,
    channels: int | None = None,
) -> ConversionResult:
    """Convert an interleaved RGB/RGBA buffer to braille text.

    Options are validated before any pixel is touched.

    Raises:
        InvalidParameter: an option is out of range.
        InvalidDimension: odd width or height not a multiple of 4.
        DimensionMismatch: buffer length does not match width x channels.
    """
    if options is None:
        options = ConversionOptions()
    options.validate()
    buffer = ingest(pixels, width, channels)
    return convert_buffer(buffer, options)


def convert_image(image: Image.Image, options: ConversionOptions | None = None) -> ConversionResult:
    """Convert a PIL image whose size already fits whole cells."""
    if options is None:
        options = ConversionOptions()
    options.validate()
    buffer = from_array(np.asarray(image.convert("RGB"), dtype=np.uint8))
    return convert_buffer(buffer, options)


def convert_frame(frame: Frame, options: ConversionOptions | None = None) -> ConversionResult:
    return convert_image(frame.image, options)


def convert_path(
    path: str | Path,
    options: ConversionOptions | None = None,
    columns: int | None = None,
) -> ConversionResult:
    """Load an image file, resample it to `columns` characters and convert."""
    if options is None:
        options = ConversionOptions()
    options.validate()
    return convert_frame(load_image(path, columns), options)
