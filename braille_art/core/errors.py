"""Error kinds raised by the conversion pipeline.

Every failure aborts the whole conversion; no partial output is returned.
"""

from __future__ import annotations


class ConversionError(ValueError):
    """Base class for all conversion failures."""

    code = "CONVERSION_ERROR"


class InvalidDimension(ConversionError):
    """Width is not even, or the derived height is not a multiple of 4."""

    code = "INVALID_DIMENSION"


class DimensionMismatch(ConversionError):
    """Buffer length is inconsistent with width x channels."""

    code = "DIMENSION_MISMATCH"


class InvalidParameter(ConversionError):
    """An option is outside its declared range."""

    code = "INVALID_PARAMETER"
