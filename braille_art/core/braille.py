"""Braille encoding of binary masks.

One character covers a 2x4 block of pixels. The code point is U+2800 plus
an 8-bit dot pattern.
"""

from __future__ import annotations

import numpy as np

from braille_art.core.errors import InvalidDimension

BRAILLE_BASE = 0x2800
BRAILLE_BLANK = chr(BRAILLE_BASE)
BRAILLE_FULL = chr(BRAILLE_BASE + 0xFF)

# Unicode dot numbers laid out as the cell is drawn, [row][col].
# Dot n is bit n - 1 of the pattern.
DOT_NUMBERS = np.array(
    [
        [1, 4],
        [2, 5],
        [3, 6],
        [7, 8],
    ]
)

CELL_WEIGHTS = np.left_shift(1, DOT_NUMBERS - 1).astype(np.int64)


def encode_cells(mask: np.ndarray) -> np.ndarray:
    """Pack a binary mask into braille pattern offsets.

    Cell (r, c) covers rows 4r..4r+3 and columns 2c..2c+1.

    Args:
        mask: 2D boolean array (height, width); True = dot present.

    Returns:
        uint8 array (height // 4, width // 2) of offsets from U+2800.

    Raises:
        InvalidDimension: height not a multiple of 4 or width not even.
    """
    h, w = mask.shape
    if h % 4 or w % 2:
        raise InvalidDimension(
            f"Mask of {w}x{h} does not split into whole 2x4 cells"
        )

    cells = mask.astype(bool).reshape(h // 4, 4, w // 2, 2).transpose(0, 2, 1, 3)
    codes = (cells * CELL_WEIGHTS).sum(axis=(2, 3))
    return codes.astype(np.uint8)


def cells_to_lines(codes: np.ndarray) -> list[str]:
    """Turn a grid of pattern offsets into one string per cell row."""
    return ["".join(chr(BRAILLE_BASE + int(c)) for c in row) for row in codes]
