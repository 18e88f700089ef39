"""Image loading for conversion.

Opens any Pillow-readable file, flattens transparency onto white and
resamples it to a pixel grid that splits into whole braille cells.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from braille_art.core.errors import InvalidDimension
from braille_art.core.frame import CELL_HEIGHT, CELL_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class Frame:
    """A loaded image ready for conversion."""

    image: Image.Image  # RGB PIL image, width even, height a multiple of 4
    path: Path | None = None

    @property
    def columns(self) -> int:
        return self.image.width // CELL_WIDTH

    @property
    def rows(self) -> int:
        return self.image.height // CELL_HEIGHT


def flatten_alpha(img: Image.Image) -> Image.Image:
    """Composite transparent pixels onto a white background."""
    if img.mode not in ("RGBA", "LA", "P", "PA"):
        return img.convert("RGB")
    rgba = img.convert("RGBA")
    canvas = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    canvas.paste(rgba, (0, 0), rgba)
    return canvas.convert("RGB")


def cell_grid_size(
    img_width: int, img_height: int, columns: int | None = None
) -> tuple[int, int]:
    """Pixel size that fits whole 2x4 cells.

    With `columns`, the width becomes 2 * columns and the height follows the
    aspect ratio; otherwise the original size is rounded down.
    """
    if columns is None:
        pixel_w, pixel_h = img_width, img_height
    else:
        if columns <= 0:
            raise InvalidDimension(f"Width in characters must be positive, got {columns}")
        pixel_w = columns * CELL_WIDTH
        pixel_h = round(img_height / img_width * pixel_w)

    pixel_w -= pixel_w % CELL_WIDTH
    pixel_h -= pixel_h % CELL_HEIGHT
    if pixel_w == 0 or pixel_h == 0:
        raise InvalidDimension(
            f"Image of {img_width}x{img_height} is too small for a "
            f"{CELL_WIDTH}x{CELL_HEIGHT} braille cell"
        )
    return pixel_w, pixel_h


def prepare_image(img: Image.Image, columns: int | None = None) -> Image.Image:
    """Flatten and resample an image onto a whole-cell pixel grid."""
    rgb = flatten_alpha(img)
    size = cell_grid_size(rgb.width, rgb.height, columns)
    if columns is None:
        if size != rgb.size:
            rgb = rgb.crop((0, 0, size[0], size[1]))
        return rgb
    return rgb.resize(size, Image.Resampling.LANCZOS)


def load_image(path: str | Path, columns: int | None = None) -> Frame:
    """Open an image file and prepare it for conversion.

    Raises:
        FileNotFoundError: the file does not exist.
        ValueError: the file is not a readable image.
    """
    local_path = Path(path)
    if not local_path.exists():
        raise FileNotFoundError(f"File not found: {local_path}")

    try:
        with Image.open(local_path) as img:
            img.load()
            prepared = prepare_image(img, columns)
    except UnidentifiedImageError as e:
        raise ValueError(f"Not a readable image: {local_path}") from e

    logger.debug(
        "Loaded %s as %dx%d pixels", local_path, prepared.width, prepared.height
    )
    return Frame(image=prepared, path=local_path)
