"""Save braille text as a text file or a rendered image.

Images are drawn with Pillow using a monospace font that covers the
braille block.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from braille_art.core.processor import ConversionResult

# Monospace font size and metrics
DEFAULT_FONT_SIZE = 14
CHAR_WIDTH_RATIO = 0.6  # Approximate char width / font size for monospace

TEXT_SUFFIXES = ("", ".txt")
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp")


def _get_font(size: int = DEFAULT_FONT_SIZE) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Get a monospace font with braille glyphs for rendering."""
    for name in [
        "DejaVuSansMono.ttf",
        "DejaVuSans.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
        "Menlo.ttc",
        "/System/Library/Fonts/Menlo.ttc",
        "seguisym.ttf",
    ]:
        try:
            return ImageFont.truetype(name, size)
        except (IOError, OSError):
            continue
    return ImageFont.load_default()


def render_text_to_image(
    result: ConversionResult,
    font_size: int = DEFAULT_FONT_SIZE,
    bg_color: tuple[int, int, int] = (255, 255, 255),
    fg_color: tuple[int, int, int] = (0, 0, 0),
) -> Image.Image:
    """Render converted braille text to a PIL Image, one line per row."""
    font = _get_font(font_size)

    char_w = int(font_size * CHAR_WIDTH_RATIO)
    char_h = font_size + 2
    lines = result.lines
    max_line_len = max((len(line) for line in lines), default=0)

    img_w = max(max_line_len * char_w, 1)
    img_h = max(len(lines) * char_h, 1)

    img = Image.new("RGB", (img_w, img_h), bg_color)
    draw = ImageDraw.Draw(img)

    for row_idx, line in enumerate(lines):
        y = row_idx * char_h
        # Per-character placement keeps columns aligned even if the font's
        # braille advance differs from its Latin advance
        for col_idx, ch in enumerate(line):
            draw.text((col_idx * char_w, y), ch, fill=fg_color, font=font)

    return img


def save_text(result: ConversionResult, output_path: Path) -> None:
    """Write the braille text as UTF-8 with a trailing newline."""
    output_path.write_text(result.text + "\n", encoding="utf-8")


def save_output(
    result: ConversionResult,
    output_path: Path,
    font_size: int = DEFAULT_FONT_SIZE,
) -> None:
    """Save in the format determined by the output file extension."""
    suffix = output_path.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        save_text(result, output_path)
    elif suffix in IMAGE_SUFFIXES:
        render_text_to_image(result, font_size).save(str(output_path))
    else:
        raise ValueError(f"Unsupported output format: {suffix}")
