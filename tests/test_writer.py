"""Tests for the output writer."""

import pytest
from PIL import Image

from braille_art.core.processor import ConversionResult
from braille_art.core.writer import render_text_to_image, save_output, save_text


def _make_result(text="⣿⠀⣿\n⠀⣿⠀"):
    return ConversionResult(text=text, char_count=len(text), columns=3, rows=2)


class TestRenderText:
    def test_produces_image(self):
        img = render_text_to_image(_make_result())
        assert isinstance(img, Image.Image)
        assert img.mode == "RGB"
        assert img.width > 0
        assert img.height > 0

    def test_size_follows_lines(self):
        one = render_text_to_image(_make_result("⣿⣿"))
        two = render_text_to_image(_make_result("⣿⣿\n⣿⣿"))
        assert two.height == 2 * one.height
        assert two.width == one.width


class TestSave:
    def test_save_text(self, tmp_path):
        output = tmp_path / "art.txt"
        save_text(_make_result(), output)
        assert output.read_text(encoding="utf-8") == "⣿⠀⣿\n⠀⣿⠀\n"

    def test_save_output_no_suffix_is_text(self, tmp_path):
        output = tmp_path / "art"
        save_output(_make_result(), output)
        assert output.read_text(encoding="utf-8").startswith("⣿")

    def test_save_png(self, tmp_path):
        output = tmp_path / "art.png"
        save_output(_make_result(), output)
        assert output.exists()
        img = Image.open(str(output))
        assert img.format == "PNG"

    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported"):
            save_output(_make_result(), tmp_path / "art.docx")
