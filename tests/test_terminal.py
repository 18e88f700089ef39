"""Tests for terminal size helpers."""

import os
import shutil

from braille_art.utils.terminal import default_columns


class TestDefaultColumns:
    def test_leaves_margin(self, monkeypatch):
        monkeypatch.setattr(shutil, "get_terminal_size", lambda fallback: os.terminal_size((120, 40)))
        assert default_columns() == 118

    def test_capped(self, monkeypatch):
        monkeypatch.setattr(shutil, "get_terminal_size", lambda fallback: os.terminal_size((500, 40)))
        assert default_columns(max_columns=200) == 200

    def test_never_below_one(self, monkeypatch):
        monkeypatch.setattr(shutil, "get_terminal_size", lambda fallback: os.terminal_size((1, 1)))
        assert default_columns() == 1

    def test_falls_back_when_size_unknown(self, monkeypatch):
        def broken(fallback):
            raise OSError("not a terminal")

        monkeypatch.setattr(shutil, "get_terminal_size", broken)
        assert default_columns() == 78
