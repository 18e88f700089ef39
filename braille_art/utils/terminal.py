"""Terminal size detection utilities."""

from __future__ import annotations

import shutil

FALLBACK_COLUMNS = 80


def default_columns(margin: int = 2, max_columns: int = 200) -> int:
    """Braille characters per line that fit the current terminal.

    Falls back to 80 columns when the terminal size cannot be determined,
    e.g. when output is piped.
    """
    try:
        width = shutil.get_terminal_size(fallback=(FALLBACK_COLUMNS, 24)).columns
    except (ValueError, OSError):
        width = FALLBACK_COLUMNS
    return max(1, min(width - margin, max_columns))
