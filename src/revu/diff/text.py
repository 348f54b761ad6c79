"""Column-safe text helpers."""

from __future__ import annotations

DEFAULT_TAB_WIDTH = 4


def expand_tabs(text: str, tab_width: int = DEFAULT_TAB_WIDTH) -> str:
    """Replace tabs with spaces up to the next tab stop.

    After expansion every character occupies one column, so string indices can
    be used directly as column offsets.
    """
    return text.expandtabs(max(1, tab_width))
