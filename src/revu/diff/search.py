"""Case-insensitive search over visible rows."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence

from revu.diff.models import LineKind, LineRow, PairedRow, SideBySideRow, UnifiedRow
from revu.diff.text import DEFAULT_TAB_WIDTH, expand_tabs


def compute_search_matches(rows: Sequence[UnifiedRow], query: str) -> list[int]:
    """Indices of code rows containing ``query``.

    Only rows currently on screen take part, so text hidden behind a fold
    placeholder is not matched until the hunk is unfolded.
    """
    if not query:
        return []
    needle = query.lower()
    return [
        index
        for index, row in enumerate(rows)
        if isinstance(row, LineRow)
        and row.line.kind is not LineKind.HEADER
        and needle in row.line.content.lower()
    ]


def compute_sbs_search_matches(rows: Sequence[SideBySideRow], query: str) -> list[int]:
    if not query:
        return []
    needle = query.lower()
    matches: list[int] = []
    for index, row in enumerate(rows):
        if not isinstance(row, PairedRow):
            continue
        if any(line is not None and needle in line.content.lower() for line in (row.left, row.right)):
            matches.append(index)
    return matches


def next_match(matches: Sequence[int], current_index: int) -> int | None:
    """Match after ``current_index``, wrapping to the first one."""
    if not matches:
        return None
    position = bisect_right(matches, current_index)
    return matches[position] if position < len(matches) else matches[0]


def prev_match(matches: Sequence[int], current_index: int) -> int | None:
    if not matches:
        return None
    position = bisect_left(matches, current_index)
    return matches[position - 1] if position > 0 else matches[-1]


def find_match_columns(
    text: str,
    query: str,
    tab_width: int = DEFAULT_TAB_WIDTH,
) -> list[tuple[int, int]]:
    """Non-overlapping ``(start, end)`` column spans of ``query`` after tab expansion."""
    if not query:
        return []
    haystack = expand_tabs(text, tab_width).lower()
    needle = expand_tabs(query, tab_width).lower()
    spans: list[tuple[int, int]] = []
    start = haystack.find(needle)
    while start != -1:
        spans.append((start, start + len(needle)))
        start = haystack.find(needle, start + len(needle))
    return spans
