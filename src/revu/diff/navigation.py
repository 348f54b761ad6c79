"""Hunk jumps and line lookup over built rows."""

from __future__ import annotations

from collections.abc import Sequence

from revu.diff.folding import get_hunk_index_for_row
from revu.diff.models import (
    HeaderRow,
    LineKind,
    LineRow,
    PairedRow,
    SideBySideRow,
    UnifiedRow,
)


def _pick_next(starts: list[tuple[int, int]], current_index: int, current_group: int | None) -> int | None:
    if not starts:
        return None
    if len(starts) == 1:
        return starts[0][0]
    for index, group in starts:
        if index > current_index and group != current_group:
            return index
    for index, group in starts:
        if group != current_group:
            return index
    return starts[0][0]


def _pick_prev(starts: list[tuple[int, int]], current_index: int, current_group: int | None) -> int | None:
    if not starts:
        return None
    if len(starts) == 1:
        return starts[0][0]
    for index, group in reversed(starts):
        if index < current_index and group != current_group:
            return index
    for index, group in reversed(starts):
        if group != current_group:
            return index
    return starts[-1][0]


# Unified layout


def collect_hunk_starts(rows: Sequence[UnifiedRow]) -> list[tuple[int, int]]:
    """``(row index, hunk index)`` of the first change row of each hunk."""
    starts: list[tuple[int, int]] = []
    seen: set[int] = set()
    for index, row in enumerate(rows):
        if isinstance(row, LineRow) and row.line.is_change and row.hunk_index not in seen:
            seen.add(row.hunk_index)
            starts.append((index, row.hunk_index))
    return starts


def find_next_hunk_start(rows: Sequence[UnifiedRow], current_index: int) -> int | None:
    """First change row of the next hunk after the current one, wrapping around."""
    starts = collect_hunk_starts(rows)
    return _pick_next(starts, current_index, get_hunk_index_for_row(rows, current_index))


def find_prev_hunk_start(rows: Sequence[UnifiedRow], current_index: int) -> int | None:
    starts = collect_hunk_starts(rows)
    return _pick_prev(starts, current_index, get_hunk_index_for_row(rows, current_index))


def find_row_by_line_number(rows: Sequence[UnifiedRow], line_number: int) -> int | None:
    for index, row in enumerate(rows):
        if not isinstance(row, LineRow) or row.line.kind is LineKind.HEADER:
            continue
        if row.new_line_number == line_number or row.old_line_number == line_number:
            return index
    return None


# Side-by-side layout


def _sbs_is_changed(row: SideBySideRow) -> bool:
    if not isinstance(row, PairedRow):
        return False
    return any(line is not None and line.is_change for line in (row.left, row.right))


def _sbs_section(rows: Sequence[SideBySideRow], index: int) -> int | None:
    """Index of the nearest header at or above ``index``."""
    if not 0 <= index < len(rows):
        return None
    for position in range(index, -1, -1):
        if isinstance(rows[position], HeaderRow):
            return position
    return None


def collect_sbs_hunk_starts(rows: Sequence[SideBySideRow]) -> list[tuple[int, int]]:
    """``(row index, header index)`` of the first change row after each header."""
    starts: list[tuple[int, int]] = []
    section: int | None = None
    claimed = False
    for index, row in enumerate(rows):
        if isinstance(row, HeaderRow):
            section, claimed = index, False
            continue
        if section is not None and not claimed and _sbs_is_changed(row):
            starts.append((index, section))
            claimed = True
    return starts


def find_next_sbs_hunk_start(rows: Sequence[SideBySideRow], current_index: int) -> int | None:
    starts = collect_sbs_hunk_starts(rows)
    return _pick_next(starts, current_index, _sbs_section(rows, current_index))


def find_prev_sbs_hunk_start(rows: Sequence[SideBySideRow], current_index: int) -> int | None:
    starts = collect_sbs_hunk_starts(rows)
    return _pick_prev(starts, current_index, _sbs_section(rows, current_index))


def sbs_line_numbers(row: PairedRow) -> tuple[int | None, int | None]:
    """Old-side number of the left line and new-side number of the right line."""
    left = row.left.old_line_number if row.left is not None else None
    right = row.right.new_line_number if row.right is not None else None
    return left, right


def find_sbs_row_by_line_number(rows: Sequence[SideBySideRow], line_number: int) -> int | None:
    for index, row in enumerate(rows):
        if not isinstance(row, PairedRow):
            continue
        if line_number in sbs_line_numbers(row):
            return index
    return None


def sbs_row_hunk_index(rows: Sequence[SideBySideRow], index: int) -> int | None:
    section = _sbs_section(rows, index)
    if section is None:
        return None
    header = rows[section]
    if not isinstance(header, HeaderRow):
        return None
    return header.hunk_index
