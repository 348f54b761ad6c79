"""Attach per-line authorship to display rows."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from revu.diff.models import BlameInfo, LineKind, LineRow, PairedRow, SideBySideRow, UnifiedRow

AUTHOR_WIDTH = 8
DATE_WIDTH = 4
# author, space, right-aligned age, separator
BLAME_GUTTER_WIDTH = AUTHOR_WIDTH + 1 + DATE_WIDTH + 1

BlameMap = Mapping[int, BlameInfo]


def blame_by_line(entries: Iterable[BlameInfo]) -> dict[int, BlameInfo]:
    return {entry.line: entry for entry in entries}


def get_blame_for_row(row: UnifiedRow, blame: BlameMap | None) -> BlameInfo | None:
    """Blame for a line row: old-side number for deletions, new-side otherwise."""
    if not blame or not isinstance(row, LineRow):
        return None
    if row.line.kind is LineKind.HEADER:
        return None
    number = row.old_line_number if row.line.kind is LineKind.DEL else row.new_line_number
    if number is None:
        return None
    return blame.get(number)


def get_blame_for_sbs_row(row: SideBySideRow, blame: BlameMap | None) -> BlameInfo | None:
    """Blame for the new side of a paired row, or the old side of a pure deletion."""
    if not blame or not isinstance(row, PairedRow):
        return None
    if row.right is not None and row.right.new_line_number is not None:
        return blame.get(row.right.new_line_number)
    if row.left is not None and row.left.old_line_number is not None:
        return blame.get(row.left.old_line_number)
    return None


def content_width(available: int, blame_enabled: bool) -> int:
    """Columns left for line content once the blame gutter is reserved."""
    if blame_enabled:
        available -= BLAME_GUTTER_WIDTH
    return max(0, available)


def abbreviate_author(author: str, max_length: int = AUTHOR_WIDTH) -> str:
    return author[:max_length]


def format_blame_date(value: str, now: datetime | None = None) -> str:
    """Compact relative age such as ``5m``, ``3h``, ``2mo`` or ``1y``."""
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return "?"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    seconds = (now - moment).total_seconds()
    if seconds < 60:
        return "now"
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    days = hours // 24
    if days < 30:
        return f"{days}d"
    if days < 365:
        return f"{days // 30}mo"
    return f"{days // 365}y"


def format_blame_gutter(info: BlameInfo | None, now: datetime | None = None) -> str:
    """Fixed-width gutter cell; blank when there is no blame for the row."""
    if info is None:
        return " " * BLAME_GUTTER_WIDTH
    author = abbreviate_author(info.author).ljust(AUTHOR_WIDTH)
    age = format_blame_date(info.date, now)[:DATE_WIDTH].rjust(DATE_WIDTH)
    return f"{author} {age}│"
