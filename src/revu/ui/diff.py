"""Paint diff rows as rich text lines for the terminal."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import datetime

from rich.style import Style
from rich.text import Text

from revu.diff.blame import (
    BlameMap,
    content_width,
    format_blame_gutter,
    get_blame_for_row,
    get_blame_for_sbs_row,
)
from revu.diff.models import (
    CommentRow,
    DiffLine,
    FoldedRow,
    HeaderRow,
    LineKind,
    PairedRow,
    SegmentKind,
    SideBySideRow,
    UnifiedRow,
    WordDiffSegment,
)
from revu.diff.search import find_match_columns
from revu.diff.text import DEFAULT_TAB_WIDTH, expand_tabs
from revu.diff.word_diff import expand_segment_tabs, slice_word_diff_segments

GUTTER_WIDTH = 5
PREFIX_WIDTH = 1

_CONTROL_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|[\x00-\x08\x0b-\x1f\x7f]")

_LINE_STYLES: dict[LineKind, Style] = {
    LineKind.ADD: Style(color="green"),
    LineKind.DEL: Style(color="red"),
    LineKind.HEADER: Style(color="cyan"),
    LineKind.CONTEXT: Style(),
}
_CHANGED_STYLES: dict[LineKind, Style] = {
    LineKind.ADD: Style(color="bright_white", bgcolor="dark_green", bold=True),
    LineKind.DEL: Style(color="bright_white", bgcolor="dark_red", bold=True),
}
_PREFIXES: dict[LineKind, str] = {
    LineKind.ADD: "+",
    LineKind.DEL: "-",
    LineKind.HEADER: "",
    LineKind.CONTEXT: " ",
}
MUTED = Style(color="grey50")
MATCH = Style(bgcolor="yellow", color="black")
FOLDED = Style(color="cyan", italic=True)
COMMENT = Style(color="yellow")


def clean_text(text: str) -> str:
    """Drop escape sequences and control characters other than tabs."""
    return _CONTROL_RE.sub("", text)


def _gutter(number: int | None) -> Text:
    label = f"{number:>4} " if number is not None else " " * GUTTER_WIDTH
    return Text(label, style=MUTED)


def render_line_content(
    line: DiffLine,
    segments: Sequence[WordDiffSegment] | None,
    *,
    width: int,
    scroll_x: int = 0,
    tab_width: int = DEFAULT_TAB_WIDTH,
    search_query: str = "",
) -> Text:
    """Visible slice of one line's content, with word-diff and search emphasis."""
    base = _LINE_STYLES[line.kind]
    text = Text(style=base, no_wrap=True, overflow="crop")
    if segments and line.kind in _CHANGED_STYLES:
        cleaned = [WordDiffSegment(segment.kind, clean_text(segment.text)) for segment in segments]
        visible = slice_word_diff_segments(expand_segment_tabs(cleaned, tab_width), scroll_x, width)
        for segment in visible:
            style = _CHANGED_STYLES[line.kind] if segment.kind is SegmentKind.CHANGED else base
            text.append(segment.text, style=style)
    else:
        expanded = expand_tabs(clean_text(line.content), tab_width)
        text.append(expanded[max(0, scroll_x) : max(0, scroll_x) + max(0, width)])

    if search_query and line.kind is not LineKind.HEADER:
        for start, end in find_match_columns(clean_text(line.content), search_query, tab_width):
            text.stylize(MATCH, max(0, start - scroll_x), max(0, end - scroll_x))
    return text


def render_unified_row(
    row: UnifiedRow,
    *,
    width: int,
    scroll_x: int = 0,
    tab_width: int = DEFAULT_TAB_WIDTH,
    blame: BlameMap | None = None,
    show_blame: bool = False,
    search_query: str = "",
    now: datetime | None = None,
) -> Text:
    if isinstance(row, FoldedRow):
        label = f"⋯ {row.folded_line_count} unchanged lines folded"
        return Text.assemble(" " * GUTTER_WIDTH, (label, FOLDED), no_wrap=True)
    if isinstance(row, CommentRow):
        return render_comment_row(row, width=width)

    result = Text(no_wrap=True, overflow="crop")
    if show_blame:
        result.append(format_blame_gutter(get_blame_for_row(row, blame), now), style=MUTED)
    result.append_text(_gutter(row.line_number))
    result.append(_PREFIXES[row.line.kind], style=_LINE_STYLES[row.line.kind])
    available = content_width(width, show_blame) - GUTTER_WIDTH - PREFIX_WIDTH
    result.append_text(
        render_line_content(
            row.line,
            row.word_diff_segments,
            width=max(0, available),
            scroll_x=scroll_x,
            tab_width=tab_width,
            search_query=search_query,
        )
    )
    return result


def render_comment_row(row: CommentRow, *, width: int) -> Text:
    thread = row.thread
    first = thread.comments[0] if thread.comments else None
    summary = f"{first.author}: {first.body.splitlines()[0] if first.body else ''}" if first else thread.id
    extra = len(thread.comments) - 1
    suffix = f" (+{extra} more)" if extra > 0 else ""
    status = " [resolved]" if thread.is_resolved else ""
    body = clean_text(f"{summary}{suffix}{status}")
    text = Text.assemble(" " * GUTTER_WIDTH, ("┃ ", COMMENT), (body, COMMENT), no_wrap=True)
    text.truncate(max(0, width))
    return text


def _render_half(
    line: DiffLine | None,
    segments: Sequence[WordDiffSegment] | None,
    number: int | None,
    *,
    width: int,
    scroll_x: int,
    tab_width: int,
    search_query: str,
) -> Text:
    half = Text(no_wrap=True, overflow="crop")
    if line is None:
        half.append(" " * width, style=MUTED)
        return half
    half.append_text(_gutter(number))
    half.append(_PREFIXES[line.kind], style=_LINE_STYLES[line.kind])
    half.append_text(
        render_line_content(
            line,
            segments,
            width=max(0, width - GUTTER_WIDTH - PREFIX_WIDTH),
            scroll_x=scroll_x,
            tab_width=tab_width,
            search_query=search_query,
        )
    )
    half.pad_right(max(0, width - half.cell_len))
    half.truncate(width)
    return half


def render_sbs_row(
    row: SideBySideRow,
    *,
    width: int,
    scroll_x: int = 0,
    tab_width: int = DEFAULT_TAB_WIDTH,
    blame: BlameMap | None = None,
    show_blame: bool = False,
    search_query: str = "",
    hunk_headers: Mapping[int, str] | None = None,
    now: datetime | None = None,
) -> Text:
    if isinstance(row, HeaderRow):
        label = (hunk_headers or {}).get(row.hunk_index) or f"@@ hunk {row.hunk_index + 1} @@"
        return Text(clean_text(label), style=_LINE_STYLES[LineKind.HEADER], no_wrap=True)
    if isinstance(row, FoldedRow):
        label = f"⋯ {row.folded_line_count} unchanged lines folded"
        return Text.assemble(" " * GUTTER_WIDTH, (label, FOLDED), no_wrap=True)
    if isinstance(row, CommentRow):
        return render_comment_row(row, width=width)

    result = Text(no_wrap=True, overflow="crop")
    if show_blame:
        result.append(format_blame_gutter(get_blame_for_sbs_row(row, blame), now), style=MUTED)
    half = max(0, (content_width(width, show_blame) - 1) // 2)
    options = {"width": half, "scroll_x": scroll_x, "tab_width": tab_width, "search_query": search_query}
    left_number = row.left.old_line_number if row.left is not None else None
    right_number = row.right.new_line_number if row.right is not None else None
    result.append_text(_render_half(row.left, row.left_segments, left_number, **options))
    result.append("│", style=MUTED)
    result.append_text(_render_half(row.right, row.right_segments, right_number, **options))
    return result


def rows_as_plain_text(rows: Sequence[UnifiedRow] | Sequence[SideBySideRow], *, width: int = 120) -> list[str]:
    """Non-interactive rendering used by ``revu rows``."""
    lines: list[str] = []
    for row in rows:
        if isinstance(row, (PairedRow, HeaderRow)):
            text = render_sbs_row(row, width=width)
        else:
            text = render_unified_row(row, width=width)
        lines.append(text.plain.rstrip())
    return lines

