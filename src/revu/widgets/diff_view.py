"""Scrollable diff viewer that paints only the virtual window."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Literal

from rich.style import Style
from textual import events
from textual.binding import Binding
from textual.strip import Strip
from textual.widget import Widget

from revu.config.models import DiffSettings
from revu.diff.bookmarks import BookmarkState, CaptureMode, get_bookmark, is_valid_register, set_bookmark
from revu.diff.cache import RowCache
from revu.diff.folding import (
    default_fold_state,
    get_hunk_index_for_row,
    is_foldable,
    toggle_fold,
    unfold_all,
)
from revu.diff.models import (
    FoldState,
    HeaderRow,
    LineRow,
    PairedRow,
    SideBySideRow,
    UnifiedRow,
    VirtualWindow,
)
from revu.diff.navigation import (
    find_next_hunk_start,
    find_next_sbs_hunk_start,
    find_prev_hunk_start,
    find_prev_sbs_hunk_start,
    find_row_by_line_number,
    find_sbs_row_by_line_number,
    sbs_line_numbers,
    sbs_row_hunk_index,
)
from revu.diff.search import compute_sbs_search_matches, compute_search_matches, next_match, prev_match
from revu.diff.side_by_side import SIDE_BY_SIDE_MIN_WIDTH, build_side_by_side_rows
from revu.diff.unified import build_unified_rows
from revu.diff.virtual_window import clamp_scroll_offset, compute_virtual_window, scroll_to_reveal
from revu.messages import FoldToggled, ViewStateChanged
from revu.runtime_logging import get_runtime_logger
from revu.sources.bundle import ReviewDocument
from revu.ui.diff import render_sbs_row, render_unified_row

Layout = Literal["unified", "split"]

_CURSOR_STYLE = Style(bgcolor="grey23")
_HORIZONTAL_STEP = 8


class DiffView(Widget, can_focus=True):
    BINDINGS = [
        Binding("j,down", "cursor_down", "Down", show=False),
        Binding("k,up", "cursor_up", "Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("g,home", "first_row", "Top", show=False),
        Binding("G,end", "last_row", "Bottom", show=False),
        Binding("right_square_bracket", "next_hunk", "Next Hunk"),
        Binding("left_square_bracket", "prev_hunk", "Prev Hunk"),
        Binding("z", "toggle_fold", "Fold"),
        Binding("Z", "unfold_all", "Unfold All", show=False),
        Binding("n", "next_match", "Next Match", show=False),
        Binding("N", "prev_match", "Prev Match", show=False),
        Binding("m", "capture_register('set')", "Mark", show=False),
        Binding("apostrophe", "capture_register('jump')", "Jump to Mark", show=False),
        Binding("b", "toggle_blame", "Blame"),
        Binding("s", "toggle_layout", "Layout"),
        Binding("h,left", "scroll_left", "Left", show=False),
        Binding("l,right", "scroll_right", "Right", show=False),
    ]

    DEFAULT_CSS = """
    DiffView {
        height: 1fr;
    }
    """

    def __init__(
        self,
        document: ReviewDocument,
        settings: DiffSettings,
        *,
        row_cache: RowCache | None = None,
        id: str | None = None,
    ) -> None:
        self.document = document
        self.settings = settings
        self.policy = settings.fold_policy()
        self.row_cache = row_cache or RowCache()
        self.fold_state: FoldState = default_fold_state(document.hunks, self.policy)
        self.preferred_layout: Literal["auto", "unified", "split"] = settings.mode
        self.show_blame = settings.show_blame and document.blame is not None
        self.cursor = 0
        self.top_row = 0
        self.column_offset = 0
        self.search_query = ""
        self.matches: list[int] = []
        self.bookmarks = BookmarkState()
        self.capture_mode: CaptureMode | None = None
        self.virtual_window: VirtualWindow | None = None
        self._strip_cache: dict[int, Strip] = {}
        self._hunk_headers = {
            index: hunk.header for index, hunk in enumerate(document.hunks) if hunk.header
        }
        self.logger = get_runtime_logger().bind(document=document.key)
        super().__init__(id=id)

    # Row model

    @property
    def active_layout(self) -> Layout:
        if self.preferred_layout == "auto":
            width = self.size.width or SIDE_BY_SIDE_MIN_WIDTH
            return "split" if width >= SIDE_BY_SIDE_MIN_WIDTH else "unified"
        return self.preferred_layout

    @property
    def rows(self) -> Sequence[UnifiedRow] | Sequence[SideBySideRow]:
        layout = self.active_layout
        key = (self.document.key, layout, self.fold_state, self.policy)
        return self.row_cache.get_or_build(key, lambda: self._build_rows(layout))

    def _build_rows(self, layout: Layout) -> Sequence[UnifiedRow] | Sequence[SideBySideRow]:
        builder = build_side_by_side_rows if layout == "split" else build_unified_rows
        with self.logger.timed("diff_view.rows_built", layout=layout) as extra:
            rows = builder(
                self.document.hunks,
                self.document.threads,
                self.fold_state,
                policy=self.policy,
            )
            extra["rows"] = len(rows)
        return rows

    def row_line_number(self, index: int) -> int | None:
        rows = self.rows
        if not 0 <= index < len(rows):
            return None
        row = rows[index]
        if isinstance(row, LineRow):
            return row.line_number
        if isinstance(row, PairedRow):
            left, right = sbs_line_numbers(row)
            return right if right is not None else left
        return None

    def current_hunk(self) -> int | None:
        return self._for_layout(get_hunk_index_for_row, sbs_row_hunk_index, self.cursor)

    def _for_layout(self, unified: Callable[..., Any], split: Callable[..., Any], *args: Any) -> Any:
        """Call the layout-specific variant of a row operation."""
        if self.active_layout == "split":
            return split(self.rows, *args)
        return unified(self.rows, *args)

    # Painting

    def _content_changed(self) -> None:
        self._strip_cache.clear()
        self.virtual_window = None
        self.refresh()

    def _sync_view(self) -> None:
        total = len(self.rows)
        self.cursor = min(max(0, self.cursor), max(0, total - 1))
        height = self.size.height
        self.top_row = clamp_scroll_offset(total, height, scroll_to_reveal(self.cursor, self.top_row, height))
        self._content_changed()
        self.post_message(
            ViewStateChanged(
                cursor=self.cursor,
                total=total,
                layout=self.active_layout,
                line_number=self.row_line_number(self.cursor),
                match_position=self.matches.index(self.cursor) if self.cursor in self.matches else None,
                match_count=len(self.matches),
            )
        )

    def _ensure_window(self) -> VirtualWindow:
        window = compute_virtual_window(
            len(self.rows),
            self.size.height,
            self.top_row,
            self.settings.overscan,
        )
        if window != self.virtual_window:
            self._strip_cache = {
                index: strip for index, strip in self._strip_cache.items() if index in window.visible_range
            }
            self.virtual_window = window
        return window

    def _render_row(self, index: int, width: int) -> Strip:
        row = self.rows[index]
        if isinstance(row, (PairedRow, HeaderRow)) or self.active_layout == "split":
            text = render_sbs_row(
                row,
                width=width,
                scroll_x=self.column_offset,
                tab_width=self.settings.tab_width,
                blame=self.document.blame,
                show_blame=self.show_blame,
                search_query=self.search_query,
                hunk_headers=self._hunk_headers,
            )
        else:
            text = render_unified_row(
                row,
                width=width,
                scroll_x=self.column_offset,
                tab_width=self.settings.tab_width,
                blame=self.document.blame,
                show_blame=self.show_blame,
                search_query=self.search_query,
            )
        strip = Strip(text.render(self.app.console), text.cell_len).crop_extend(0, width, self.rich_style)
        if index == self.cursor:
            strip = strip.apply_style(_CURSOR_STYLE)
        return strip

    def render_line(self, y: int) -> Strip:
        width = self.size.width
        window = self._ensure_window()
        index = self.top_row + y
        if index not in window.visible_range:
            return Strip.blank(width, self.rich_style)
        strip = self._strip_cache.get(index)
        if strip is None or strip.cell_length != width:
            strip = self._render_row(index, width)
            self._strip_cache[index] = strip
        return strip

    def on_resize(self) -> None:
        self._refresh_matches()
        self._sync_view()

    def on_mount(self) -> None:
        self.logger.info(
            "diff_view.mounted",
            hunks=len(self.document.hunks),
            rows=len(self.rows),
            layout=self.active_layout,
        )
        self._sync_view()

    # Movement

    def move_to(self, index: int | None) -> bool:
        if index is None:
            return False
        self.cursor = index
        self._sync_view()
        return True

    def action_cursor_down(self) -> None:
        self.move_to(self.cursor + 1)

    def action_cursor_up(self) -> None:
        self.move_to(self.cursor - 1)

    def action_page_down(self) -> None:
        self.move_to(self.cursor + max(1, self.size.height - 1))

    def action_page_up(self) -> None:
        self.move_to(self.cursor - max(1, self.size.height - 1))

    def action_first_row(self) -> None:
        self.move_to(0)

    def action_last_row(self) -> None:
        self.move_to(len(self.rows) - 1)

    def action_next_hunk(self) -> None:
        self.move_to(self._for_layout(find_next_hunk_start, find_next_sbs_hunk_start, self.cursor))

    def action_prev_hunk(self) -> None:
        self.move_to(self._for_layout(find_prev_hunk_start, find_prev_sbs_hunk_start, self.cursor))

    def go_to_line(self, line_number: int) -> bool:
        target = self._find_line(line_number)
        if target is None:
            self.logger.debug("diff_view.line_not_found", line_number=line_number)
        return self.move_to(target)

    def action_scroll_left(self) -> None:
        self.column_offset = max(0, self.column_offset - _HORIZONTAL_STEP)
        self._content_changed()

    def action_scroll_right(self) -> None:
        self.column_offset += _HORIZONTAL_STEP
        self._content_changed()

    # Folding

    def action_toggle_fold(self) -> None:
        hunk_index = self.current_hunk()
        if hunk_index is None:
            return
        self.fold_state = toggle_fold(hunk_index, self.fold_state, len(self.document.hunks))
        folded = self.fold_state.is_folded(hunk_index) and is_foldable(self.document.hunks[hunk_index], self.policy)
        self.logger.info("diff_view.fold_toggled", hunk_index=hunk_index, folded=folded)
        self._refresh_matches()
        self._sync_view()
        self.post_message(FoldToggled(hunk_index=hunk_index, folded=folded))

    def action_unfold_all(self) -> None:
        self.fold_state = unfold_all(self.fold_state, len(self.document.hunks))
        self._refresh_matches()
        self._sync_view()

    # Search

    def _refresh_matches(self) -> None:
        self.matches = self._for_layout(compute_search_matches, compute_sbs_search_matches, self.search_query)

    def search(self, query: str) -> int:
        """Highlight ``query`` and jump to the first match at or after the cursor."""
        self.search_query = query
        self._refresh_matches()
        self.logger.debug("diff_view.search", query_length=len(query), matches=len(self.matches))
        if self.matches:
            self.move_to(next_match(self.matches, self.cursor - 1))
        else:
            self._sync_view()
        return len(self.matches)

    def action_next_match(self) -> None:
        self.move_to(next_match(self.matches, self.cursor))

    def action_prev_match(self) -> None:
        self.move_to(prev_match(self.matches, self.cursor))

    # Display modes

    def action_toggle_blame(self) -> None:
        if self.document.blame is None:
            self.notify("Blame is not available for this file", severity="warning")
            return
        self.show_blame = not self.show_blame
        self._content_changed()

    def action_toggle_layout(self) -> None:
        anchor = self.row_line_number(self.cursor)
        self.preferred_layout = "unified" if self.active_layout == "split" else "split"
        self._refresh_matches()
        if anchor is not None:
            self.cursor = self._find_line(anchor) or 0
        self.logger.info("diff_view.layout_changed", layout=self.active_layout)
        self._sync_view()

    def _find_line(self, line_number: int) -> int | None:
        return self._for_layout(find_row_by_line_number, find_sbs_row_by_line_number, line_number)

    # Bookmarks

    def action_capture_register(self, mode: CaptureMode) -> None:
        self.capture_mode = mode

    def on_key(self, event: events.Key) -> None:
        if self.capture_mode is None:
            return
        event.stop()
        event.prevent_default()
        mode, self.capture_mode = self.capture_mode, None
        register = event.character or ""
        if not is_valid_register(register):
            return
        if mode == "set":
            self.set_mark(register)
        else:
            self.jump_to_mark(register)

    def set_mark(self, register: str) -> bool:
        line_number = self.row_line_number(self.cursor)
        if line_number is None:
            self.notify("No line under the cursor to mark", severity="warning")
            return False
        self.bookmarks = set_bookmark(self.bookmarks, register, self.document.path, line_number, self.document.key)
        self.logger.debug("diff_view.mark_set", register=register, line_number=line_number)
        return True

    def jump_to_mark(self, register: str) -> bool:
        bookmark = get_bookmark(self.bookmarks, register)
        if bookmark is None or bookmark.review_key != self.document.key:
            self.notify(f"Mark '{register}' is not set", severity="warning")
            return False
        return self.go_to_line(bookmark.line)
