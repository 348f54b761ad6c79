"""Textual message objects for widget/app coordination."""

from __future__ import annotations

from textual.message import Message


class ViewStateChanged(Message):
    def __init__(
        self,
        *,
        cursor: int,
        total: int,
        layout: str,
        line_number: int | None,
        match_position: int | None,
        match_count: int,
    ) -> None:
        self.cursor = cursor
        self.total = total
        self.layout = layout
        self.line_number = line_number
        self.match_position = match_position
        self.match_count = match_count
        super().__init__()


class FoldToggled(Message):
    def __init__(self, *, hunk_index: int, folded: bool) -> None:
        self.hunk_index = hunk_index
        self.folded = folded
        super().__init__()
