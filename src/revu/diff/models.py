"""Value types shared by the diff rendering engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field


class LineKind(str, Enum):
    HEADER = "header"
    CONTEXT = "context"
    ADD = "add"
    DEL = "del"


class Side(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class SegmentKind(str, Enum):
    UNCHANGED = "unchanged"
    CHANGED = "changed"


@dataclass(frozen=True, slots=True)
class DiffLine:
    kind: LineKind
    content: str
    old_line_number: int | None = None
    new_line_number: int | None = None

    @property
    def is_change(self) -> bool:
        return self.kind in (LineKind.ADD, LineKind.DEL)

    @property
    def display_line_number(self) -> int | None:
        """Old-side number for deletions, nothing for headers, new-side otherwise."""
        if self.kind is LineKind.DEL:
            return self.old_line_number
        if self.kind is LineKind.HEADER:
            return None
        return self.new_line_number


@dataclass(frozen=True, slots=True)
class Hunk:
    lines: tuple[DiffLine, ...]

    @property
    def header(self) -> str | None:
        for line in self.lines:
            if line.kind is LineKind.HEADER:
                return line.content
        return None


@dataclass(frozen=True, slots=True)
class ReviewComment:
    author: str
    body: str
    created_at: str = ""


@dataclass(frozen=True, slots=True)
class CommentThread:
    id: str
    anchors: frozenset[tuple[Side, int]]
    is_resolved: bool = False
    comments: tuple[ReviewComment, ...] = ()


@dataclass(frozen=True, slots=True)
class WordDiffSegment:
    kind: SegmentKind
    text: str


class BlameInfo(BaseModel):
    model_config = {"frozen": True}

    line: int = Field(ge=1)
    author: str = Field(min_length=1)
    date: str = Field(min_length=1)
    commit_sha: str = Field(min_length=1)
    commit_message: str = ""


@dataclass(frozen=True, slots=True)
class FoldPolicy:
    fold_threshold: int = 8
    context_margin: int = 3
    word_diff_ratio: float = 2.0
    tab_width: int = 4
    word_diff_max_cells: int = 40_000


@dataclass(frozen=True, slots=True)
class FoldState:
    """Per-hunk folded flags; index ``i`` belongs to hunk ``i``.

    A hunk without a flag keeps its default, which is folded. Folding only
    takes effect on hunks that have a long enough context run.
    """

    folded: tuple[bool, ...] = ()

    def is_folded(self, hunk_index: int) -> bool:
        if 0 <= hunk_index < len(self.folded):
            return self.folded[hunk_index]
        return True


# Unified rows


@dataclass(frozen=True, slots=True)
class LineRow:
    line: DiffLine
    line_number: int | None
    old_line_number: int | None
    new_line_number: int | None
    hunk_index: int
    word_diff_segments: tuple[WordDiffSegment, ...] | None = None


@dataclass(frozen=True, slots=True)
class FoldedRow:
    hunk_index: int
    folded_line_count: int


@dataclass(frozen=True, slots=True)
class CommentRow:
    thread: CommentThread


UnifiedRow = LineRow | FoldedRow | CommentRow


# Side-by-side rows


@dataclass(frozen=True, slots=True)
class PairedRow:
    left: DiffLine | None
    right: DiffLine | None
    left_segments: tuple[WordDiffSegment, ...] | None = field(default=None, compare=False)
    right_segments: tuple[WordDiffSegment, ...] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class HeaderRow:
    hunk_index: int


SideBySideRow = PairedRow | HeaderRow | FoldedRow | CommentRow


@dataclass(frozen=True, slots=True)
class VirtualWindow:
    start_index: int
    end_index: int
    visible_range: range
    padding_top: int
    padding_bottom: int
