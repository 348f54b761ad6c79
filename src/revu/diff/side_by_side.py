"""Two-column row builder."""

from __future__ import annotations

from collections.abc import Sequence

from revu.diff.comments import ThreadAttacher, ThreadSource
from revu.diff.folding import DEFAULT_POLICY, hidden_span, resolve_fold_state
from revu.diff.models import (
    CommentRow,
    DiffLine,
    FoldedRow,
    FoldPolicy,
    FoldState,
    HeaderRow,
    Hunk,
    LineKind,
    PairedRow,
    SideBySideRow,
)
from revu.diff.word_diff import annotate_hunk

# Terminals narrower than this get the unified layout instead.
SIDE_BY_SIDE_MIN_WIDTH = 100


def build_side_by_side_rows(
    hunks: Sequence[Hunk],
    threads: ThreadSource | None = None,
    fold_state: FoldState | None = None,
    *,
    policy: FoldPolicy | None = None,
) -> list[SideBySideRow]:
    """Align old and new lines into paired rows, one ``HeaderRow`` per hunk.

    Deletion runs are paired positionally with the addition run that follows
    them; the longer run spills into one-sided rows. Header lines are
    represented by the hunk's ``HeaderRow`` rather than a paired row.
    """
    policy = policy or DEFAULT_POLICY
    state = resolve_fold_state(hunks, fold_state, policy)
    attacher = ThreadAttacher(threads)
    rows: list[SideBySideRow] = []

    for hunk_index, hunk in enumerate(hunks):
        rows.append(HeaderRow(hunk_index=hunk_index))
        hidden = hidden_span(hunk, hunk_index, state, policy)
        segments = annotate_hunk(hunk, policy.word_diff_ratio, policy.word_diff_max_cells)
        lines = hunk.lines

        def emit(left: int | None, right: int | None) -> None:
            left_line = lines[left] if left is not None else None
            right_line = lines[right] if right is not None else None
            rows.append(
                PairedRow(
                    left=left_line,
                    right=right_line,
                    left_segments=segments.get(left) if left is not None else None,
                    right_segments=segments.get(right) if right is not None else None,
                )
            )
            carried: list[DiffLine] = []
            if left_line is not None:
                carried.append(left_line)
            if right_line is not None and right_line is not left_line:
                carried.append(right_line)
            for line in carried:
                rows.extend(CommentRow(thread) for thread in attacher.take(line))

        position = 0
        while position < len(lines):
            line = lines[position]
            if hidden is not None and position in hidden:
                if position == hidden.start:
                    rows.append(FoldedRow(hunk_index=hunk_index, folded_line_count=len(hidden)))
                position += 1
                continue
            if line.kind is LineKind.HEADER:
                position += 1
                continue
            if line.kind is LineKind.CONTEXT:
                emit(position, position)
                position += 1
                continue

            deletions: list[int] = []
            while position < len(lines) and lines[position].kind is LineKind.DEL:
                deletions.append(position)
                position += 1
            additions: list[int] = []
            while position < len(lines) and lines[position].kind is LineKind.ADD:
                additions.append(position)
                position += 1
            for offset in range(max(len(deletions), len(additions))):
                emit(
                    deletions[offset] if offset < len(deletions) else None,
                    additions[offset] if offset < len(additions) else None,
                )

    return rows
