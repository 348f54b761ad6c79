"""Single-column row builder."""

from __future__ import annotations

from collections.abc import Sequence

from revu.diff.comments import ThreadAttacher, ThreadSource
from revu.diff.folding import DEFAULT_POLICY, hidden_span, resolve_fold_state
from revu.diff.models import (
    CommentRow,
    FoldedRow,
    FoldPolicy,
    FoldState,
    Hunk,
    LineKind,
    LineRow,
    UnifiedRow,
)
from revu.diff.word_diff import annotate_hunk


def build_unified_rows(
    hunks: Sequence[Hunk],
    threads: ThreadSource | None = None,
    fold_state: FoldState | None = None,
    *,
    policy: FoldPolicy | None = None,
) -> list[UnifiedRow]:
    """Flatten hunks into display rows with comments and fold placeholders.

    Each visible line yields one ``LineRow``; review threads follow the line
    carrying their anchor, and a folded hunk's hidden context span becomes one
    ``FoldedRow``. Threads anchored to lines that are absent or hidden are left
    out.
    """
    policy = policy or DEFAULT_POLICY
    state = resolve_fold_state(hunks, fold_state, policy)
    attacher = ThreadAttacher(threads)
    rows: list[UnifiedRow] = []

    for hunk_index, hunk in enumerate(hunks):
        hidden = hidden_span(hunk, hunk_index, state, policy)
        segments = annotate_hunk(hunk, policy.word_diff_ratio, policy.word_diff_max_cells)

        for position, line in enumerate(hunk.lines):
            if hidden is not None and position in hidden:
                if position == hidden.start:
                    rows.append(FoldedRow(hunk_index=hunk_index, folded_line_count=len(hidden)))
                continue

            rows.append(
                LineRow(
                    line=line,
                    line_number=line.display_line_number,
                    old_line_number=line.old_line_number,
                    new_line_number=line.new_line_number,
                    hunk_index=hunk_index,
                    word_diff_segments=segments.get(position),
                )
            )
            if line.kind is not LineKind.HEADER:
                rows.extend(CommentRow(thread) for thread in attacher.take(line))

    return rows
