"""Collapse long unchanged stretches inside hunks."""

from __future__ import annotations

from typing import Sequence

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

DEFAULT_POLICY = FoldPolicy()


def longest_context_run(hunk: Hunk) -> tuple[int, int]:
    """Return ``(start, length)`` of the first longest run of context lines."""
    best_start, best_length = 0, 0
    run_start, run_length = 0, 0
    for index, line in enumerate(hunk.lines):
        if line.kind is LineKind.CONTEXT:
            if run_length == 0:
                run_start = index
            run_length += 1
            if run_length > best_length:
                best_start, best_length = run_start, run_length
        else:
            run_length = 0
    return best_start, best_length


def fold_span(hunk: Hunk, policy: FoldPolicy = DEFAULT_POLICY) -> range | None:
    """Line positions hidden when ``hunk`` is folded, or ``None`` if it never folds."""
    start, length = longest_context_run(hunk)
    if length <= policy.fold_threshold:
        return None
    margin = max(0, policy.context_margin)
    hidden = length - 2 * margin
    if hidden <= 0:
        return None
    return range(start + margin, start + margin + hidden)


def is_foldable(hunk: Hunk, policy: FoldPolicy = DEFAULT_POLICY) -> bool:
    return fold_span(hunk, policy) is not None


def default_fold_state(hunks: Sequence[Hunk], policy: FoldPolicy = DEFAULT_POLICY) -> FoldState:
    """Fold every hunk that has something to hide."""
    return FoldState(tuple(is_foldable(hunk, policy) for hunk in hunks))


def toggle_fold(hunk_index: int, fold_state: FoldState, hunk_count: int | None = None) -> FoldState:
    """Flip one hunk's flag; indices outside ``hunk_count`` leave the state untouched.

    Hunks past the end of ``fold_state`` still have their default flag, so the
    tuple is extended with it before the flip.
    """
    if hunk_index < 0 or (hunk_count is not None and hunk_index >= hunk_count):
        return fold_state
    flags = list(fold_state.folded)
    while len(flags) <= hunk_index:
        flags.append(fold_state.is_folded(len(flags)))
    flags[hunk_index] = not flags[hunk_index]
    return FoldState(tuple(flags))


def unfold_all(fold_state: FoldState, hunk_count: int = 0) -> FoldState:
    return FoldState((False,) * max(len(fold_state.folded), hunk_count))


def resolve_fold_state(
    hunks: Sequence[Hunk],
    fold_state: FoldState | None,
    policy: FoldPolicy = DEFAULT_POLICY,
) -> FoldState:
    if fold_state is None:
        return default_fold_state(hunks, policy)
    return fold_state


def hidden_span(
    hunk: Hunk,
    hunk_index: int,
    fold_state: FoldState,
    policy: FoldPolicy = DEFAULT_POLICY,
) -> range | None:
    """The span to replace with a placeholder right now, honouring ``fold_state``."""
    if not fold_state.is_folded(hunk_index):
        return None
    return fold_span(hunk, policy)


def get_hunk_index_for_row(rows: Sequence[UnifiedRow], index: int) -> int | None:
    """Hunk owning the row at ``index``; comment rows inherit the line above."""
    if not 0 <= index < len(rows):
        return None
    for position in range(index, -1, -1):
        row = rows[position]
        if isinstance(row, (LineRow, FoldedRow)):
            return row.hunk_index
        if not isinstance(row, CommentRow):
            return None
    return None
