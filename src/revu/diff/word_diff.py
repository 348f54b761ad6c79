"""Intra-line highlighting for paired deletions and additions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from revu.diff.models import Hunk, LineKind, SegmentKind, WordDiffSegment
from revu.diff.text import DEFAULT_TAB_WIDTH

DEFAULT_WORD_DIFF_RATIO = 2.0
# Largest token grid aligned with LCS; bigger middles are marked changed whole.
DEFAULT_WORD_DIFF_MAX_CELLS = 40_000

_TOKEN_RE = re.compile(r"\s+|\w+|[^\w\s]")


@dataclass(frozen=True, slots=True)
class WordDiff:
    old_segments: tuple[WordDiffSegment, ...]
    new_segments: tuple[WordDiffSegment, ...]

    @property
    def is_partial(self) -> bool:
        """True when the pair shares some text and also differs somewhere."""
        kinds = {segment.kind for segment in self.old_segments}
        return SegmentKind.UNCHANGED in kinds and SegmentKind.CHANGED in kinds


def tokenize(text: str) -> list[str]:
    """Split into whitespace runs, word runs and single punctuation marks."""
    return _TOKEN_RE.findall(text)


def is_comparable(del_count: int, add_count: int, ratio: float = DEFAULT_WORD_DIFF_RATIO) -> bool:
    """Whether a deletion run and an addition run look like an edit."""
    if del_count <= 0 or add_count <= 0:
        return False
    shorter, longer = sorted((del_count, add_count))
    return longer <= shorter * ratio


def _lcs_pairs(old: Sequence[str], new: Sequence[str]) -> list[tuple[int, int]]:
    rows, cols = len(old), len(new)
    table = [[0] * (cols + 1) for _ in range(rows + 1)]
    for i in range(rows - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(cols - 1, -1, -1):
            if old[i] == new[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    pairs: list[tuple[int, int]] = []
    i = j = 0
    while i < rows and j < cols:
        if old[i] == new[j]:
            pairs.append((i, j))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs


def _segments(tokens: Sequence[str], matched: set[int]) -> tuple[WordDiffSegment, ...]:
    merged: list[WordDiffSegment] = []
    for index, token in enumerate(tokens):
        kind = SegmentKind.UNCHANGED if index in matched else SegmentKind.CHANGED
        if merged and merged[-1].kind is kind:
            merged[-1] = WordDiffSegment(kind, merged[-1].text + token)
        else:
            merged.append(WordDiffSegment(kind, token))
    return tuple(merged)


def compute_word_diff(
    old_line: str,
    new_line: str,
    max_cells: int = DEFAULT_WORD_DIFF_MAX_CELLS,
) -> WordDiff:
    """Align the token streams of two lines with a longest common subsequence.

    Aligned tokens become ``UNCHANGED`` segments, everything else ``CHANGED``.
    Adjacent segments of the same kind are merged, and each side's segments
    concatenate back to its input line.

    Only the tokens between the common prefix and suffix are aligned. When
    that middle would need more than ``max_cells`` table cells, it is marked
    ``CHANGED`` as a whole so the cost stays bounded on very long lines.
    """
    old_tokens = tokenize(old_line)
    new_tokens = tokenize(new_line)

    # Common prefix/suffix keep the quadratic table small for long lines.
    prefix = 0
    limit = min(len(old_tokens), len(new_tokens))
    while prefix < limit and old_tokens[prefix] == new_tokens[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old_tokens[-1 - suffix] == new_tokens[-1 - suffix]
    ):
        suffix += 1

    old_mid = old_tokens[prefix : len(old_tokens) - suffix]
    new_mid = new_tokens[prefix : len(new_tokens) - suffix]

    old_matched = set(range(prefix))
    new_matched = set(range(prefix))
    if len(old_mid) * len(new_mid) <= max_cells:
        aligned = _lcs_pairs(old_mid, new_mid)
    else:
        aligned = []
    for i, j in aligned:
        old_matched.add(prefix + i)
        new_matched.add(prefix + j)
    old_matched.update(range(len(old_tokens) - suffix, len(old_tokens)))
    new_matched.update(range(len(new_tokens) - suffix, len(new_tokens)))

    return WordDiff(
        old_segments=_segments(old_tokens, old_matched),
        new_segments=_segments(new_tokens, new_matched),
    )


def pair_word_diffs(
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    ratio: float = DEFAULT_WORD_DIFF_RATIO,
    max_cells: int = DEFAULT_WORD_DIFF_MAX_CELLS,
) -> list[WordDiff | None]:
    """Word diffs for the positional pairs of a change block.

    Entry ``i`` belongs to ``old_lines[i]``/``new_lines[i]``; it is ``None``
    when the pair has nothing worth highlighting. The whole list is empty when
    the two runs are not comparable.
    """
    if not is_comparable(len(old_lines), len(new_lines), ratio):
        return []
    result: list[WordDiff | None] = []
    for old_line, new_line in zip(old_lines, new_lines):
        diff = compute_word_diff(old_line, new_line, max_cells)
        result.append(diff if diff.is_partial else None)
    return result


def slice_word_diff_segments(
    segments: Sequence[WordDiffSegment],
    offset: int,
    width: int,
) -> tuple[WordDiffSegment, ...]:
    """Trim segments to the columns ``[offset, offset + width)``.

    Segment kinds are preserved and empty pieces are dropped, so the result
    concatenates to exactly ``text[offset:offset + width]``.
    """
    start = max(0, offset)
    end = start + max(0, width)
    result: list[WordDiffSegment] = []
    pos = 0
    for segment in segments:
        seg_end = pos + len(segment.text)
        if seg_end <= start:
            pos = seg_end
            continue
        if pos >= end:
            break
        text = segment.text[max(0, start - pos) : min(len(segment.text), end - pos)]
        if text:
            result.append(WordDiffSegment(segment.kind, text))
        pos = seg_end
    return tuple(result)


def expand_segment_tabs(
    segments: Sequence[WordDiffSegment],
    tab_width: int = DEFAULT_TAB_WIDTH,
) -> tuple[WordDiffSegment, ...]:
    """Expand tabs across segment boundaries using the line's running column."""
    width = max(1, tab_width)
    result: list[WordDiffSegment] = []
    col = 0
    for segment in segments:
        parts: list[str] = []
        for char in segment.text:
            if char == "\t":
                spaces = width - (col % width)
                parts.append(" " * spaces)
                col += spaces
            else:
                parts.append(char)
                col += 1
        result.append(WordDiffSegment(segment.kind, "".join(parts)))
    return tuple(result)


@dataclass(frozen=True, slots=True)
class ChangeBlock:
    """Positions of a deletion run and the addition run right after it."""

    deletions: tuple[int, ...]
    additions: tuple[int, ...]


def change_blocks(hunk: Hunk) -> list[ChangeBlock]:
    blocks: list[ChangeBlock] = []
    lines = hunk.lines
    index = 0
    while index < len(lines):
        if not lines[index].is_change:
            index += 1
            continue
        deletions: list[int] = []
        while index < len(lines) and lines[index].kind is LineKind.DEL:
            deletions.append(index)
            index += 1
        additions: list[int] = []
        while index < len(lines) and lines[index].kind is LineKind.ADD:
            additions.append(index)
            index += 1
        blocks.append(ChangeBlock(tuple(deletions), tuple(additions)))
    return blocks


def annotate_hunk(
    hunk: Hunk,
    ratio: float = DEFAULT_WORD_DIFF_RATIO,
    max_cells: int = DEFAULT_WORD_DIFF_MAX_CELLS,
) -> dict[int, tuple[WordDiffSegment, ...]]:
    """Word-diff segments keyed by line position inside ``hunk``."""
    segments: dict[int, tuple[WordDiffSegment, ...]] = {}
    for block in change_blocks(hunk):
        diffs = pair_word_diffs(
            [hunk.lines[pos].content for pos in block.deletions],
            [hunk.lines[pos].content for pos in block.additions],
            ratio,
            max_cells,
        )
        for old_pos, new_pos, diff in zip(block.deletions, block.additions, diffs):
            if diff is None:
                continue
            segments[old_pos] = diff.old_segments
            segments[new_pos] = diff.new_segments
    return segments
