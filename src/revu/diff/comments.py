"""Side-keyed lookup of review threads for diff lines."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from revu.diff.models import CommentThread, DiffLine, Hunk, LineKind, Side

AnchorKey = tuple[Side, int]
ThreadSource = Iterable[CommentThread] | Mapping[AnchorKey, CommentThread | Sequence[CommentThread]]


def comment_keys(line: DiffLine) -> list[AnchorKey]:
    """Anchor keys a line can carry, natural side first.

    Context lines exist on both sides, so they are checked on the right and
    then on the left.
    """
    keys: list[AnchorKey] = []
    if line.kind is LineKind.DEL:
        if line.old_line_number is not None:
            keys.append((Side.LEFT, line.old_line_number))
    elif line.kind is LineKind.ADD:
        if line.new_line_number is not None:
            keys.append((Side.RIGHT, line.new_line_number))
    elif line.kind is LineKind.CONTEXT:
        if line.new_line_number is not None:
            keys.append((Side.RIGHT, line.new_line_number))
        if line.old_line_number is not None:
            keys.append((Side.LEFT, line.old_line_number))
    return keys


def index_threads(threads: ThreadSource | None) -> dict[AnchorKey, list[CommentThread]]:
    index: dict[AnchorKey, list[CommentThread]] = {}
    if threads is None:
        return index
    if isinstance(threads, Mapping):
        for key, value in threads.items():
            bucket = index.setdefault(key, [])
            if isinstance(value, CommentThread):
                bucket.append(value)
            else:
                bucket.extend(value)
        return index
    for thread in threads:
        for anchor in sorted(thread.anchors, key=lambda item: (item[0].value, item[1])):
            index.setdefault(anchor, []).append(thread)
    return index


class ThreadAttacher:
    """Hands out each thread once, at the first line that carries one of its anchors."""

    def __init__(self, threads: ThreadSource | None) -> None:
        self._index = index_threads(threads)
        self._emitted: set[str] = set()

    def take(self, line: DiffLine) -> list[CommentThread]:
        if not self._index:
            return []
        attached: list[CommentThread] = []
        for key in comment_keys(line):
            for thread in self._index.get(key, ()):
                if thread.id in self._emitted:
                    continue
                self._emitted.add(thread.id)
                attached.append(thread)
        return attached

    def orphans(self) -> list[CommentThread]:
        """Threads never attached to a visible line."""
        seen: set[str] = set()
        missing: list[CommentThread] = []
        for bucket in self._index.values():
            for thread in bucket:
                if thread.id in self._emitted or thread.id in seen:
                    continue
                seen.add(thread.id)
                missing.append(thread)
        return missing


def orphan_threads(hunks: Iterable[Hunk], threads: ThreadSource | None) -> list[CommentThread]:
    """Threads whose anchors match no line of any hunk."""
    attacher = ThreadAttacher(threads)
    for hunk in hunks:
        for line in hunk.lines:
            attacher.take(line)
    return attacher.orphans()
