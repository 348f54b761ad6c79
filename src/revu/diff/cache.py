"""Host-owned memo of built row sequences."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable, Sequence
from typing import Literal

from revu.diff.models import FoldPolicy, FoldState, SideBySideRow, UnifiedRow

Layout = Literal["unified", "split"]
RowCacheKey = tuple[Hashable, Layout, FoldState, FoldPolicy]

ROW_CACHE_MAX = 32


class RowCache:
    """Small LRU keyed by document identity, layout, fold state and policy.

    Rows are never patched in place: any change to the inputs produces a new
    key and a fresh build.
    """

    def __init__(self, max_entries: int = ROW_CACHE_MAX) -> None:
        self.max_entries = max(1, max_entries)
        self._entries: OrderedDict[RowCacheKey, tuple[UnifiedRow | SideBySideRow, ...]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get_or_build(
        self,
        key: RowCacheKey,
        build: Callable[[], Sequence[UnifiedRow] | Sequence[SideBySideRow]],
    ) -> tuple[UnifiedRow | SideBySideRow, ...]:
        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            self._entries.move_to_end(key)
            return cached
        self.misses += 1
        rows = tuple(build())
        self._entries[key] = rows
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        return rows

    def invalidate(self, document_key: Hashable) -> None:
        for key in [key for key in self._entries if key[0] == document_key]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
