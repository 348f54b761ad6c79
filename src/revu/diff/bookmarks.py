"""Vim-style line marks stored in single-letter registers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

CaptureMode = Literal["set", "jump"]

REGISTERS = "abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True, slots=True)
class DiffBookmark:
    register: str
    file: str
    line: int
    review_key: str


@dataclass(frozen=True, slots=True)
class BookmarkState:
    """Bookmarks ordered by register; at most one per register."""

    bookmarks: tuple[DiffBookmark, ...] = ()


def is_valid_register(register: str) -> bool:
    return len(register) == 1 and register in REGISTERS


def set_bookmark(state: BookmarkState, register: str, file: str, line: int, review_key: str) -> BookmarkState:
    """Store a mark, replacing whatever the register held before.

    An invalid register returns ``state`` itself.
    """
    if not is_valid_register(register):
        return state
    kept = [bookmark for bookmark in state.bookmarks if bookmark.register != register]
    kept.append(DiffBookmark(register, file, line, review_key))
    kept.sort(key=lambda bookmark: bookmark.register)
    return BookmarkState(tuple(kept))


def get_bookmark(state: BookmarkState, register: str) -> DiffBookmark | None:
    for bookmark in state.bookmarks:
        if bookmark.register == register:
            return bookmark
    return None


def remove_bookmark(state: BookmarkState, register: str) -> BookmarkState:
    if get_bookmark(state, register) is None:
        return state
    return BookmarkState(tuple(bookmark for bookmark in state.bookmarks if bookmark.register != register))


def list_bookmarks(state: BookmarkState) -> list[DiffBookmark]:
    return list(state.bookmarks)
