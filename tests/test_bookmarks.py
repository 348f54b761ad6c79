from __future__ import annotations

import unittest

from revu.diff.bookmarks import (
    BookmarkState,
    DiffBookmark,
    get_bookmark,
    is_valid_register,
    list_bookmarks,
    remove_bookmark,
    set_bookmark,
)


class RegisterTests(unittest.TestCase):
    def test_accepts_lowercase_letters(self) -> None:
        for register in ("a", "b", "m", "z"):
            with self.subTest(register=register):
                self.assertTrue(is_valid_register(register))

    def test_rejects_everything_else(self) -> None:
        for register in ("A", "Z", "0", "9", "ab", "", "@", " ", "-", "_", "é"):
            with self.subTest(register=register):
                self.assertFalse(is_valid_register(register))


class SetBookmarkTests(unittest.TestCase):
    def test_sets_a_bookmark(self) -> None:
        state = set_bookmark(BookmarkState(), "a", "src/index.ts", 42, "github:owner/repo#1")
        self.assertEqual(
            get_bookmark(state, "a"),
            DiffBookmark(register="a", file="src/index.ts", line=42, review_key="github:owner/repo#1"),
        )

    def test_registers_are_independent(self) -> None:
        state = BookmarkState()
        state = set_bookmark(state, "a", "file1.ts", 10, "pr1")
        state = set_bookmark(state, "b", "file2.ts", 20, "pr1")
        state = set_bookmark(state, "c", "file3.ts", 30, "pr1")
        self.assertEqual([bookmark.file for bookmark in list_bookmarks(state)], ["file1.ts", "file2.ts", "file3.ts"])

    def test_overrides_the_same_register(self) -> None:
        state = set_bookmark(BookmarkState(), "a", "file1.ts", 10, "pr1")
        state = set_bookmark(state, "a", "file2.ts", 99, "pr1")
        self.assertEqual(list_bookmarks(state), [DiffBookmark("a", "file2.ts", 99, "pr1")])

    def test_invalid_register_returns_same_state(self) -> None:
        state = BookmarkState()
        for register in ("1", "", "A"):
            with self.subTest(register=register):
                self.assertIs(set_bookmark(state, register, "file.ts", 10, "pr1"), state)


class GetAndRemoveTests(unittest.TestCase):
    def test_missing_or_invalid_register_is_none(self) -> None:
        state = BookmarkState()
        for register in ("a", "z", "!", ""):
            with self.subTest(register=register):
                self.assertIsNone(get_bookmark(state, register))

    def test_removes_only_the_named_register(self) -> None:
        state = set_bookmark(BookmarkState(), "a", "file1.ts", 10, "pr1")
        state = set_bookmark(state, "b", "file2.ts", 20, "pr1")
        state = remove_bookmark(state, "a")
        self.assertIsNone(get_bookmark(state, "a"))
        self.assertEqual(get_bookmark(state, "b"), DiffBookmark("b", "file2.ts", 20, "pr1"))

    def test_removing_absent_or_invalid_register_returns_same_state(self) -> None:
        empty = BookmarkState()
        self.assertIs(remove_bookmark(empty, "a"), empty)
        state = set_bookmark(empty, "a", "file.ts", 10, "pr1")
        self.assertIs(remove_bookmark(state, "1"), state)


class ListBookmarksTests(unittest.TestCase):
    def test_empty_state_lists_nothing(self) -> None:
        self.assertEqual(list_bookmarks(BookmarkState()), [])

    def test_sorted_by_register(self) -> None:
        state = BookmarkState()
        state = set_bookmark(state, "c", "file3.ts", 30, "pr1")
        state = set_bookmark(state, "a", "file1.ts", 10, "pr1")
        state = set_bookmark(state, "b", "file2.ts", 20, "pr1")
        self.assertEqual([bookmark.register for bookmark in list_bookmarks(state)], ["a", "b", "c"])

    def test_reflects_removals(self) -> None:
        state = set_bookmark(BookmarkState(), "a", "file1.ts", 10, "pr1")
        state = set_bookmark(state, "b", "file2.ts", 20, "pr1")
        state = remove_bookmark(state, "a")
        self.assertEqual([bookmark.register for bookmark in list_bookmarks(state)], ["b"])

    def test_returns_a_fresh_list(self) -> None:
        state = set_bookmark(BookmarkState(), "a", "file.ts", 10, "pr1")
        first, second = list_bookmarks(state), list_bookmarks(state)
        self.assertEqual(first, second)
        self.assertIsNot(first, second)


class ImmutabilityTests(unittest.TestCase):
    def test_set_and_remove_leave_the_input_untouched(self) -> None:
        original = BookmarkState()
        marked = set_bookmark(original, "a", "file.ts", 10, "pr1")
        self.assertIsNot(marked, original)
        self.assertEqual(original.bookmarks, ())

        cleared = remove_bookmark(marked, "a")
        self.assertIsNot(cleared, marked)
        self.assertEqual(get_bookmark(marked, "a"), DiffBookmark("a", "file.ts", 10, "pr1"))


if __name__ == "__main__":
    unittest.main()
