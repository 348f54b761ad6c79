from __future__ import annotations

import time
import unittest

from revu.diff.models import SegmentKind, WordDiffSegment
from revu.diff.text import expand_tabs
from revu.diff.word_diff import (
    compute_word_diff,
    expand_segment_tabs,
    is_comparable,
    pair_word_diffs,
    slice_word_diff_segments,
    tokenize,
)

U = SegmentKind.UNCHANGED
C = SegmentKind.CHANGED


def joined(segments) -> str:  # noqa: ANN001
    return "".join(segment.text for segment in segments)


def text_of(segments, kind: SegmentKind) -> str:  # noqa: ANN001
    return "".join(segment.text for segment in segments if segment.kind is kind)


class TokenizeTests(unittest.TestCase):
    def test_splits_words_whitespace_and_punctuation(self) -> None:
        self.assertEqual(tokenize("hello world"), ["hello", " ", "world"])
        self.assertEqual(tokenize("foo.bar(baz)"), ["foo", ".", "bar", "(", "baz", ")"])
        self.assertEqual(tokenize("a=>b"), ["a", "=", ">", "b"])

    def test_keeps_whitespace_runs_together(self) -> None:
        self.assertEqual(tokenize("  const x = 1"), ["  ", "const", " ", "x", " ", "=", " ", "1"])
        self.assertEqual(tokenize("\t  foo"), ["\t  ", "foo"])
        self.assertEqual(tokenize("   "), ["   "])
        self.assertEqual(tokenize(""), [])


class ComputeWordDiffTests(unittest.TestCase):
    def test_single_changed_word(self) -> None:
        diff = compute_word_diff("const x = 1", "const x = 2")
        self.assertEqual(
            diff.old_segments,
            (WordDiffSegment(U, "const x = "), WordDiffSegment(C, "1")),
        )
        self.assertEqual(
            diff.new_segments,
            (WordDiffSegment(U, "const x = "), WordDiffSegment(C, "2")),
        )
        self.assertTrue(diff.is_partial)

    def test_completely_different_lines(self) -> None:
        diff = compute_word_diff("hello", "world")
        self.assertEqual(diff.old_segments, (WordDiffSegment(C, "hello"),))
        self.assertEqual(diff.new_segments, (WordDiffSegment(C, "world"),))
        self.assertFalse(diff.is_partial)

    def test_empty_sides(self) -> None:
        diff = compute_word_diff("", "new content")
        self.assertEqual(diff.old_segments, ())
        self.assertEqual(diff.new_segments, (WordDiffSegment(C, "new content"),))
        self.assertEqual(compute_word_diff("", "").old_segments, ())

    def test_indentation_change(self) -> None:
        diff = compute_word_diff("  return x", "    return x")
        self.assertEqual(diff.old_segments[0], WordDiffSegment(C, "  "))
        self.assertEqual(diff.new_segments[0], WordDiffSegment(C, "    "))
        self.assertIn("return", text_of(diff.old_segments, U))

    def test_realistic_edit(self) -> None:
        diff = compute_word_diff(
            "  const result = await fetchData(url)",
            "  const response = await fetchData(apiUrl)",
        )
        self.assertIn("result", text_of(diff.old_segments, C))
        self.assertIn("url", text_of(diff.old_segments, C))
        self.assertIn("response", text_of(diff.new_segments, C))
        self.assertIn("apiUrl", text_of(diff.new_segments, C))
        for word in ("const", "await", "fetchData"):
            self.assertIn(word, text_of(diff.old_segments, U))

    def test_appended_tokens(self) -> None:
        diff = compute_word_diff("foo(x)", "foo(x, y)")
        self.assertEqual(text_of(diff.new_segments, C), ", y")
        self.assertEqual(text_of(diff.old_segments, C), "")

    def test_segments_reconstruct_and_alternate(self) -> None:
        pairs = [
            ("const x = foo(bar)", "let y = baz(qux)"),
            ("  if (a && b) {", "  if (a || b) {"),
            ('import { foo } from "bar"', 'import { baz } from "qux"'),
            ("a.b(c)", "a.d(e)"),
        ]
        for old_line, new_line in pairs:
            diff = compute_word_diff(old_line, new_line)
            with self.subTest(old=old_line, new=new_line):
                self.assertEqual(joined(diff.old_segments), old_line)
                self.assertEqual(joined(diff.new_segments), new_line)
                for segments in (diff.old_segments, diff.new_segments):
                    self.assertTrue(all(segment.text for segment in segments))
                    for before, after in zip(segments, segments[1:]):
                        self.assertIsNot(before.kind, after.kind)


class LongLineTests(unittest.TestCase):
    def test_long_line_with_single_change_is_fast(self) -> None:
        common = "const longVariableName = someFunction(argument1, argument2, argument3)"
        old_line = f"{common} // old comment"
        new_line = f"{common} // new comment"

        start = time.perf_counter()
        diff = compute_word_diff(old_line, new_line)
        elapsed = time.perf_counter() - start

        self.assertLess(elapsed, 0.1)
        self.assertEqual(joined(diff.old_segments), old_line)
        self.assertEqual(joined(diff.new_segments), new_line)

    def test_huge_rewritten_middle_is_bounded(self) -> None:
        old_line = "start " + " ".join(f"a{i}" for i in range(3000)) + " end"
        new_line = "start " + " ".join(f"b{i}" for i in range(3000)) + " end"

        start = time.perf_counter()
        diff = compute_word_diff(old_line, new_line)
        elapsed = time.perf_counter() - start

        self.assertLess(elapsed, 1.0)
        self.assertEqual([segment.kind for segment in diff.old_segments], [U, C, U])
        self.assertEqual(diff.old_segments[0].text, "start ")
        self.assertEqual(diff.old_segments[-1].text, " end")
        self.assertEqual(joined(diff.new_segments), new_line)

    def test_cell_limit_marks_middle_changed(self) -> None:
        aligned = compute_word_diff("const x = 1", "const y = 2")
        self.assertEqual(text_of(aligned.new_segments, U), "const  = ")

        capped = compute_word_diff("const x = 1", "const y = 2", max_cells=0)
        self.assertEqual(capped.new_segments, (WordDiffSegment(U, "const "), WordDiffSegment(C, "y = 2")))


class PairingTests(unittest.TestCase):
    def test_comparable_runs(self) -> None:
        self.assertTrue(is_comparable(2, 3))
        self.assertTrue(is_comparable(2, 4))
        self.assertFalse(is_comparable(1, 3))
        self.assertFalse(is_comparable(0, 1))
        self.assertTrue(is_comparable(1, 3, ratio=3.0))

    def test_pairs_positionally_and_skips_wholesale_rewrites(self) -> None:
        diffs = pair_word_diffs(["x = 1", "abc"], ["x = 2", "xyz", "extra"])
        self.assertEqual(len(diffs), 2)
        self.assertIsNotNone(diffs[0])
        self.assertIsNone(diffs[1])

    def test_incomparable_block_gets_nothing(self) -> None:
        self.assertEqual(pair_word_diffs(["x = 1"], ["x = 2", "y", "z"]), [])


class SliceSegmentsTests(unittest.TestCase):
    segments = (
        WordDiffSegment(U, "const "),
        WordDiffSegment(C, "foo"),
        WordDiffSegment(U, " = 1"),
    )

    def test_trims_edges_and_keeps_kinds(self) -> None:
        self.assertEqual(
            slice_word_diff_segments(self.segments, 4, 5),
            (WordDiffSegment(U, "t "), WordDiffSegment(C, "foo")),
        )
        self.assertEqual(slice_word_diff_segments(self.segments, 6, 3), (WordDiffSegment(C, "foo"),))
        self.assertEqual(slice_word_diff_segments(self.segments, 40, 10), ())
        self.assertEqual(slice_word_diff_segments(self.segments, 0, 0), ())

    def test_slice_matches_string_slice_everywhere(self) -> None:
        text = joined(self.segments)
        for offset in range(len(text) + 3):
            for width in range(len(text) + 3):
                sliced = slice_word_diff_segments(self.segments, offset, width)
                with self.subTest(offset=offset, width=width):
                    self.assertEqual(joined(sliced), text[offset : offset + width])
                    for before, after in zip(sliced, sliced[1:]):
                        self.assertIsNot(before.kind, after.kind)

    def test_multibyte_characters_survive(self) -> None:
        segments = (
            WordDiffSegment(U, "héllo "),
            WordDiffSegment(C, "世界"),
            WordDiffSegment(U, "!"),
        )
        self.assertEqual(
            slice_word_diff_segments(segments, 5, 3),
            (WordDiffSegment(U, " "), WordDiffSegment(C, "世界")),
        )


class TabExpansionTests(unittest.TestCase):
    def test_expand_tabs_uses_tab_stops(self) -> None:
        self.assertEqual(expand_tabs("a\tb"), "a   b")
        self.assertEqual(expand_tabs("\t"), "    ")
        self.assertEqual(expand_tabs("abcd\te"), "abcd    e")
        self.assertEqual(expand_tabs("a\tb", tab_width=2), "a b")
        self.assertEqual(expand_tabs("plain"), "plain")
        self.assertEqual(expand_tabs("a\tb", tab_width=0), "a b")

    def test_segment_tabs_follow_the_running_column(self) -> None:
        expanded = expand_segment_tabs((WordDiffSegment(U, "a\t"), WordDiffSegment(C, "b\tc")))
        self.assertEqual(expanded, (WordDiffSegment(U, "a   "), WordDiffSegment(C, "b   c")))
        self.assertEqual(joined(expanded), expand_tabs("a\tb\tc"))


if __name__ == "__main__":
    unittest.main()
