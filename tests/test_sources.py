from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from revu.diff.models import DiffLine, LineKind, Side
from revu.runtime_logging import configure_runtime_logging
from revu.sources.bundle import load_review
from revu.sources.patch import PatchParseError, parse_patch

PATCH = """\
diff --git a/app.py b/app.py
index 1111111..2222222 100644
--- a/app.py
+++ b/app.py
@@ -1,4 +1,4 @@ def main
 import os
-x = 1
+x = 2
 print(x)
 done
@@ -10,2 +10,3 @@
 a
+b
 c
"""


class ParsePatchTests(unittest.TestCase):
    def test_numbers_lines_from_hunk_headers(self) -> None:
        hunks = parse_patch(PATCH)
        self.assertEqual(len(hunks), 2)
        self.assertEqual(
            hunks[0].lines,
            (
                DiffLine(LineKind.HEADER, "@@ -1,4 +1,4 @@ def main"),
                DiffLine(LineKind.CONTEXT, "import os", 1, 1),
                DiffLine(LineKind.DEL, "x = 1", 2, None),
                DiffLine(LineKind.ADD, "x = 2", None, 2),
                DiffLine(LineKind.CONTEXT, "print(x)", 3, 3),
                DiffLine(LineKind.CONTEXT, "done", 4, 4),
            ),
        )
        self.assertEqual(
            hunks[1].lines[1:],
            (
                DiffLine(LineKind.CONTEXT, "a", 10, 10),
                DiffLine(LineKind.ADD, "b", None, 11),
                DiffLine(LineKind.CONTEXT, "c", 11, 12),
            ),
        )
        self.assertEqual(hunks[1].header, "@@ -10,2 +10,3 @@")

    def test_no_newline_marker_is_ignored(self) -> None:
        hunks = parse_patch("@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b\n")
        self.assertEqual(
            hunks[0].lines[1:],
            (DiffLine(LineKind.DEL, "a", 1, None), DiffLine(LineKind.ADD, "b", None, 1)),
        )

    def test_following_file_headers_are_not_lines(self) -> None:
        text = PATCH + "diff --git a/other.py b/other.py\n--- a/other.py\n+++ b/other.py\n@@ -5 +5 @@\n-q\n+r\n"
        hunks = parse_patch(text)
        self.assertEqual(len(hunks), 3)
        self.assertEqual(len(hunks[1].lines), 4)
        self.assertEqual([line.content for line in hunks[2].lines[1:]], ["q", "r"])

    def test_malformed_header(self) -> None:
        with self.assertRaises(PatchParseError):
            parse_patch("@@ bogus @@\n+x\n")

    def test_text_without_hunks(self) -> None:
        self.assertEqual(parse_patch("just some text\n"), [])
        self.assertEqual(parse_patch(""), [])


class LoadReviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.log_file = self.root / "runtime.jsonl"
        configure_runtime_logging(level="info", log_file=self.log_file)

    def tearDown(self) -> None:
        configure_runtime_logging(level="off")
        self._tmp.cleanup()

    def events(self) -> list[dict]:
        lines = self.log_file.read_text(encoding="utf-8").splitlines()
        return [json.loads(line) for line in lines]

    def test_bundle_with_threads_and_blame(self) -> None:
        bundle = {
            "path": "src/app.py",
            "ref": "abc123",
            "patch": PATCH,
            "threads": [
                {
                    "id": "t1",
                    "anchors": [{"side": "RIGHT", "line": 2}],
                    "comments": [{"author": "ana", "body": "nit"}],
                },
                {"id": "t2", "anchors": [{"side": "LEFT", "line": 99}]},
            ],
            "blame": [
                {"line": 2, "author": "ana", "date": "2025-01-01T00:00:00Z", "commit_sha": "abc123"},
            ],
        }
        path = self.root / "review.json"
        path.write_text(json.dumps(bundle), encoding="utf-8")

        document = load_review(path)

        self.assertEqual(document.path, "src/app.py")
        self.assertEqual(len(document.hunks), 2)
        self.assertEqual([thread.id for thread in document.threads], ["t1", "t2"])
        self.assertEqual(document.threads[0].anchors, frozenset({(Side.RIGHT, 2)}))
        self.assertEqual(document.threads[0].comments[0].body, "nit")
        assert document.blame is not None
        self.assertEqual(document.blame[2].author, "ana")
        self.assertTrue(document.key.startswith("src/app.py@abc123:"))

        events = self.events()
        orphans = [item for item in events if item["event"] == "bundle.orphan_thread"]
        self.assertEqual([item["thread_id"] for item in orphans], ["t2"])
        self.assertTrue(any(item["event"] == "bundle.loaded" for item in events))

    def test_plain_patch_file(self) -> None:
        path = self.root / "change.diff"
        path.write_text(PATCH, encoding="utf-8")

        document = load_review(path)

        self.assertEqual(document.path, "change.diff")
        self.assertEqual(document.threads, [])
        self.assertIsNone(document.blame)
        self.assertTrue(document.key.startswith("change.diff@worktree:"))

    def test_invalid_bundle(self) -> None:
        path = self.root / "review.json"
        path.write_text(
            json.dumps({"path": "a.py", "patch": PATCH, "threads": [{"id": "t", "anchors": []}]}),
            encoding="utf-8",
        )
        with self.assertRaises(ValidationError):
            load_review(path)

        path.write_text(
            json.dumps(
                {"path": "a.py", "patch": PATCH, "threads": [{"id": "t", "anchors": [{"side": "MIDDLE", "line": 1}]}]}
            ),
            encoding="utf-8",
        )
        with self.assertRaises(ValidationError):
            load_review(path)


if __name__ == "__main__":
    unittest.main()
