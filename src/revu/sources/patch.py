"""Turn unified-diff patch text into hunks."""

from __future__ import annotations

import re

from revu.diff.models import DiffLine, Hunk, LineKind

_HUNK_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class PatchParseError(ValueError):
    pass


def parse_patch(text: str) -> list[Hunk]:
    """Parse the hunks of a single-file unified diff.

    File headers before the first ``@@`` line are skipped, ``\\ No newline``
    markers are ignored, and every hunk starts with its header line.
    """
    hunks: list[Hunk] = []
    current: list[DiffLine] | None = None
    old_no = new_no = 0
    old_left = new_left = 0

    for number, raw_line in enumerate(text.splitlines(), start=1):
        if raw_line.startswith("@@"):
            match = _HUNK_RE.match(raw_line)
            if match is None:
                raise PatchParseError(f"line {number}: malformed hunk header {raw_line!r}")
            if current is not None:
                hunks.append(Hunk(tuple(current)))
            old_no = int(match.group(1))
            new_no = int(match.group(3))
            old_left = int(match.group(2) or "1")
            new_left = int(match.group(4) or "1")
            current = [DiffLine(LineKind.HEADER, raw_line)]
            continue

        if current is None:
            continue
        if raw_line.startswith("\\"):
            continue

        marker, content = raw_line[:1], raw_line[1:]
        if marker == "+":
            current.append(DiffLine(LineKind.ADD, content, new_line_number=new_no))
            new_no += 1
            new_left -= 1
        elif marker == "-":
            current.append(DiffLine(LineKind.DEL, content, old_line_number=old_no))
            old_no += 1
            old_left -= 1
        elif marker in (" ", ""):
            current.append(DiffLine(LineKind.CONTEXT, content, old_no, new_no))
            old_no += 1
            new_no += 1
            old_left -= 1
            new_left -= 1
        else:
            # Anything else ("diff --git", "index ...") ends the current file.
            hunks.append(Hunk(tuple(current)))
            current = None
            continue

        if old_left <= 0 and new_left <= 0:
            hunks.append(Hunk(tuple(current)))
            current = None

    if current is not None:
        hunks.append(Hunk(tuple(current)))
    return hunks
