"""Load a review bundle (patch, threads, blame) from disk."""

from __future__ import annotations

import json
from dataclasses import dataclass
from hashlib import sha1
from pathlib import Path

from pydantic import BaseModel, Field

from revu.diff.blame import blame_by_line
from revu.diff.comments import orphan_threads
from revu.diff.models import BlameInfo, CommentThread, Hunk, ReviewComment, Side
from revu.runtime_logging import get_runtime_logger
from revu.sources.patch import parse_patch


class AnchorPayload(BaseModel):
    side: Side
    line: int = Field(ge=1)


class CommentPayload(BaseModel):
    author: str
    body: str
    created_at: str = ""


class ThreadPayload(BaseModel):
    id: str
    is_resolved: bool = False
    anchors: list[AnchorPayload] = Field(min_length=1)
    comments: list[CommentPayload] = Field(default_factory=list)

    def to_thread(self) -> CommentThread:
        return CommentThread(
            id=self.id,
            anchors=frozenset((anchor.side, anchor.line) for anchor in self.anchors),
            is_resolved=self.is_resolved,
            comments=tuple(
                ReviewComment(author=item.author, body=item.body, created_at=item.created_at)
                for item in self.comments
            ),
        )


class ReviewBundle(BaseModel):
    path: str
    ref: str | None = None
    patch: str
    threads: list[ThreadPayload] = Field(default_factory=list)
    blame: list[BlameInfo] | None = None


@dataclass(slots=True)
class ReviewDocument:
    path: str
    hunks: list[Hunk]
    threads: list[CommentThread]
    blame: dict[int, BlameInfo] | None
    key: str


def _document_key(path: str, ref: str | None, patch: str) -> str:
    digest = sha1(patch.encode("utf-8"), usedforsecurity=False).hexdigest()[:12]
    return f"{path}@{ref or 'worktree'}:{digest}"


def document_from_bundle(bundle: ReviewBundle) -> ReviewDocument:
    logger = get_runtime_logger()
    hunks = parse_patch(bundle.patch)
    threads = [payload.to_thread() for payload in bundle.threads]
    for thread in orphan_threads(hunks, threads):
        logger.warning(
            "bundle.orphan_thread",
            path=bundle.path,
            thread_id=thread.id,
            anchors=sorted(f"{side.value}:{line}" for side, line in thread.anchors),
        )
    blame = blame_by_line(bundle.blame) if bundle.blame is not None else None
    return ReviewDocument(
        path=bundle.path,
        hunks=hunks,
        threads=threads,
        blame=blame,
        key=_document_key(bundle.path, bundle.ref, bundle.patch),
    )


def load_review(path: Path) -> ReviewDocument:
    """Read a ``.json`` bundle or a plain patch file.

    Raises ``pydantic.ValidationError``/``json.JSONDecodeError`` for bad
    bundles and ``PatchParseError`` for malformed patches.
    """
    logger = get_runtime_logger()
    raw = path.read_text(encoding="utf-8", errors="replace")
    if path.suffix == ".json":
        bundle = ReviewBundle.model_validate(json.loads(raw))
    else:
        bundle = ReviewBundle(path=path.name, patch=raw)
    document = document_from_bundle(bundle)
    logger.info(
        "bundle.loaded",
        source=str(path),
        path=document.path,
        hunks=len(document.hunks),
        threads=len(document.threads),
        has_blame=document.blame is not None,
    )
    return document
