"""In-memory review comments kept for the lifetime of one server process."""

from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock

import structlog

from compeek.models import Comment

logger = structlog.get_logger(__name__)


class CommentStore:
    """Ordered comment list guarded by a lock; nothing is persisted."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._comments: list[Comment] = []
        self._next_id = 1

    def _now(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def add(self, filename: str, body: str, line: int | None = None) -> Comment:
        with self._lock:
            comment = Comment(
                id=self._next_id,
                filename=filename,
                line=line,
                body=body,
                created_at=self._now(),
            )
            self._next_id += 1
            self._comments.append(comment)
        logger.info("Comment added", comment_id=comment.id, filename=filename, line=line)
        return comment

    def list_comments(self) -> list[Comment]:
        with self._lock:
            return list(self._comments)

    def clear(self) -> None:
        with self._lock:
            count = len(self._comments)
            self._comments.clear()
        logger.info("Comments cleared", count=count)

    def format_output(self) -> str:
        """Render comments as plain text for the terminal, one block per comment.

        Each block starts with ``<filename>:<line>`` (or just the filename for
        file-level comments) followed by the comment body.
        """
        blocks = []
        for comment in self.list_comments():
            location = comment.filename
            if comment.line is not None:
                location = f"{location}:{comment.line}"
            blocks.append(f"{location}\n{comment.body.rstrip()}")
        return "\n\n".join(blocks)
