"""Pydantic models for parsed diffs and API payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field, model_serializer
from pydantic.alias_generators import to_camel


class FileStatus(str, Enum):
    """How a file changed between the two sides of a diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


class LineType(str, Enum):
    """Kind of a content line inside a hunk."""

    CONTEXT = "context"
    ADDED = "added"
    DELETED = "deleted"


class DiffModel(BaseModel):
    """Immutable base with camelCase serialization for the web client."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class DiffLine(DiffModel):
    """One physical line within a hunk."""

    type: LineType
    content: str
    old_line_number: int | None = None  # None for added lines
    new_line_number: int | None = None  # None for deleted lines


class DiffChunk(DiffModel):
    """One ``@@ ... @@`` hunk."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[DiffLine]


class DiffFile(DiffModel):
    """One file's change, with per-hunk line detail."""

    filename: str
    old_filename: str | None = None
    status: FileStatus = FileStatus.MODIFIED
    additions: int = 0
    deletions: int = 0
    chunks: list[DiffChunk] = []
    is_binary: bool = False
    is_image: bool = False

    @model_serializer(mode="wrap")
    def _omit_redundant_rename(self, handler) -> dict[str, Any]:
        data = handler(self)
        if self.old_filename is None or self.old_filename == self.filename:
            data.pop("oldFilename", None)
            data.pop("old_filename", None)
        return data


class DiffResponse(DiffModel):
    """Result of one parse: the files plus a label for the compared range."""

    files: list[DiffFile]
    commit: str

    @computed_field(alias="isEmpty")
    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0


class CommitInfo(DiffModel):
    """Summary of a single commit from ``git log``."""

    hash: str
    message: str
    author: str
    date: str


class Comment(DiffModel):
    """A review comment attached to a file (and optionally a line)."""

    id: int
    filename: str
    line: int | None = None
    body: str
    created_at: str


class ErrorDetail(BaseModel):
    """Structured error payload for API responses."""
    code: str
    message: str
    details: dict | list | None


class ErrorResponse(BaseModel):
    """Envelope for API error responses."""
    error: ErrorDetail
