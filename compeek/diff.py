"""Helpers for parsing unified diffs into UI-friendly structures."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

import structlog

from compeek.models import DiffChunk, DiffFile, DiffLine, FileStatus, LineType

logger = structlog.get_logger(__name__)

_FILE_HEADER = re.compile(r"^diff --git ", re.MULTILINE)
_FILE_PAIR = re.compile(r"^a/(.+) b/(.+)$")
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_BINARY_MARKER = re.compile(r"^Binary files .* differ")

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp"})

# Checked in order; the first marker present decides the status.
_STATUS_MARKERS: tuple[tuple[str, FileStatus], ...] = (
    ("new file mode", FileStatus.ADDED),
    ("deleted file mode", FileStatus.DELETED),
    ("rename from", FileStatus.RENAMED),
)

_LINE_MARKERS = {
    " ": LineType.CONTEXT,
    "+": LineType.ADDED,
    "-": LineType.DELETED,
}


def parse_diff_output(diff_text: str) -> list[DiffFile]:
    """Parse raw ``git diff`` output into one ``DiffFile`` per file block.

    Blocks whose header is not an ``a/<old> b/<new>`` pair are skipped.
    """
    files: list[DiffFile] = []
    for block in split_file_blocks(diff_text):
        parsed = parse_file_block(block)
        if parsed is not None:
            files.append(parsed)
    return files


def split_file_blocks(diff_text: str) -> list[str]:
    """Split diff text on ``diff --git`` headers, dropping blank blocks."""
    return [block for block in _FILE_HEADER.split(diff_text) if block.strip()]


def parse_file_block(block: str) -> DiffFile | None:
    """Build a ``DiffFile`` from one block (header marker already removed)."""
    lines = block.split("\n")
    match = _FILE_PAIR.match(lines[0])
    if not match:
        logger.debug("Skipping unrecognized diff block", header=lines[0])
        return None
    old_path, new_path = match.groups()

    status = classify_status(lines)
    filename = old_path if status is FileStatus.DELETED else new_path
    old_filename = old_path if status is FileStatus.RENAMED else None

    if any(_BINARY_MARKER.match(line) for line in lines):
        return DiffFile(
            filename=filename,
            old_filename=old_filename,
            status=status,
            chunks=[],
            is_binary=True,
            is_image=is_image_file(filename),
        )

    chunks = parse_chunks(lines)
    typed = [line.type for chunk in chunks for line in chunk.lines]
    return DiffFile(
        filename=filename,
        old_filename=old_filename,
        status=status,
        additions=typed.count(LineType.ADDED),
        deletions=typed.count(LineType.DELETED),
        chunks=chunks,
    )


def classify_status(lines: Iterable[str]) -> FileStatus:
    """Return the file status implied by the block's extended header lines."""
    present = {
        status
        for line in lines
        for marker, status in _STATUS_MARKERS
        if line.startswith(marker)
    }
    for _, status in _STATUS_MARKERS:
        if status in present:
            return status
    return FileStatus.MODIFIED


def parse_chunks(lines: Iterable[str]) -> list[DiffChunk]:
    """Group content lines under their hunk headers and number them.

    Lines before the first hunk header, and lines that are neither a header
    nor a space/``+``/``-`` content line, are ignored.
    """
    chunks: list[DiffChunk] = []
    header: re.Match[str] | None = None
    body: list[str] = []
    for line in lines:
        match = _HUNK_HEADER.match(line) if line.startswith("@@") else None
        if match:
            if header is not None:
                chunks.append(_build_chunk(header, body))
            header, body = match, []
        elif header is not None and line[:1] in _LINE_MARKERS:
            body.append(line)
    if header is not None:
        chunks.append(_build_chunk(header, body))
    return chunks


def is_image_file(filename: str) -> bool:
    """Return True when the filename has a raster or vector image extension."""
    _, dot, extension = filename.lower().rpartition(".")
    return bool(dot) and f".{extension}" in IMAGE_EXTENSIONS


def _build_chunk(header: re.Match[str], body: Sequence[str]) -> DiffChunk:
    old_start = int(header.group(1))
    new_start = int(header.group(3))
    return DiffChunk(
        old_start=old_start,
        old_lines=int(header.group(2) or 1),
        new_start=new_start,
        new_lines=int(header.group(4) or 1),
        lines=_number_lines(old_start, new_start, body),
    )


def _number_lines(old_start: int, new_start: int, body: Sequence[str]) -> list[DiffLine]:
    """Fold over hunk lines carrying the ``(old, new)`` line counters.

    Each line records the counters as they stand before it is consumed.
    """
    numbered: list[DiffLine] = []
    state = (old_start, new_start)
    for raw in body:
        line_type = _LINE_MARKERS[raw[0]]
        old_number, new_number = state
        numbered.append(
            DiffLine(
                type=line_type,
                content=raw[1:],
                old_line_number=old_number if line_type is not LineType.ADDED else None,
                new_line_number=new_number if line_type is not LineType.DELETED else None,
            )
        )
        state = _advance(state, line_type)
    return numbered


def _advance(state: tuple[int, int], line_type: LineType) -> tuple[int, int]:
    old_number, new_number = state
    if line_type is not LineType.ADDED:
        old_number += 1
    if line_type is not LineType.DELETED:
        new_number += 1
    return old_number, new_number
