"""Synthetic "everything is new" diffs for repositories without commits."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from compeek.errors import UnreadableFileError

logger = structlog.get_logger(__name__)

# Hash-shaped filler for the index line; it does not address any content.
PLACEHOLDER_HASH = "f" * 7


def build_synthetic_diff(paths: Iterable[str], read_file: Callable[[str], str]) -> str:
    """Render every readable path as a newly added file in unified-diff form.

    Args:
        paths: Working-tree paths relative to the repository root.
        read_file: Returns a path's full text content.
    """
    parts: list[str] = []
    for path in paths:
        try:
            content = read_file(path)
        except (UnreadableFileError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read file for synthetic diff", path=path, error=str(exc))
            continue
        parts.append(render_new_file(path, content))
    return "".join(parts)


def render_new_file(path: str, content: str) -> str:
    """Return the diff block presenting *content* as a new file at *path*."""
    lines = content.split("\n")
    header = [
        f"diff --git a/{path} b/{path}",
        "new file mode 100644",
        f"index 0000000..{PLACEHOLDER_HASH}",
        "--- /dev/null",
        f"+++ b/{path}",
        f"@@ -0,0 +1,{len(lines)} @@",
    ]
    body = [f"+{line}" for line in lines]
    return "\n".join(header + body) + "\n"
