"""Exception hierarchy for diff resolution and parsing."""

from __future__ import annotations


class CompeekError(Exception):
    """Base class for compeek failures."""


class InvalidArgumentError(CompeekError):
    """Raised when a target or base reference is empty."""


class GitCommandError(CompeekError):
    """Raised when git is unavailable or a git command exits non-zero."""


class ReferenceResolutionError(GitCommandError):
    """Raised when a commit-ish does not resolve to a commit."""

    def __init__(self, ref: str, message: str) -> None:
        super().__init__(f"Unknown revision '{ref}': {message}")
        self.ref = ref


class UnreadableFileError(CompeekError):
    """A working-tree file could not be read as text.

    The synthetic diff builder logs it and skips the file.
    """


class DiffParseError(CompeekError):
    """Raised by ``GitDiffParser.parse_diff`` wrapping the underlying failure."""
