"""Produce a structured ``DiffResponse`` for two commit-ish references."""

from __future__ import annotations

from pathlib import Path

import structlog

from compeek.comparison import Comparison, resolve_comparison, validate_diff_arguments
from compeek.diff import parse_diff_output
from compeek.errors import CompeekError, DiffParseError, GitCommandError
from compeek.git import GitRepository
from compeek.models import CommitInfo, DiffResponse
from compeek.synthetic import build_synthetic_diff

logger = structlog.get_logger(__name__)


class GitDiffParser:
    """Resolves a comparison, fetches the raw diff and parses it."""

    def __init__(
        self,
        repo_path: str | Path | None = None,
        git: GitRepository | None = None,
    ) -> None:
        self.git = git if git is not None else GitRepository(repo_path)

    def parse_diff(
        self,
        target: str,
        base: str,
        ignore_whitespace: bool = False,
    ) -> DiffResponse:
        """Return the parsed diff of *target* against *base*.

        Raises:
            InvalidArgumentError: Either reference is blank. Checked before any
                git command runs.
            DiffParseError: Resolution or diff retrieval failed; the original
                exception is chained as ``__cause__``.
        """
        validate_diff_arguments(target, base)
        try:
            comparison = resolve_comparison(self.git, target, base, ignore_whitespace)
            raw_diff = self._raw_diff(comparison)
            files = parse_diff_output(raw_diff)
        except (CompeekError, OSError) as exc:
            logger.warning("Diff parsing failed", target=target, base=base, error=str(exc))
            raise DiffParseError(f"Failed to parse diff: {exc}") from exc

        logger.info(
            "Diff parsed",
            commit=comparison.label,
            files=len(files),
            synthetic=comparison.synthetic,
        )
        return DiffResponse(files=files, commit=comparison.label)

    def _raw_diff(self, comparison: Comparison) -> str:
        if not comparison.synthetic:
            return self.git.diff(list(comparison.diff_args))
        paths = self.git.status().all_paths()
        if not paths:
            return ""
        return build_synthetic_diff(paths, self.git.read_file)

    def get_commit_info(self, commitish: str) -> CommitInfo | None:
        """Return commit metadata, or ``None`` when *commitish* cannot be read."""
        try:
            return self.git.log_entry(commitish)
        except GitCommandError as exc:
            logger.warning("Could not read commit info", commitish=commitish, error=str(exc))
            return None
