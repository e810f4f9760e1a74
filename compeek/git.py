"""Thin wrapper around the ``git`` executable for diff, status and log queries."""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CalledProcessError, run

import structlog

from compeek.errors import GitCommandError, ReferenceResolutionError, UnreadableFileError
from compeek.models import CommitInfo

logger = structlog.get_logger(__name__)

# Pinned so user config (noprefix, mnemonicPrefix, external drivers) cannot
# change the header format the parser reads.
DIFF_CONTEXT_ARGS = [
    "--unified=3",
    "--no-color",
    "--no-ext-diff",
    "--src-prefix=a/",
    "--dst-prefix=b/",
]

# Non-ASCII paths are printed verbatim instead of as quoted octal escapes.
_CONFIG_ARGS = ["-c", "core.quotePath=false"]

_LOG_FORMAT = "%H%x00%an%x00%aI%x00%s"


@dataclass
class RepoStatus:
    """Paths reported by ``git status``."""

    changed: list[str] = field(default_factory=list)  # tracked, staged or not
    untracked: list[str] = field(default_factory=list)

    def all_paths(self) -> list[str]:
        """Changed then untracked paths, without duplicates."""
        return list(dict.fromkeys([*self.changed, *self.untracked]))


def normalize_directory_path(path: str) -> str:
    """Return a normalized absolute path for the provided directory string."""
    candidate = Path(path).expanduser()
    try:
        resolved = candidate.resolve(strict=False)
    except FileNotFoundError:
        resolved = candidate
    return str(resolved)


def has_git_repository(path: str) -> bool:
    """Return True if the directory is inside a Git work tree."""
    if not Path(path).is_dir():
        return False
    git = shutil.which("git")
    if not git:
        return (Path(path) / ".git").exists()
    result = run(
        [git, "-C", path, "rev-parse", "--is-inside-work-tree"],
        capture_output=True,
        text=True,
    )
    return result.returncode == 0 and result.stdout.strip() == "true"


def _require_git_binary() -> str:
    git = shutil.which("git")
    if not git:
        raise GitCommandError("Git executable not found on PATH")
    return git


def parse_porcelain_status(output: str) -> RepoStatus:
    """Parse ``git status --porcelain -z`` output.

    Rename and copy entries carry their source path as an extra NUL-separated
    field, which is skipped.
    """
    status = RepoStatus()
    entries = output.split("\0")
    index = 0
    while index < len(entries):
        entry = entries[index]
        index += 1
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        if code == "??":
            status.untracked.append(path)
        elif code == "!!":
            continue
        else:
            status.changed.append(path)
            if "R" in code or "C" in code:
                index += 1
    return status


class GitRepository:
    """Runs git commands against one working tree."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else Path.cwd()

    def _run(self, args: list[str]) -> str:
        git = _require_git_binary()
        logger.debug("Running git", args=args, repo=str(self.path))
        try:
            result = run(
                [git, "-C", str(self.path), *_CONFIG_ARGS, *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except CalledProcessError as exc:
            message = (exc.stderr or str(exc)).strip()
            raise GitCommandError(f"git {args[0]} failed: {message}") from exc
        return result.stdout

    def rev_parse(self, ref: str) -> str:
        """Resolve *ref* to a full commit hash.

        A ref starting with ``-`` is rejected rather than handed to git as an option.
        """
        if ref.startswith("-"):
            raise ReferenceResolutionError(ref, "revision must not start with '-'")
        try:
            return self._run(["rev-parse", "--verify", f"{ref}^{{commit}}"]).strip()
        except GitCommandError as exc:
            raise ReferenceResolutionError(ref, str(exc)) from exc

    def diff(self, args: list[str]) -> str:
        """Return unified diff text with a 3-line context window."""
        return self._run(["diff", *DIFF_CONTEXT_ARGS, *args])

    def status(self) -> RepoStatus:
        """Return changed and untracked paths, listing untracked files individually."""
        output = self._run(["status", "--porcelain=v1", "-z", "--untracked-files=all"])
        return parse_porcelain_status(output)

    def find_untracked_files(self) -> list[str]:
        """Untracked paths, excluding dot-files at the top of the path."""
        return [path for path in self.status().untracked if not path.startswith(".")]

    def mark_intent_to_add(self, paths: list[str]) -> None:
        """Record *paths* with ``git add --intent-to-add`` so diffs include them."""
        try:
            self._run(["add", "--intent-to-add", "--", *paths])
        except GitCommandError as exc:
            raise GitCommandError(f"Failed to add files with --intent-to-add: {exc}") from exc

    def log_entry(self, commitish: str) -> CommitInfo:
        """Return hash, author, date and subject for one commit.

        The commit-ish is resolved first so only a full hash reaches ``git log``.
        """
        commit = self.rev_parse(commitish)
        output = self._run(["log", "-1", f"--format={_LOG_FORMAT}", commit, "--"])
        fields = output.rstrip("\n").split("\0")
        if len(fields) != 4:
            raise GitCommandError(f"Unexpected git log output for '{commitish}'")
        commit_hash, author, date, message = fields
        return CommitInfo(hash=commit_hash, message=message, author=author, date=date)

    def read_file(self, path: str) -> str:
        """Read a working-tree file as UTF-8; undecodable bytes become U+FFFD."""
        try:
            return (self.path / path).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise UnreadableFileError(f"{path}: {exc}") from exc
