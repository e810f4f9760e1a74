"""Map target/base commit-ish tokens onto git diff arguments and a display label."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from compeek.errors import InvalidArgumentError, ReferenceResolutionError

logger = structlog.get_logger(__name__)

WORKING = "working"
STAGED = "staged"
ALL_UNCOMMITTED = "."
SPECIAL_TARGETS = (WORKING, STAGED, ALL_UNCOMMITTED)

WORKING_LABEL = "Working Directory (unstaged changes)"
ALL_FILES_LABEL = "Working Directory (all files)"
IGNORE_WHITESPACE_FLAG = "--ignore-all-space"


class RefResolver(Protocol):
    def rev_parse(self, ref: str) -> str: ...


@dataclass(frozen=True)
class Comparison:
    """What to diff and how to describe it.

    ``synthetic`` means the repository has no commits and every file should
    be presented as new instead of running ``git diff``.
    """

    label: str
    diff_args: tuple[str, ...] = ()
    synthetic: bool = False


def is_special_target(target: str) -> bool:
    return target in SPECIAL_TARGETS


def short_hash(commit_hash: str) -> str:
    return commit_hash[:7]


def create_commit_range_string(target_hash: str, base_hash: str) -> str:
    """Render ``<base>..<target>`` using short hashes."""
    return f"{short_hash(base_hash)}..{short_hash(target_hash)}"


def validate_diff_arguments(target: str, base: str | None) -> None:
    """Raise ``InvalidArgumentError`` when either side is blank.

    A ``None`` base means the caller has not chosen one yet and is not checked.
    """
    if not target or not target.strip():
        raise InvalidArgumentError("Target commit cannot be empty")
    if base is not None and not base.strip():
        raise InvalidArgumentError("Base commit cannot be empty")


def resolve_comparison(
    git: RefResolver,
    target: str,
    base: str,
    ignore_whitespace: bool = False,
) -> Comparison:
    """Decide the diff arguments and label for *target* against *base*.

    Args:
        git: Resolves references to commit hashes.
        target: ``working``, ``staged``, ``.`` or any commit-ish.
        base: Any commit-ish.
        ignore_whitespace: Append ``--ignore-all-space`` to the diff arguments.
    """
    validate_diff_arguments(target, base)

    if target == WORKING:
        comparison = Comparison(label=WORKING_LABEL)
    elif target == STAGED:
        base_hash = git.rev_parse(base)
        comparison = Comparison(
            label=f"{short_hash(base_hash)} vs Staging Area (staged changes)",
            diff_args=("--cached", base),
        )
    elif target == ALL_UNCOMMITTED:
        try:
            base_hash = git.rev_parse(base)
        except ReferenceResolutionError:
            logger.info("Base does not resolve, showing all files as new", base=base)
            return Comparison(label=ALL_FILES_LABEL, synthetic=True)
        comparison = Comparison(
            label=f"{short_hash(base_hash)} vs Working Directory (all uncommitted changes)",
            diff_args=(base,),
        )
    else:
        target_hash = git.rev_parse(target)
        base_hash = git.rev_parse(base)
        comparison = Comparison(
            label=create_commit_range_string(target_hash, base_hash),
            diff_args=(base, target),
        )

    if ignore_whitespace:
        comparison = Comparison(
            label=comparison.label,
            diff_args=(*comparison.diff_args, IGNORE_WHITESPACE_FLAG),
        )
    return comparison
