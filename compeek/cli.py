"""CLI entry point for compeek.

``compeek [commit-ish] [compare-with]`` parses the diff, starts the review
server and opens the browser.

Import ordering matters: CLI flags are written to ``COMPEEK_*`` environment
variables and ``load_config()`` runs before logging is configured and the
server modules read their settings.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Callable

from compeek import __version__
from compeek.comparison import WORKING, ALL_UNCOMMITTED, STAGED, is_special_target
from compeek.errors import CompeekError, ReferenceResolutionError
from compeek.git import GitRepository, has_git_repository
from compeek.settings import DIFF_MODES

YELLOW = "\x1b[33m"
RESET = "\x1b[0m"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="compeek",
        description="A lightweight Git diff viewer with GitHub-like interface",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "commitish",
        nargs="?",
        default="HEAD",
        help='Git commit, tag, branch, HEAD~n reference, or "working"/"staged"/"."',
    )
    parser.add_argument(
        "compare_with",
        nargs="?",
        default=None,
        help="Compare with this commit/branch instead of the parent of commit-ish",
    )
    parser.add_argument("--port", type=int, help="Preferred port (next free port if occupied)")
    parser.add_argument("--host", help="Host address to bind")
    parser.add_argument(
        "--no-open",
        dest="open",
        action="store_false",
        help="Do not open the browser automatically",
    )
    parser.add_argument("--mode", choices=DIFF_MODES, help="Diff layout in the browser")
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Start with a clean slate by clearing existing comments",
    )
    parser.add_argument(
        "-w",
        "--ignore-whitespace",
        action="store_true",
        help="Ignore whitespace when comparing lines",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point (``compeek`` command)."""
    args = build_parser().parse_args(argv)
    _apply_overrides(args)

    from compeek.config import load_config

    load_config()

    from compeek.log_config import configure_logging

    configure_logging()

    try:
        _run(args)
    except CompeekError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def _apply_overrides(args: argparse.Namespace) -> None:
    """Write CLI flags into COMPEEK_* env vars so they win over .env files."""
    if args.host:
        os.environ["COMPEEK_HOST"] = args.host
    if args.port is not None:
        os.environ["COMPEEK_PORT"] = str(args.port)
    if not args.open:
        os.environ["COMPEEK_OPEN_BROWSER"] = "0"
    if args.mode:
        os.environ["COMPEEK_MODE"] = args.mode
    if args.ignore_whitespace:
        os.environ["COMPEEK_IGNORE_WHITESPACE"] = "1"


def resolve_targets(
    commitish: str, compare_with: str | None, git: GitRepository
) -> tuple[str, str]:
    """Pick the (target, base) pair for the positional arguments.

    Without ``compare-with``, a commit is compared against its parent; a
    repository without commits falls back to all uncommitted files.
    """
    if compare_with is not None:
        return commitish, compare_with
    if commitish == WORKING:
        return commitish, STAGED
    if is_special_target(commitish):
        return commitish, "HEAD"
    try:
        git.rev_parse("HEAD")
    except ReferenceResolutionError:
        return ALL_UNCOMMITTED, "HEAD"
    return commitish, f"{commitish}^"


def prompt_user(question: str, read: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question; an empty answer means yes."""
    try:
        answer = read(question)
    except EOFError:
        return False
    return answer.strip().lower() in ("", "y", "yes")


def handle_untracked_files(
    git: GitRepository, read: Callable[[str], str] = input
) -> None:
    """Offer to mark untracked files intent-to-add so they show up in the diff."""
    files = git.find_untracked_files()
    if not files:
        return

    print(f"\nFound {len(files)} untracked file(s):")
    for path in files:
        print(f"    - {path}")

    question = "\nWould you like to include these untracked files in the diff review? (Y/n): "
    if prompt_user(question, read):
        git.mark_intent_to_add(files)
        print("Files added with --intent-to-add")
        print(f"   To undo this, run `git reset -- {' '.join(files)}`")
    else:
        print("i Untracked files will not be shown in diff")


def _run(args: argparse.Namespace) -> None:
    from compeek.comparison import validate_diff_arguments
    from compeek.git_diff import GitDiffParser
    from compeek.server import ServerOptions, prepare_server, serve
    from compeek.settings import settings

    validate_diff_arguments(args.commitish, args.compare_with)

    cwd = os.getcwd()
    if not has_git_repository(cwd):
        raise CompeekError(f"Not a git repository: {cwd}")
    git = GitRepository(cwd)

    target, base = resolve_targets(args.commitish, args.compare_with, git)
    if args.commitish in (WORKING, ALL_UNCOMMITTED):
        handle_untracked_files(git)

    options = ServerOptions(
        target=target,
        base=base,
        port=settings.port(),
        host=settings.host(),
        open_browser=settings.open_browser(),
        mode=settings.mode(),
        ignore_whitespace=settings.ignore_whitespace(),
        clear_comments=args.clean,
    )
    prepared = prepare_server(options, parser=GitDiffParser(git=git))

    print(f"\ncompeek server started on {prepared.url}")
    print(f"Reviewing: {target}")
    if args.clean:
        print("Starting with a clean slate - all existing comments will be cleared")
    if prepared.is_empty:
        print(f"\n! {YELLOW}No differences found. Browser will not open automatically.{RESET}")
        print(f"   Server is running at {prepared.url} if you want to check manually.\n")
    elif options.open_browser:
        print("Opening browser...\n")
    else:
        print("Browser not opened (--no-open); visit the URL above\n")

    serve(prepared)

    print("\nShutting down compeek server...")
    output = options.comments.format_output()
    if output.strip():
        print(output)


if __name__ == "__main__":
    main()
