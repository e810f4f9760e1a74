"""Layered ``.env`` loading for compeek.

Later files override earlier ones, and variables already present in the
environment (including those written from CLI flags) always win::

    $XDG_CONFIG_HOME/compeek/config.env  <  ./.env  <  environment
"""

from __future__ import annotations

import os
import re
from pathlib import Path

# "#" starts a comment at the beginning of a value or after whitespace.
_INLINE_COMMENT = re.compile(r"(?:^|\s)#")


def config_dir() -> Path:
    """Directory holding the user-level ``config.env``."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    root = Path(xdg) if xdg else Path.home() / ".config"
    return root / "compeek"


def config_files() -> list[Path]:
    """Candidate config files, lowest precedence first."""
    return [config_dir() / "config.env", Path.cwd() / ".env"]


def _clean_value(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    comment = _INLINE_COMMENT.search(value)
    if comment:
        return value[: comment.start()].rstrip()
    return value


def parse_env_file(path: str | Path) -> dict[str, str]:
    """Read ``KEY=value`` pairs; a missing or unreadable file yields ``{}``.

    Handles ``export`` prefixes, blank lines, ``#`` comment lines, matching
    quotes, and inline comments after unquoted values.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return {}

    values: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if sep and key:
            values[key] = _clean_value(value.strip())
    return values


def load_config() -> None:
    """Copy values from the config files into ``os.environ`` without overwriting."""
    merged: dict[str, str] = {}
    for path in config_files():
        merged.update(parse_env_file(path))
    for key, value in merged.items():
        os.environ.setdefault(key, value)
