"""Centralized environment configuration for compeek.

All environment variables are read through this module using the COMPEEK_
prefix for consistency. CLI flags are applied by writing these variables
before the server starts.

Usage:
    from compeek.settings import settings

    port = settings.port()
"""

from __future__ import annotations

import os
from pathlib import Path


def _get(name: str, default: str = "") -> str:
    """Get an environment variable value."""
    return os.environ.get(name, "").strip() or default


def _get_bool(name: str, default: bool = False) -> bool:
    """Get a boolean environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    return value.lower() in ("1", "true", "yes")


def _get_int(name: str, default: int = 0) -> int:
    """Get an integer environment variable."""
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


DIFF_MODES = ("side-by-side", "inline")


class Settings:
    """Centralized settings for compeek.

    Environment variables use the COMPEEK_ prefix.
    """

    # -------------------------------------------------------------------------
    # Server Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def host() -> str:
        """Host to bind the HTTP server to.

        Env: COMPEEK_HOST (default: 127.0.0.1)
        """
        return _get("COMPEEK_HOST", default="127.0.0.1")

    @staticmethod
    def port() -> int:
        """Preferred port; the next free port is used when it is taken.

        Env: COMPEEK_PORT (default: 3000)
        """
        return _get_int("COMPEEK_PORT", default=3000)

    @staticmethod
    def open_browser() -> bool:
        """Open the browser once the server is up and the diff is non-empty.

        Env: COMPEEK_OPEN_BROWSER (default: true)
        """
        return _get_bool("COMPEEK_OPEN_BROWSER", default=True)

    @staticmethod
    def static_dir() -> str:
        """Directory holding the built web client.

        Env: COMPEEK_STATIC_DIR (default: the packaged ``static_ui`` directory)
        """
        value = _get("COMPEEK_STATIC_DIR")
        if value:
            return os.path.abspath(value)
        return str(Path(__file__).resolve().parent / "static_ui")

    @staticmethod
    def dev_server_url() -> str:
        """Frontend dev server to redirect UI routes to. Empty serves static files.

        Env: COMPEEK_DEV_SERVER_URL
        """
        return _get("COMPEEK_DEV_SERVER_URL").rstrip("/")

    # -------------------------------------------------------------------------
    # Diff Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def mode() -> str:
        """Diff layout requested from the web client: side-by-side or inline.

        Env: COMPEEK_MODE (default: side-by-side)
        """
        value = _get("COMPEEK_MODE", default="side-by-side").lower()
        return value if value in DIFF_MODES else "side-by-side"

    @staticmethod
    def ignore_whitespace() -> bool:
        """Pass ``--ignore-all-space`` to git diff.

        Env: COMPEEK_IGNORE_WHITESPACE (default: false)
        """
        return _get_bool("COMPEEK_IGNORE_WHITESPACE")

    # -------------------------------------------------------------------------
    # Logging Settings
    # -------------------------------------------------------------------------

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

        Env: COMPEEK_LOG_LEVEL (default: INFO)
        """
        return _get("COMPEEK_LOG_LEVEL", default="INFO").upper()

    @staticmethod
    def log_format() -> str:
        """Log format: "console" for dev-friendly, "json" for structured.

        Env: COMPEEK_LOG_FORMAT (default: console)
        """
        return _get("COMPEEK_LOG_FORMAT", default="console").lower()


# Singleton instance for convenient imports
settings = Settings()
