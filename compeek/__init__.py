"""compeek: a lightweight local Git diff viewer."""

from __future__ import annotations

__version__ = "0.1.0"
