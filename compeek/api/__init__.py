"""API package for the diff viewer endpoints."""

from __future__ import annotations

from compeek.api.router import api_router, root_router

__all__ = ["api_router", "root_router"]
