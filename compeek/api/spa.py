"""Serves the built web client, or redirects to its dev server."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse

from compeek.api.errors import raise_http_error

router = APIRouter(include_in_schema=False)


def _asset_path(static_root: Path, relative: str) -> Path | None:
    """Return the file for *relative* if it exists inside *static_root*."""
    if not relative:
        return None
    candidate = (static_root / relative).resolve()
    if candidate.is_relative_to(static_root) and candidate.is_file():
        return candidate
    return None


@router.get("/{full_path:path}")
async def spa_fallback(full_path: str, request: Request):
    """Client-side routes get ``index.html``; unknown ``/api`` paths get a 404 envelope."""
    if full_path == "api" or full_path.startswith("api/"):
        raise_http_error("NOT_FOUND", f"No API route for /{full_path}", 404)

    dev_server_url = request.app.state.dev_server_url
    if dev_server_url:
        return RedirectResponse(f"{dev_server_url}/{full_path}")

    static_root = Path(request.app.state.static_dir).resolve()
    asset = _asset_path(static_root, full_path) or _asset_path(static_root, "index.html")
    if asset is None:
        return PlainTextResponse("UI not built", status_code=404)
    return FileResponse(asset)
