"""Endpoints serving the parsed diff and commit metadata."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request

from compeek.api.errors import raise_http_error
from compeek.models import CommitInfo, DiffResponse

router = APIRouter(tags=["diff"])
logger = structlog.get_logger(__name__)


@router.get(
    "/diff",
    response_model=DiffResponse,
    response_model_exclude_none=True,
)
async def get_diff(request: Request) -> DiffResponse:
    """Return the diff parsed when the server started."""
    diff: DiffResponse = request.app.state.diff_response
    logger.info("Diff requested", commit=diff.commit, files=len(diff.files))
    return diff


@router.get("/commits/{commitish:path}", response_model=CommitInfo)
async def get_commit(commitish: str, request: Request) -> CommitInfo:
    """Return hash, author, date and subject for one commit-ish."""
    parser = request.app.state.parser
    if parser is None:
        raise_http_error("GIT_UNAVAILABLE", "No repository attached to this server", 503)
    info = parser.get_commit_info(commitish)
    if info is None:
        raise_http_error("NOT_FOUND", f"Unknown commit: {commitish}", 404)
    return info
