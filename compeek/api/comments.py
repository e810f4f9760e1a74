"""Review comment endpoints backed by the in-memory comment store."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from compeek.api.schemas import CreateCommentRequest, CreateCommentResponse
from compeek.comments import CommentStore
from compeek.models import Comment

router = APIRouter(tags=["comments"])


def _store(request: Request) -> CommentStore:
    return request.app.state.comments


@router.get("/comments", response_model=list[Comment])
async def list_comments(request: Request) -> list[Comment]:
    """Return all comments in creation order."""
    return _store(request).list_comments()


@router.post("/comments", response_model=CreateCommentResponse)
async def create_comment(payload: CreateCommentRequest, request: Request) -> CreateCommentResponse:
    """Store a comment on a file or a specific line."""
    comment = _store(request).add(payload.filename, payload.body, line=payload.line)
    return CreateCommentResponse(comment=comment)


@router.get("/comments-output", response_class=PlainTextResponse)
async def comments_output(request: Request) -> str:
    """Plain-text comment summary printed by the CLI on shutdown."""
    return _store(request).format_output()
