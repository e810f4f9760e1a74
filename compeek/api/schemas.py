"""Pydantic request/response models for API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from compeek.models import Comment


# --- Request Models ---


class CreateCommentRequest(BaseModel):
    """Request body for adding a review comment."""

    filename: str = Field(..., min_length=1)
    line: int | None = Field(default=None, ge=1)
    body: str = Field(..., min_length=1)


# --- Response Models ---


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str = "ok"
    timestamp: str


class CreateCommentResponse(BaseModel):
    """Response for a stored comment."""

    success: bool = True
    comment: Comment
