"""Health endpoint."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from compeek.api.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return HealthResponse(status="ok", timestamp=timestamp)
