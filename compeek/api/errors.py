"""The ``{"error": {...}}`` envelope shared by every failing API response."""

from __future__ import annotations

from typing import Any, NoReturn

from fastapi import HTTPException

from compeek.models import ErrorDetail, ErrorResponse


def error_payload(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """Return the JSON body for an error with a stable *code*."""
    envelope = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return envelope.model_dump()


def raise_http_error(code: str, message: str, status_code: int) -> NoReturn:
    """Abort the current request with *status_code* and an error envelope.

    The exception handler in ``compeek.middleware`` passes the envelope
    through unchanged.
    """
    raise HTTPException(status_code=status_code, detail=error_payload(code, message))
