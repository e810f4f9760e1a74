"""Request logging and the exception handlers that render error envelopes."""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from compeek.api.errors import error_payload

logger = structlog.get_logger(__name__)

# Status codes the app actually produces; anything else reports INTERNAL_ERROR.
_CODE_MAP = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    503: "UNAVAILABLE",
}


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


async def request_logging_middleware(request: Request, call_next):
    """Bind a short request id to every log line emitted while handling the request."""
    started = time.perf_counter()
    with structlog.contextvars.bound_contextvars(
        request_id=uuid.uuid4().hex[:12],
        method=request.method,
        path=request.url.path,
    ):
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed", duration_ms=_elapsed_ms(started))
            raise
        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
    return response


def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        code = _CODE_MAP.get(exc.status_code, "INTERNAL_ERROR")
        content = error_payload(code, str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Request rejected", errors=len(exc.errors()))
    return JSONResponse(
        status_code=422,
        content=error_payload("VALIDATION_ERROR", "Invalid request", _validation_details(exc)),
    )


def _validation_details(exc: RequestValidationError) -> list:
    """Pydantic error entries made JSON-safe; ``ctx`` may hold exception objects."""
    details = []
    for error in exc.errors():
        entry = dict(error)
        if "ctx" in entry:
            entry["ctx"] = {key: str(value) for key, value in entry["ctx"].items()}
        details.append(entry)
    return jsonable_encoder(details)
