"""Logging setup: structlog events and uvicorn's stdlib records share one stderr handler.

stdout stays free for the CLI summary and the comment output.
"""

from __future__ import annotations

import logging
import sys

import structlog

from compeek.settings import settings

_UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
_ACCESS_FIELDS = ("client_addr", "method", "path", "http_version", "status_code")


def _add_uvicorn_access_fields(
    logger: logging.Logger | None, name: str, event_dict: dict
) -> dict:
    """Expand the positional args of a ``uvicorn.access`` record into named fields."""
    record = event_dict.get("_record")
    if record is None or record.name != "uvicorn.access":
        return event_dict
    args = record.args
    if isinstance(args, tuple) and len(args) >= len(_ACCESS_FIELDS):
        event_dict.update(zip(_ACCESS_FIELDS, args))
    return event_dict


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging() -> None:
    """Configure structlog and stdlib logging from ``COMPEEK_LOG_*`` settings."""
    level = getattr(logging, settings.log_level(), logging.INFO)

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    structlog.configure(
        processors=[
            *shared,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(settings.log_format()),
            foreign_pre_chain=[*shared, _add_uvicorn_access_fields],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    for name in _UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers[:] = [handler]
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False
