"""FastAPI application factory for the diff viewer server."""

from __future__ import annotations

import webbrowser
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from compeek import __version__
from compeek.api import api_router, root_router
from compeek.comments import CommentStore
from compeek.git_diff import GitDiffParser
from compeek.middleware import (
    http_exception_handler,
    request_logging_middleware,
    validation_exception_handler,
)
from compeek.models import DiffResponse
from compeek.settings import settings

logger = structlog.get_logger(__name__)


def open_browser(url: str) -> None:
    """Open *url* in the default browser, logging instead of failing."""
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.warning("Failed to open browser", url=url, error=str(exc))
        return
    if not opened:
        logger.warning("No browser available", url=url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    url = app.state.browser_url
    if url:
        logger.info("Opening browser", url=url)
        open_browser(url)
    yield
    logger.info("Server shutting down", comments=len(app.state.comments.list_comments()))


def create_app(
    diff_response: DiffResponse,
    parser: GitDiffParser | None = None,
    comments: CommentStore | None = None,
    browser_url: str | None = None,
) -> FastAPI:
    """Build the app serving *diff_response*.

    Args:
        diff_response: Parsed diff returned by ``/api/diff``.
        parser: Used for commit lookups; ``None`` disables ``/api/commits``.
        comments: Comment store; a fresh one is created when omitted.
        browser_url: Opened once on startup when set.
    """
    app = FastAPI(title="compeek", version=__version__, lifespan=lifespan)
    app.state.diff_response = diff_response
    app.state.parser = parser
    app.state.comments = comments if comments is not None else CommentStore()
    app.state.browser_url = browser_url
    app.state.static_dir = settings.static_dir()
    app.state.dev_server_url = settings.dev_server_url()

    app.middleware("http")(request_logging_middleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(api_router)
    app.include_router(root_router)
    return app
