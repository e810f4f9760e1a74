"""Server startup: diff parsing, port selection and the uvicorn run loop."""

from __future__ import annotations

import errno
import socket
from dataclasses import dataclass, field
from urllib.parse import urlencode

import structlog
import uvicorn
from fastapi import FastAPI

from compeek.comments import CommentStore
from compeek.git_diff import GitDiffParser
from compeek.main import create_app

logger = structlog.get_logger(__name__)

MAX_PORT_ATTEMPTS = 100


@dataclass
class ServerOptions:
    """Everything needed to start one review server."""

    target: str
    base: str
    port: int = 3000
    host: str = "127.0.0.1"
    open_browser: bool = True
    mode: str = "side-by-side"
    ignore_whitespace: bool = False
    clear_comments: bool = False
    comments: CommentStore = field(default_factory=CommentStore)


@dataclass
class PreparedServer:
    """A configured app plus where it will listen."""

    app: FastAPI
    url: str
    host: str
    port: int
    is_empty: bool


def find_available_port(preferred: int, host: str = "127.0.0.1") -> int:
    """Return the first port from *preferred* upward that can be bound.

    Only "address in use" moves on to the next port; other socket errors
    propagate.
    """
    for port in range(preferred, preferred + MAX_PORT_ATTEMPTS):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host or "127.0.0.1", port))
            except OSError as exc:
                if exc.errno == errno.EADDRINUSE:
                    logger.debug("Port in use", port=port)
                    continue
                raise
            return port
    raise OSError(
        errno.EADDRINUSE,
        f"No free port in range {preferred}-{preferred + MAX_PORT_ATTEMPTS - 1}",
    )


def display_url(host: str, port: int) -> str:
    display_host = "localhost" if host in ("", "127.0.0.1") else host
    return f"http://{display_host}:{port}"


def prepare_server(options: ServerOptions, parser: GitDiffParser | None = None) -> PreparedServer:
    """Parse the diff and build the app without starting to listen."""
    parser = parser if parser is not None else GitDiffParser()
    diff_response = parser.parse_diff(
        options.target,
        options.base,
        ignore_whitespace=options.ignore_whitespace,
    )
    if options.clear_comments:
        options.comments.clear()

    port = find_available_port(options.port, options.host)
    url = display_url(options.host, port)
    browser_url = None
    if options.open_browser and not diff_response.is_empty:
        browser_url = f"{url}/?{urlencode({'mode': options.mode})}"

    app = create_app(
        diff_response,
        parser=parser,
        comments=options.comments,
        browser_url=browser_url,
    )
    logger.info(
        "Server prepared",
        url=url,
        commit=diff_response.commit,
        files=len(diff_response.files),
    )
    return PreparedServer(
        app=app,
        url=url,
        host=options.host or "127.0.0.1",
        port=port,
        is_empty=diff_response.is_empty,
    )


def serve(prepared: PreparedServer) -> None:
    """Run uvicorn until interrupted."""
    uvicorn.run(
        prepared.app,
        host=prepared.host,
        port=prepared.port,
        log_config=None,
    )
