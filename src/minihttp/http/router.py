"""
=============================================================================
URL ROUTER
=============================================================================

Maps a decoded request to a response by looking at its path.

=============================================================================
ROUTE TABLE
=============================================================================

Rules are evaluated top to bottom; the first one that matches wins.

    ┌───┬────────────────────────────┬──────────────┬──────────────────────┐
    │ # │  Rule                      │  Kind        │  Action              │
    ├───┼────────────────────────────┼──────────────┼──────────────────────┤
    │ 1 │  path == "/"               │  ROOT        │  bare 200            │
    │ 2 │  path starts "/echo/"      │  ECHO        │  200 text/plain      │
    │ 3 │  path starts "/files/"     │  FILES       │  FileHandler         │
    │ 4 │  "/user-agent" in path     │  USER_AGENT  │  header reflection   │
    │ 5 │  anything else             │  NOT_FOUND   │  404                 │
    └───┴────────────────────────────┴──────────────┴──────────────────────┘

Order matters:

    /echo/user-agent        → ECHO ("user-agent"), rule 2 beats rule 4
    /files/user-agent       → FILES, rule 3 beats rule 4
    /api/user-agent/v1      → USER_AGENT, substring match
    /echo                   → NOT_FOUND, the prefix needs its trailing "/"

=============================================================================
TWO STEPS: MATCH, THEN HANDLE
=============================================================================

    match_route(path)  ──►  RouteMatch(kind, remainder)    pure, no I/O
           │
           ▼
    Router.handle()    ──►  handler(request, ...)          may touch disk
           │
           ▼
    HTTPResponse            (ServerError → its status code)

match_route() is a pure function of the path, so the precedence rules can be
tested without building requests or touching the filesystem.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..errors import ServerError
from ..handlers import FileHandler, echo, index, user_agent
from .request import HTTPRequest
from .response import HTTPResponse, internal_error, not_found
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


ECHO_PREFIX = "/echo/"
FILES_PREFIX = "/files/"
USER_AGENT_MARKER = "/user-agent"


class RouteKind(Enum):
    """Which action applies to a path."""

    ROOT = "root"
    ECHO = "echo"
    FILES = "files"
    USER_AGENT = "user_agent"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of matching a path against the route table.

    Example:
        match_route("/echo/abc")
        → RouteMatch(kind=RouteKind.ECHO, remainder="abc")
    """

    kind: RouteKind
    remainder: str = ""


def match_route(path: str) -> RouteMatch:
    """
    Find the route for a request path.

    Args:
        path: The request target, exactly as sent.

    Returns:
        The first matching RouteMatch; NOT_FOUND if nothing matches.
    """
    if path == "/":
        return RouteMatch(RouteKind.ROOT)
    if path.startswith(ECHO_PREFIX):
        return RouteMatch(RouteKind.ECHO, path[len(ECHO_PREFIX):])
    if path.startswith(FILES_PREFIX):
        return RouteMatch(RouteKind.FILES, path[len(FILES_PREFIX):])
    if USER_AGENT_MARKER in path:
        return RouteMatch(RouteKind.USER_AGENT)
    return RouteMatch(RouteKind.NOT_FOUND)


class Router:
    """
    Dispatches requests to the fixed set of handlers.

    The served directory is handed over once, at construction. Nothing is
    re-read per request, and the router holds no mutable state, so one
    instance is shared by every connection thread.

    Usage:
        router = Router(directory="/srv/data")
        response = router.handle(request)
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        """
        Initialize the router.

        Args:
            directory: Served directory for /files/. None disables it.
        """
        self.files = FileHandler(directory)

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        ServerError subclasses raised by handlers become responses here:
        NotFound → 404, IOFailure → 500. Any other exception propagates
        to the connection handler.

        Args:
            request: The decoded request.

        Returns:
            The response to send.
        """
        match = match_route(request.path)
        logger.debug(f"{request.method} {request.path} → {match.kind.value}")

        try:
            return self._dispatch(request, match)
        except ServerError as e:
            logger.debug(f"{request.method} {request.path}: {type(e).__name__}: {e}")
            return error_response(e)

    def _dispatch(self, request: HTTPRequest, match: RouteMatch) -> HTTPResponse:
        if match.kind is RouteKind.ROOT:
            return index(request)
        if match.kind is RouteKind.ECHO:
            return echo(request, match.remainder)
        if match.kind is RouteKind.FILES:
            return self.files.handle(request, match.remainder)
        if match.kind is RouteKind.USER_AGENT:
            return user_agent(request)
        return not_found()


def error_response(error: ServerError) -> HTTPResponse:
    """Build the bare response a ServerError maps to."""
    if error.status == HTTPStatus.NOT_FOUND:
        return not_found()
    return internal_error()
