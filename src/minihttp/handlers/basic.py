"""
Root, echo and user-agent handlers.

These need nothing but the request itself, so they are plain functions.
"""

from ..errors import NotFound
from ..http.request import HTTPRequest, USER_AGENT
from ..http.response import HTTPResponse, ContentType, ok


def index(request: HTTPRequest) -> HTTPResponse:
    """GET / → bare "HTTP/1.1 200 OK"."""
    return ok()


def echo(request: HTTPRequest, text: str) -> HTTPResponse:
    """
    Echo a path segment back as text/plain.

    `text` is whatever followed "/echo/" in the target, untouched:
    no URL-decoding, slashes included.
    """
    return ok(text, ContentType.TEXT_PLAIN)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    Reflect the client's User-Agent header.

    The first header line that CONTAINS "User-Agent:" is picked. If that
    line also starts with it, the value after the prefix is returned.
    Otherwise (e.g. "X-User-Agent: scanner") the response is a text/plain
    200 without a body.

    Raises:
        NotFound: No header line mentions "User-Agent:".
    """
    line = request.user_agent
    if line is None:
        raise NotFound("No User-Agent header")

    if not line.startswith(USER_AGENT):
        return ok(None, ContentType.TEXT_PLAIN)

    return ok(line[len(USER_AGENT):].strip(), ContentType.TEXT_PLAIN)
