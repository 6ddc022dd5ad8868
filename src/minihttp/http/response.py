"""
=============================================================================
HTTP RESPONSE ENCODER
=============================================================================

Builds HTTP/1.1 responses and serializes them to exact wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.1 200 OK\r\n                                         │ │
    │  │    ────┬─── ─┬─ ─┬─                                            │ │
    │  │    Version  Code Phrase                                        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (only when there is something to describe) ───────────┐ │
    │  │    Content-Type: text/plain\r\n                                │ │
    │  │    Content-Length: 3\r\n       ← Only when a body is present  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    abc                                                          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE FIVE SHAPES WE EVER SEND
=============================================================================

    200 with body       HTTP/1.1 200 OK\r\n
                        Content-Type: <type>\r\n
                        Content-Length: <len>\r\n
                        \r\n
                        <body>

    200 without body    HTTP/1.1 200 OK\r\n
                        Content-Type: <type>\r\n
                        \r\n

    200 root            HTTP/1.1 200 OK\r\n\r\n

    201                 HTTP/1.1 201 Created\r\n
                        Content-Type: <type>\r\n
                        \r\n

    404 / 500           HTTP/1.1 404 Not Found\r\n\r\n

No Date, no Server, no Connection header. Each connection carries exactly
one response and is closed afterwards, so the client reads to EOF anyway.

=============================================================================
BODY VS NO BODY
=============================================================================

`body=None` and `body=b""` are different responses:

    HTTPResponse(OK, body=None, ...)  → no Content-Length header at all
    HTTPResponse(OK, body=b"", ...)   → "Content-Length: 0"

GET /echo/ produces the second one: an empty echo is still an echo.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .status_codes import HTTPStatus


class ContentType(Enum):
    """Content types the routes can declare."""

    TEXT_PLAIN = "text/plain"
    OCTET_STREAM = "application/octet-stream"

    def __str__(self) -> str:
        return self.value


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Route returns          to_bytes()              Socket sends
        HTTPResponse    ─────►  serializes    ─────►   raw bytes
            │                      │                       │
        HTTPResponse(           b"HTTP/1.1 200 OK\\r\\n   sock.sendall(
          status=OK,              Content-Type: ...        response_bytes
          body=b"abc",            ...\\r\\n\\r\\nabc"      )
          content_type=TEXT)

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    body: Optional[bytes] = None
    content_type: Optional[ContentType] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status} {self.status.phrase}"

    @property
    def content_length(self) -> Optional[int]:
        """Byte length of the body, None when there is no body."""
        return None if self.body is None else len(self.body)

    def set_body(self, body: Union[str, bytes, None]) -> "HTTPResponse":
        """
        Set the response body.

        Strings are encoded to UTF-8, so Content-Length counts bytes,
        not characters ("é" is 2 bytes).

        Returns:
            Self for method chaining
        """
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        =====================================================================
        ENCODING BY STATUS
        =====================================================================

            OK / CREATED:               status line
                                        [Content-Type]     if set
                                        [Content-Length]   if body
                                        blank line + body

            NOT_FOUND / SERVER ERROR:   status line + blank line

        =====================================================================

        Raises:
            ValueError: If the status is not one this server sends.
        """
        if self.status in (HTTPStatus.OK, HTTPStatus.CREATED):
            lines = [self.status_line]
            if self.content_type is not None:
                lines.append(f"Content-Type: {self.content_type}")
            if self.body is not None:
                lines.append(f"Content-Length: {len(self.body)}")
            head = "\r\n".join(lines) + "\r\n\r\n"
            return head.encode("utf-8") + (self.body or b"")

        if self.status in (HTTPStatus.NOT_FOUND, HTTPStatus.INTERNAL_SERVER_ERROR):
            return f"{self.status_line}\r\n\r\n".encode("utf-8")

        raise ValueError(f"Cannot encode status {self.status!r}")


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    ==========================================================================
    METHOD CHAINING (FLUENT INTERFACE)
    ==========================================================================

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

    Each method returns `self`, except build().
    ==========================================================================
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._body: Optional[bytes] = None
        self._content_type: Optional[ContentType] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def content_type(self, content_type: ContentType) -> "ResponseBuilder":
        """Set the Content-Type without touching the body."""
        self._content_type = content_type
        return self

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the response body (string auto-encoded to UTF-8)."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Set a text/plain body."""
        return self.body(text).content_type(ContentType.TEXT_PLAIN)

    def octet_stream(self, data: Union[str, bytes]) -> "ResponseBuilder":
        """Set an application/octet-stream body."""
        return self.body(data).content_type(ContentType.OCTET_STREAM)

    def build(self) -> HTTPResponse:
        """Build and return the HTTPResponse object."""
        return HTTPResponse(
            status=self._status,
            body=self._body,
            content_type=self._content_type,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE CONSTRUCTORS
# =============================================================================


def ok(
    body: Union[str, bytes, None] = None,
    content_type: Optional[ContentType] = None,
) -> HTTPResponse:
    """
    Create a 200 OK response.

    Args:
        body: Response body, None for no body at all.
        content_type: Declared type, None to omit the header.

    Example:
        ok()                                    # root: bare 200
        ok("abc", ContentType.TEXT_PLAIN)       # echo
        ok(None, ContentType.TEXT_PLAIN)        # typed, bodiless 200
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if body is not None:
        builder.body(body)
    if content_type is not None:
        builder.content_type(content_type)
    return builder.build()


def created(content_type: ContentType = ContentType.TEXT_PLAIN) -> HTTPResponse:
    """Create a 201 Created response. It never carries a body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).content_type(content_type).build()


def not_found() -> HTTPResponse:
    """Create a bare 404 Not Found response."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """Create a bare 500 Internal Server Error response."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR)
