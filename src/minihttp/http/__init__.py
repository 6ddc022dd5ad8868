"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

The wire codec and the router.

    Raw bytes ──► request.py ──► HTTPRequest ──► router.py ──► HTTPResponse
                  (decode)                       (dispatch)        │
                                                                   ▼
    Raw bytes ◄───────────────── response.py (encode) ◄────────────┘

- Messages are text lines separated by CRLF (LF also accepted on input)
- Headers end at the first empty line
- Body length comes from Content-Length

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, RequestReader, read_request, parse_request
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ContentType,
    ok,             # 200 OK
    created,        # 201 Created
    not_found,      # 404 Not Found
    internal_error, # 500 Internal Server Error
)
from .router import Router, RouteKind, RouteMatch, match_route

__all__ = [
    # Status codes
    "HTTPStatus",

    # Request decoding
    "HTTPRequest",
    "RequestReader",
    "read_request",
    "parse_request",

    # Response encoding
    "HTTPResponse",
    "ResponseBuilder",
    "ContentType",
    "ok",
    "created",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "RouteKind",
    "RouteMatch",
    "match_route",
]
