"""
=============================================================================
ERROR KINDS
=============================================================================

Every failure the server knows how to recover from is one of these
exceptions. Each carries the status code it turns into on the wire, the same
way a parse error carries its 4xx code.

    ┌──────────────────┬────────┬──────────────────────────────────────────┐
    │  Exception       │ Status │  Effect on the connection                │
    ├──────────────────┼────────┼──────────────────────────────────────────┤
    │  EmptyRequest    │  none  │  Closed silently, nothing written        │
    │  MalformedRequest│  404   │  Bare 404 written (if socket still open) │
    │  NotFound        │  404   │  Bare 404 written                        │
    │  IOFailure       │  500   │  Filesystem: 500 written                 │
    │                  │        │  Socket: connection aborted              │
    └──────────────────┴────────┴──────────────────────────────────────────┘

None of them ever reaches the accept loop. The connection handler catches
them per connection, so one bad client cannot take the listener down.

=============================================================================
"""

from typing import Optional


class ServerError(Exception):
    """
    Base class for recoverable, per-connection failures.

    Attributes:
        status: HTTP status to answer with, or None if nothing is sent.
    """

    status: Optional[int] = 500

    def __init__(self, message: str = "", status: Optional[int] = None):
        super().__init__(message)
        if status is not None:
            self.status = status


class MalformedRequest(ServerError):
    """The request bytes could not be decoded into a request."""

    status = 404


class EmptyRequest(ServerError):
    """The client closed the connection without sending a request."""

    status = None


class NotFound(ServerError):
    """No route, file or header matches the request."""

    status = 404


class IOFailure(ServerError):
    """A socket or filesystem read/write failed."""

    status = 500
