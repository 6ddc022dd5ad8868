"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes this server can answer with.

=============================================================================
STATUS CODE CATEGORIES
=============================================================================

    ┌─────────┬──────────────────┬─────────────────────────────────────────┐
    │  Code   │  Phrase          │  When we send it                        │
    ├─────────┼──────────────────┼─────────────────────────────────────────┤
    │  200    │  OK              │  Root, echo, file read, user-agent      │
    │  201    │  Created         │  File written by POST /files/<name>     │
    │  404    │  Not Found       │  Route miss, file miss, header miss,    │
    │         │                  │  malformed request                      │
    │  500    │  Internal Server │  File write failed, handler crashed     │
    │         │  Error           │                                         │
    └─────────┴──────────────────┴─────────────────────────────────────────┘

Anything outside this table is never put on the wire. The encoder in
response.py dispatches on these four members and rejects everything else.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes understood by the wire encoder.

    IntEnum lets a status compare equal to its integer code:

        HTTPStatus.OK == 200          # True
        f"{HTTPStatus.NOT_FOUND}"     # "404"
    """

    OK = 200                        # Request succeeded
    CREATED = 201                   # File was written
    NOT_FOUND = 404                 # Nothing to serve for this request
    INTERNAL_SERVER_ERROR = 500     # We failed, not the client

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase is the text that appears after the status code
        in an HTTP response line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
