"""
=============================================================================
ACCESS LOGGING
=============================================================================

One log line per answered request, on the "minihttp.access" logger.

    text:  127.0.0.1 - - [19/Oct/2026:12:00:00 +0000] "GET /echo/abc" 200 3 0.41ms
    json:  {"connection_id": "1f2e3d4c", "method": "GET", "path": "/echo/abc", ...}

The text format follows the Apache common log layout closely enough for
GoAccess-style tools; JSON is for log aggregators.

Requests that never decoded (empty or malformed) are not access-logged; the
connection handler reports those on its own logger.

=============================================================================
"""

import json
import logging
import time
from dataclasses import asdict, dataclass

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    FIELDS
    ──────
    connection_id:  Short id shared with the connection's debug logs
    method:         Request method
    path:           Request target
    client_ip:      Peer address
    user_agent:     Raw User-Agent line, "-" if absent
    status_code:    Response status
    content_length: Response body size in bytes
    duration_ms:    Time from the start of the request read until the
                    response bytes were sent
    timestamp:      When the entry was built
    """

    connection_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to a dictionary for JSON serialization."""
        entry = asdict(self)
        entry["duration_ms"] = round(self.duration_ms, 2)
        return entry

    def to_text(self) -> str:
        """Format as an Apache-like access log line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def build_log_entry(
    connection_id: str,
    request: HTTPRequest,
    response: HTTPResponse,
    duration_ms: float,
) -> RequestLog:
    """Collect the fields of one access log entry."""
    return RequestLog(
        connection_id=connection_id,
        method=request.method,
        path=request.path,
        client_ip=request.client_address[0] or "-",
        user_agent=request.user_agent or "-",
        status_code=int(response.status),
        content_length=response.content_length or 0,
        duration_ms=duration_ms,
        timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
    )


def log_request(
    connection_id: str,
    request: HTTPRequest,
    response: HTTPResponse,
    duration_ms: float,
    log_format: str = "text",
) -> None:
    """
    Emit one access log entry.

    Args:
        connection_id: Id of the connection that carried the request.
        request: The decoded request.
        response: The response that was sent.
        duration_ms: Read, route and send time in milliseconds.
        log_format: "text" or "json".
    """
    if not logger.isEnabledFor(logging.INFO):
        return

    entry = build_log_entry(connection_id, request, response, duration_ms)
    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
