"""
=============================================================================
HTTP REQUEST DECODER
=============================================================================

Turns the raw byte stream of one connection into a structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ─┬──  ───────┬───────  ───┬────                              │ │
    │  │   Method      Target       Version                              │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS (kept as raw lines, in order) ────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/7.81.0\r\n                                 │ │
    │  │    Content-Length: 5\r\n        ← Tells us body length!        │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                         ← End of headers               │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    hello                        ← Exactly Content-Length bytes │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
READING FROM A STREAM
=============================================================================

TCP delivers bytes in arbitrary chunks, so we never parse a single recv()
buffer. Instead the decoder reads from a buffered binary stream (what
socket.makefile("rb") returns) and lets the buffer do the reassembly:

    1. readline() until an empty line           → request line + headers
    2. scan headers for "Content-Length:"       → body length (0 if absent)
    3. read(length)                             → body, blocks until complete

Both LF and CRLF line endings are accepted.

=============================================================================
HEADERS ARE NOT A DICTIONARY HERE
=============================================================================

Headers stay an ordered list of "Name: Value" strings. Lookups are prefix or
substring matches on those lines:

    "Content-Length:"   must START the line (case-sensitive)
    "User-Agent:"       may appear ANYWHERE in the line

This is deliberately literal. A request with "content-length: 5" (lower case)
has a zero-length body as far as this server is concerned.

=============================================================================
FAILURE MODES
=============================================================================

    Stream closed before any byte      → EmptyRequest   (no response)
    First line is blank                → EmptyRequest   (no response)
    Stream closed before blank line    → MalformedRequest
    Request line without a target      → MalformedRequest
    Body shorter than Content-Length   → MalformedRequest
    Line or body above the size limits → MalformedRequest

=============================================================================
"""

import io
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional

from ..errors import EmptyRequest, MalformedRequest


CONTENT_LENGTH = "Content-Length:"
USER_AGENT = "User-Agent:"


@dataclass
class HTTPRequest:
    """
    A decoded HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request method token ("GET", "POST", ...)

        path:           Request target exactly as sent, no URL-decoding
                        "/echo/hello%20world" stays "/echo/hello%20world"

        version:        Protocol token ("HTTP/1.1"), empty if missing

        headers:        Raw header lines in arrival order
                        ["Host: localhost:4221", "User-Agent: curl/7.81.0"]

        body:           Raw body bytes, exactly Content-Length long

        client_address: (ip, port) of the peer, for logging

    =========================================================================
    """

    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: List[str] = field(default_factory=list)
    body: bytes = b""
    client_address: tuple[str, int] = ("", 0)

    @property
    def request_line(self) -> str:
        """The request line as it would appear on the wire."""
        return " ".join(part for part in (self.method, self.path, self.version) if part)

    @property
    def content_length(self) -> int:
        """Declared body length, 0 if missing or unparseable."""
        return find_content_length(self.headers)

    @property
    def user_agent(self) -> Optional[str]:
        """
        The first header line mentioning "User-Agent:", or None.

        The whole line is returned. Stripping the prefix is the
        user-agent route's business, not ours.
        """
        return find_header(self.headers, USER_AGENT)

    def get_header(self, prefix: str) -> Optional[str]:
        """
        Get the value of the first header line starting with `prefix`.

        Args:
            prefix: Header name including the colon, e.g. "Host:".
                    Matching is case-sensitive.

        Returns:
            The value with surrounding whitespace removed, or None.

        Example:
            request.get_header("Host:")  # "localhost:4221"
        """
        for line in self.headers:
            if line.startswith(prefix):
                return line[len(prefix):].strip()
        return None


def find_header(headers: List[str], needle: str) -> Optional[str]:
    """Return the first header line containing `needle`, or None."""
    for line in headers:
        if needle in line:
            return line
    return None


def find_content_length(headers: List[str]) -> int:
    """
    Find the body length declared by the headers.

    The first line starting with "Content-Length:" whose second
    whitespace-separated token is a non-negative decimal integer (an
    optional leading "+" allowed) wins. "Content-Length:5" has no second
    token and so declares nothing.
    Lines whose value does not parse are skipped, so a later valid
    Content-Length line still counts.

    Args:
        headers: Raw header lines.

    Returns:
        The declared length, or 0.
    """
    for line in headers:
        if not line.startswith(CONTENT_LENGTH):
            continue
        tokens = line.split()
        if len(tokens) < 2:
            continue
        digits = tokens[1][1:] if tokens[1].startswith("+") else tokens[1]
        if digits.isascii() and digits.isdigit():
            return int(digits)
    return 0


class RequestReader:
    """
    Reads one HTTPRequest from a buffered binary stream.

    ==========================================================================
    READER ARCHITECTURE
    ==========================================================================

        Binary stream (socket.makefile("rb") or io.BytesIO)
              │
              ▼
        ┌──────────────────────────────────────────────────────────────────┐
        │  REQUEST READER                                                   │
        ├──────────────────────────────────────────────────────────────────┤
        │                                                                    │
        │  1. _read_head()       readline() until blank line               │
        │     │  EOF first?     → EmptyRequest                              │
        │     │  EOF later?     → MalformedRequest                          │
        │     ▼                                                             │
        │  2. _parse_request_line()                                         │
        │     │  METHOD SP TARGET [SP VERSION]                              │
        │     ▼                                                             │
        │  3. find_content_length()                                         │
        │     ▼                                                             │
        │  4. _read_body()       read(n), short read → MalformedRequest    │
        │                                                                    │
        └──────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest dataclass

    ==========================================================================
    """

    def __init__(
        self,
        max_line_size: int = 8192,
        max_request_size: int = 10 * 1024 * 1024,
    ):
        """
        Initialize the reader.

        Args:
            max_line_size: Longest accepted request or header line, in bytes.
            max_request_size: Largest accepted body, in bytes.
        """
        self.max_line_size = max_line_size
        self.max_request_size = max_request_size

    def read(
        self,
        stream: BinaryIO,
        client_address: tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Read and decode one request.

        Blocks until the header block and the full body have arrived.

        Args:
            stream: Buffered binary stream positioned at a request.
            client_address: Peer (ip, port), stored on the request.

        Returns:
            The decoded request.

        Raises:
            EmptyRequest: Nothing was sent.
            MalformedRequest: The request is incomplete or unparseable.
        """
        lines = self._read_head(stream)

        method, path, version = self._parse_request_line(lines[0])
        headers = lines[1:]

        content_length = find_content_length(headers)
        if content_length > self.max_request_size:
            raise MalformedRequest(
                f"Body too large: {content_length} bytes "
                f"(limit {self.max_request_size})"
            )

        body = self._read_body(stream, content_length)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _read_head(self, stream: BinaryIO) -> List[str]:
        """Read the request line and headers, without the blank line."""
        lines: List[str] = []

        while True:
            raw = stream.readline(self.max_line_size + 1)

            if not raw:
                if not lines:
                    raise EmptyRequest("Connection closed before any data")
                raise MalformedRequest("Connection closed before end of headers")

            if not raw.endswith(b"\n"):
                if len(raw) > self.max_line_size:
                    raise MalformedRequest(
                        f"Line too long (limit {self.max_line_size} bytes)"
                    )
                # Partial line followed by EOF
                raise MalformedRequest("Connection closed mid-line")

            line = raw.rstrip(b"\r\n").decode("utf-8", errors="replace")

            if not line:
                if not lines:
                    raise EmptyRequest("Request started with a blank line")
                return lines

            lines.append(line)

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split the request line into (method, target, version).

        =====================================================================
        REQUEST LINE FORMAT
        =====================================================================

            METHOD SP REQUEST-TARGET SP HTTP-VERSION

            Example: "GET /echo/abc HTTP/1.1"
                     ─┬─ ────┬──── ────┬───
                      │      │         │
                   Method  Target   Version

        The version is optional here; routing only needs the first two.
        =====================================================================
        """
        parts = line.split()
        if len(parts) < 2:
            raise MalformedRequest(f"Invalid request line: {line!r}")

        method, path = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 else ""
        return method, path, version

    def _read_body(self, stream: BinaryIO, length: int) -> bytes:
        """Read exactly `length` body bytes."""
        if length == 0:
            return b""

        body = stream.read(length)
        if body is None or len(body) < length:
            received = 0 if body is None else len(body)
            raise MalformedRequest(
                f"Incomplete body: expected {length} bytes, got {received}"
            )
        return body


def read_request(
    stream: BinaryIO,
    client_address: tuple[str, int] = ("", 0),
    max_line_size: int = 8192,
    max_request_size: int = 10 * 1024 * 1024,
) -> HTTPRequest:
    """
    Convenience function to read one request from a stream.

    Use RequestReader directly to reuse the same limits across connections.
    """
    reader = RequestReader(max_line_size=max_line_size, max_request_size=max_request_size)
    return reader.read(stream, client_address)


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
) -> HTTPRequest:
    """
    Decode a request held entirely in memory.

    Example:
        request = parse_request(b"GET / HTTP/1.1\\r\\n\\r\\n")
    """
    return read_request(io.BytesIO(data), client_address)
