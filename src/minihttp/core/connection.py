"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: buffered reading of exactly one request,
writing exactly one response, and closing on every path.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

    Client sends:
        send("GET /echo/abc HTTP/1.1\\r\\n\\r\\n")

    Server might receive ANY of these:
        recv() → "GET /echo/abc HTTP/1.1\\r\\n\\r\\n"     (all at once)
        recv() → "GET /ec"                                (partial)
        recv() → "ho/abc HTTP/1.1\\r\\n\\r\\n"            (rest)

We never parse a single recv() result. The socket is wrapped in a buffered
file object (socket.makefile("rb")), whose readline() and read(n) keep
calling recv() until a whole line, or n bytes, or EOF is available.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    ┌─────────┐  decode ok  ┌────────┐  route  ┌────────┐  send  ┌─────────┐
    │ READING │────────────►│ PARSED │────────►│ ROUTED │───────►│ WRITING │
    └────┬────┘             └────────┘         └────────┘        └────┬────┘
         │                                                            │
         │ empty request / malformed / socket error                   │
         ▼                                                            ▼
    ┌─────────┐                                                 ┌──────────┐
    │ ABORTED │                                                 │  CLOSED  │
    └─────────┘                                                 └──────────┘

One request per connection: after the response is written the connection
closes. There is no keep-alive and no retry.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

from ..errors import IOFailure
from ..http.request import HTTPRequest, RequestReader


logger = logging.getLogger(__name__)

# Upper bound on how long close() waits for the client to finish sending
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Only used for logging and tests; no decision depends on them.
    """

    NEW = "new"              # Just accepted
    READING = "reading"      # Waiting for request line / headers / body
    PARSED = "parsed"        # Request decoded
    ROUTED = "routed"        # Response computed
    WRITING = "writing"      # Sending response bytes
    CLOSED = "closed"        # Response sent, socket released
    ABORTED = "aborted"      # Closed without a complete exchange


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED READING                                                 │
    │     └── makefile("rb") reassembles TCP chunks into lines             │
    │                                                                      │
    │  2. STATE TRACKING                                                   │
    │     └── Know which phase we are in when something fails              │
    │                                                                      │
    │  3. CLOSE ON EVERY PATH                                              │
    │     └── Context manager, close() is idempotent                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192
    timeout: Optional[float] = None
    responded: bool = False

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        """Configure the socket and open the buffered reader."""
        # settimeout(None) puts the socket in blocking mode
        self.socket.settimeout(self.timeout)
        self._reader = self.socket.makefile("rb", buffering=self.buffer_size)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0] if self.address else ""

    @property
    def client_port(self) -> int:
        """Get the client port."""
        return self.address[1] if self.address else 0

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    def read_request(self, reader: RequestReader) -> HTTPRequest:
        """
        Read and decode the single request on this connection.

        Args:
            reader: Decoder carrying the size limits.

        Returns:
            The decoded request.

        Raises:
            EmptyRequest: Client closed without sending anything.
            MalformedRequest: Incomplete or unparseable request.
            IOFailure: The socket failed or timed out while reading.
        """
        self.state = ConnectionState.READING
        try:
            request = reader.read(self._reader, self.address)
        except OSError as e:
            # socket.timeout is an OSError subclass
            raise IOFailure(f"Read failed: {e}") from e

        self.state = ConnectionState.PARSED
        return request

    def send_response(self, data: bytes) -> None:
        """
        Send response bytes to the client.

        Uses sendall(), which loops until every byte is handed to the
        kernel. A plain send() may write only part of the buffer.

        Raises:
            IOFailure: The peer went away or the write timed out.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            raise IOFailure(f"Send failed: {e}") from e
        self.responded = True

    def close(self, aborted: bool = False):
        """
        Close the connection.

        1. shutdown(SHUT_WR): tell the client we are done sending
           └── Sends FIN, the client reads our response then EOF

        2. Drain whatever the client still sends
           └── Closing with unread data makes the kernel send RST,
               which can destroy the response before the client reads it

        3. close(): release the reader and the file descriptor

        Safe to call more than once.

        Args:
            aborted: Mark the exchange as incomplete.
        """
        if self.state in (ConnectionState.CLOSED, ConnectionState.ABORTED):
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already disconnected

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            self.socket.settimeout(DRAIN_TIMEOUT)
            while self.socket.recv(4096) and time.monotonic() < deadline:
                pass
        except OSError:
            pass  # Timeout or reset, we are closing anyway

        if self._reader is not None:
            try:
                self._reader.close()
            except OSError:
                pass
            self._reader = None

        try:
            self.socket.close()
        except OSError:
            pass

        finished = self.responded and not aborted
        self.state = ConnectionState.CLOSED if finished else ConnectionState.ABORTED
        logger.debug(f"[{self.id}] Connection {self.state.value} after {self.age:.3f}s")

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                request = conn.read_request(reader)
                conn.send_response(response.to_bytes())
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close(aborted=exc_type is not None)
        return False  # Don't suppress exceptions
