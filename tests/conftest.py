"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

from minihttp import HTTPServer, ServerConfig
from minihttp.core import Connection


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: curl/7.81.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello, file"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
    ) + f"Content-Length: {len(body)}\r\n\r\n".encode() + body


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """An empty served directory."""
    directory = tmp_path / "served"
    directory.mkdir()
    return directory


@pytest.fixture
def config(served_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(served_dir),
        timeout=5.0,
        log_level="WARNING",
    )


def recv_all(sock: socket.socket) -> bytes:
    """Read from `sock` until the peer closes."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class ConnectionPair:
    """
    A server-side Connection wired to a client socket via socketpair().

    Lets tests drive the connection handler without a listener.
    """

    def __init__(self):
        server_sock, self.client = socket.socketpair()
        self.client.settimeout(5.0)
        self.conn = Connection(socket=server_sock, address=("127.0.0.1", 50000), timeout=5.0)

    def exchange(self, server: HTTPServer, data: bytes, close_write: bool = True) -> bytes:
        """Send `data`, run the handler, return everything it wrote."""
        if data:
            self.client.sendall(data)
        if close_write:
            self.client.shutdown(socket.SHUT_WR)
        server.process_connection(self.conn)
        return recv_all(self.client)

    def close(self):
        self.client.close()


@pytest.fixture
def connection_pair() -> Generator[ConnectionPair, None, None]:
    """A fresh socketpair-backed connection."""
    pair = ConnectionPair()
    yield pair
    pair.close()


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        """Open a raw client connection to the server."""
        return socket.create_connection(("127.0.0.1", self.port), timeout=5.0)

    def read_response(self, sock: socket.socket) -> bytes:
        """Read until the server closes the connection."""
        return recv_all(sock)

    def request(self, data: bytes) -> bytes:
        """Open a connection, send raw bytes, return the raw response."""
        with self.connect() as sock:
            sock.sendall(data)
            return recv_all(sock)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Create and start a live test server."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def bare_test_server() -> Generator[TestServer, None, None]:
    """A live test server with no served directory."""
    test_srv = TestServer(HTTPServer(ServerConfig(port=0, timeout=5.0)))
    test_srv.start()

    yield test_srv

    test_srv.stop()
