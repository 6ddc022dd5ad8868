"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: the listener loop accepts, a new thread runs the
connection handler, the connection handler decodes, routes, encodes, writes.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   main thread                  connection thread (one per client)   │
    │   ───────────                  ──────────────────────────────────   │
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        └─► _handle_connection ──► Thread(process_connection)        │
    │             (returns at once)          │                             │
    │                                        ├─► conn.read_request()      │
    │                                        │      (decode)               │
    │                                        ├─► router.handle()          │
    │                                        │      (route)                │
    │                                        ├─► response.to_bytes()      │
    │                                        │      (encode)               │
    │                                        ├─► conn.send_response()     │
    │                                        └─► conn.close()             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURE ISOLATION
=============================================================================

Everything that can go wrong on a connection is caught on that
connection's thread:

    EmptyRequest        → close, write nothing
    MalformedRequest    → write "404 Not Found", close
    IOFailure (socket)  → log, close
    any other Exception → log traceback, try "500", close

The accept loop never sees any of it.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional

from .access_log import log_request
from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer
from .errors import EmptyRequest, IOFailure, MalformedRequest
from .http.request import RequestReader
from .http.response import HTTPResponse, internal_error, not_found
from .http.router import Router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(directory="/srv/data"))
        server.run()  # Blocks until Ctrl+C

    =========================================================================
    ARCHITECTURE
    =========================================================================

    - ServerConfig: read-only settings, built once
    - SocketServer: listener loop
    - RequestReader: wire decoder with the configured limits
    - Router: path dispatch, owns the served directory

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Defaults to 127.0.0.1:4221 with
                    no served directory.

        Raises:
            ValueError: Invalid configuration.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._reader = RequestReader(
            max_line_size=self.config.max_line_size,
            max_request_size=self.config.max_request_size,
        )
        self._router = Router(self.config.directory)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port); the real port once listening."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Blocks until shutdown() is called or Ctrl+C is pressed.

        Args:
            setup_logging: Configure the root logger from the config.
                           Embedders with their own logging pass False.

        Raises:
            OSError: The listening socket could not be bound.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """
        Stop accepting new connections.

        Threads already handling a connection are not waited for.
        """
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a thread for a freshly accepted connection.

        Called on the accept loop's thread, so it must not block.
        """
        thread = threading.Thread(
            target=self.process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            # "can't start new thread": the process hit its thread limit
            logger.error(f"[{conn.id}] Cannot start handler thread: {e}")
            conn.close(aborted=True)

    def process_connection(self, conn: Connection):
        """
        Handle one connection end to end (runs on its own thread).

        =====================================================================
        STATES
        =====================================================================

            READING ─► PARSED ─► ROUTED ─► WRITING ─► CLOSED
               │
               └─► ABORTED   (empty/malformed request, socket error)

        =====================================================================

        Never raises: every failure is logged and ends this connection only.

        Args:
            conn: The accepted client connection.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                self._exchange(conn)
            except EmptyRequest:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                conn.close(aborted=True)
            except MalformedRequest as e:
                logger.info(f"[{conn.id}] Malformed request from {conn.client_ip}: {e}")
                self._send_error(conn, not_found())
                conn.close(aborted=True)
            except IOFailure as e:
                logger.warning(f"[{conn.id}] Connection aborted: {e}")
                conn.close(aborted=True)
            except Exception:
                logger.exception(f"[{conn.id}] Unexpected error")
                self._send_error(conn, internal_error())
                conn.close(aborted=True)

    def _exchange(self, conn: Connection):
        """Read one request, route it, write the response."""
        start_time = time.time()

        request = conn.read_request(self._reader)

        response = self._router.handle(request)
        conn.state = ConnectionState.ROUTED

        conn.send_response(response.to_bytes())

        duration_ms = (time.time() - start_time) * 1000
        log_request(conn.id, request, response, duration_ms, self.config.log_format)

    def _send_error(self, conn: Connection, response: HTTPResponse):
        """
        Best-effort error response.

        Used for failures outside the router (malformed requests, crashes).
        If the socket is already gone there is nobody to tell.
        """
        if conn.responded:
            return
        try:
            conn.send_response(response.to_bytes())
        except IOFailure as e:
            logger.debug(f"[{conn.id}] Could not send error response: {e}")
