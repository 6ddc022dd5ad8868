"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener loop: bind, listen, accept forever, hand every accepted socket
to a callback.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    socket() ─► bind() ─► listen() ─► accept() ─┬─► Connection ─► thread conn-1a2b
                 │                     ▲        ├─► Connection ─► thread conn-9f3e
                 │                     │        └─► ...
                 │                     └── 1 s timeout, re-check running
                 └── OSError here is fatal: logged, re-raised to run()

The listening socket never carries request bytes. Each accept() yields a
fresh client socket with its own timeout from ServerConfig.

=============================================================================
THE LOOP NEVER DOES CONNECTION WORK
=============================================================================

accept() returns, we wrap the socket in a Connection and call the callback.
The callback (HTTPServer) starts a thread and returns immediately, so a slow
client never delays the next accept().

An accept() error (e.g. the process ran out of file descriptors) is logged
and the loop keeps going. Only a bind failure at startup is fatal.

=============================================================================
"""

import logging
import socket
import threading
from typing import Callable, Optional

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)

# How often the accept loop wakes up to check for shutdown()
ACCEPT_POLL_INTERVAL = 1.0


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR               │
    │        ├──► bind()             fatal on error                        │
    │        ├──► listen()                                                 │
    │        └──► _accept_loop()     blocks here                           │
    │                 └──► while running:                                  │
    │                         accept()       wait for a client             │
    │                         Connection()   wrap client socket            │
    │                         callback(conn) hand off, return at once      │
    │                                                                      │
    │    shutdown()        stop accepting (in-flight connections continue) │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the listening socket is bound (tests wait on it)
        self._ready_event = threading.Event()

    @property
    def address(self) -> tuple[str, int]:
        """
        Get the bound address (IP, port).

        With port=0 in the config this is the port the OS picked.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """
        Create and configure the listening socket.

        SO_REUSEADDR lets a restarted server bind immediately instead of
        failing with "Address already in use" while the old socket sits in
        TIME_WAIT.

        The timeout on the LISTENING socket only bounds accept(), so the
        loop can notice shutdown(). Accepted sockets get their own timeout
        from the config.
        """
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(ACCEPT_POLL_INTERVAL)
        return sock

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called with each new Connection. Must
                                return quickly (start a thread).

        Raises:
            OSError: Binding failed (port in use, permission denied).
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._ready_event.set()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Main loop for accepting connections.

        ┌─────────────────────────────────────────────────────────────────┐
        │                     Accept Loop Flow                             │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while self._running:                                           │
        │       ├──► accept()                 (1 s timeout → loop again)  │
        │       ├──► Connection(...)          wrap + configure timeout     │
        │       └──► connection_handler(conn) start per-connection thread  │
        │                                                                  │
        │   accept() error    → log, continue                              │
        │   handler error     → log, close that connection, continue       │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Periodic wake-up to check self._running
            except OSError as e:
                if not self._running:
                    break  # Socket closed by shutdown()
                logger.error(f"Accept error: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            try:
                conn = Connection(
                    socket=client_socket,
                    address=client_address,
                    buffer_size=self.config.buffer_size,
                    timeout=self.config.timeout,
                )
            except OSError as e:
                logger.error(f"Failed to set up connection from {client_address}: {e}")
                client_socket.close()
                continue

            try:
                connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Failed to dispatch connection")
                conn.close(aborted=True)

    def shutdown(self):
        """
        Stop accepting connections.

        Returns immediately; the loop exits within ACCEPT_POLL_INTERVAL.
        Connections already being handled run to completion on their own
        threads. Safe to call more than once.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Close the listening socket."""
        self._running = False
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass  # Already closed
            self._socket = None
        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the listening socket is bound.

        Returns:
            True if the server is listening, False on timeout.
        """
        return self._ready_event.wait(timeout)
