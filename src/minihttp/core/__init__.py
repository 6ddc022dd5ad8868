"""
=============================================================================
CORE COMPONENTS
=============================================================================

Socket-level building blocks.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer                                                       │
    │     └── accept loop, one Connection per client                      │
    │                                                                      │
    │   Connection                                                         │
    │     └── buffered reads, one request in, one response out, close     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

CONCURRENCY MODEL
─────────────────

One thread per accepted connection. The accept loop runs on the main
thread and never touches connection I/O; every Connection is driven by its
own thread from the first read to the final close.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener - accepts connections
    "Connection",       # Wrapper for client socket - handles I/O
    "ConnectionState",  # Enum for connection lifecycle states
]
