"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

A single-process HTTP/1.1 server with a fixed set of routes, built directly
on Python sockets and threads.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     MINIHTTP ARCHITECTURE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. LISTENER LOOP                                                  │
    │      - Bind 127.0.0.1:4221 (configurable)                          │
    │      - Accept forever, one thread per connection                   │
    │                                                                      │
    │   2. CONNECTION HANDLER                                             │
    │      - Read one request, write one response, close                 │
    │      - Failures end the connection, never the server               │
    │                                                                      │
    │   3. WIRE CODEC                                                     │
    │      - Decode: request line, raw header lines, Content-Length body │
    │      - Encode: status line, Content-Type, Content-Length, body     │
    │                                                                      │
    │   4. ROUTER                                                         │
    │      - /                 200                                        │
    │      - /echo/<text>      <text> as text/plain                       │
    │      - /files/<name>     read (GET) / write (POST) a file           │
    │      - .../user-agent    the User-Agent header value                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttp)
    ├── server.py            # HTTPServer + connection handler
    ├── config.py            # ServerConfig dataclass
    ├── errors.py            # Per-connection error kinds
    ├── access_log.py        # One line per answered request
    ├── core/
    │   ├── socket_server.py # Listener loop
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── request.py       # Decoder
    │   ├── response.py      # Encoder
    │   ├── router.py        # Path dispatch
    │   └── status_codes.py  # The statuses we send
    └── handlers/
        ├── basic.py         # Root, echo, user-agent
        └── files.py         # /files/<name>

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/data"))
    server.run()

    $ curl -i http://127.0.0.1:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
