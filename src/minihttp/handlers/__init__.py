"""
=============================================================================
REQUEST HANDLERS
=============================================================================

The actions the router dispatches to.

    ┌──────────────────┬───────────────────────────────────────────────────┐
    │  Handler         │  Purpose                                          │
    ├──────────────────┼───────────────────────────────────────────────────┤
    │  index           │  GET / → bare 200                                 │
    │  echo            │  /echo/<text> → <text> as text/plain              │
    │  user_agent      │  /user-agent → the User-Agent header value        │
    │  FileHandler     │  /files/<name> → read (GET) or write (POST)       │
    └──────────────────┴───────────────────────────────────────────────────┘

Handlers return an HTTPResponse or raise a ServerError subclass; the router
turns the exception into the matching status.

=============================================================================
"""

from .basic import index, echo, user_agent
from .files import FileHandler

__all__ = [
    "index",
    "echo",
    "user_agent",
    "FileHandler",
]
