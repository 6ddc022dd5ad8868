"""
=============================================================================
FILE ROUTE
=============================================================================

Reads and writes files under the served directory.

    GET  /files/<name>   → 200 application/octet-stream with the contents
    POST /files/<name>   → 201 text/plain, request body written to <name>

=============================================================================
PATH RESOLUTION & TRAVERSAL
=============================================================================

The file path is the served directory joined with whatever follows
"/files/". Without a check, a target such as

    GET /files/../../etc/passwd

would read outside the served directory. We resolve the joined path
(following ".." and symlinks) and refuse anything that does not land inside
the directory:

    root = /srv/data
    /files/a.txt             → /srv/data/a.txt      ✓
    /files/sub/b.txt         → /srv/data/sub/b.txt  ✓
    /files/../etc/passwd     → /srv/etc/passwd      ✗  404
    /files//etc/passwd       → /etc/passwd          ✗  404

A refused path answers 404, same as a missing file, so the response does
not reveal whether the outside file exists.

=============================================================================
ERRORS
=============================================================================

    GET:  missing, directory, permission denied, not UTF-8   → NotFound (404)
    POST: any OSError while writing                          → IOFailure (500)
    Other methods                                            → NotFound (404)

Concurrent writers to the same name race at the filesystem level. There is
no in-process locking.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import IOFailure, NotFound
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ContentType, ok, created


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves GET/POST for files inside one directory.

    Usage:
        files = FileHandler("/srv/data")
        files.handle(request, "notes.txt")
    """

    def __init__(self, directory: Optional[Union[str, Path]]):
        """
        Initialize the file handler.

        Args:
            directory: The served directory. None disables the file
                       routes: every request answers 404.
        """
        self.directory = Path(directory).resolve() if directory is not None else None

    def handle(self, request: HTTPRequest, name: str) -> HTTPResponse:
        """
        Dispatch on the request method.

        Args:
            request: The decoded request.
            name: Path remainder after "/files/".

        Raises:
            NotFound: Unknown method, unusable path, unreadable file.
            IOFailure: POST could not write the file.
        """
        if request.method == "GET":
            return self.read(name)
        if request.method == "POST":
            return self.write(name, request.body)
        raise NotFound(f"Method {request.method} not supported for files")

    def read(self, name: str) -> HTTPResponse:
        """
        Return the file contents as application/octet-stream.

        The bytes go out exactly as stored. They must still decode as
        UTF-8; no newline translation happens.
        """
        path = self.resolve(name)
        try:
            contents = path.read_bytes()
            contents.decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Cannot read {path}: {e}")
            raise NotFound(f"File not readable: {name}") from e
        return ok(contents, ContentType.OCTET_STREAM)

    def write(self, name: str, data: bytes) -> HTTPResponse:
        """Create or overwrite the file with `data`."""
        path = self.resolve(name)
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise IOFailure(f"Failed to write {name}") from e
        logger.info(f"Wrote {len(data)} bytes to {path}")
        return created(ContentType.TEXT_PLAIN)

    def resolve(self, name: str) -> Path:
        """
        Map a path remainder to a filesystem path inside the directory.

        Raises:
            NotFound: No directory configured, or the path escapes it.
        """
        if self.directory is None:
            raise NotFound("No served directory configured")

        try:
            full_path = (self.directory / name).resolve()
        except (OSError, ValueError) as e:
            # ValueError: embedded NUL byte
            raise NotFound(f"Unusable file path: {name!r}") from e

        try:
            full_path.relative_to(self.directory)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name}")
            raise NotFound(f"Outside served directory: {name}")

        if full_path == self.directory:
            raise NotFound("Served directory itself is not a file")

        return full_path
