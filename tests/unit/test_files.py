"""
Unit tests for the file route.
"""

import logging

import pytest

from minihttp.errors import IOFailure, NotFound
from minihttp.handlers.files import FileHandler
from minihttp.http.request import HTTPRequest
from minihttp.http.response import ContentType
from minihttp.http.status_codes import HTTPStatus


@pytest.fixture
def files(served_dir) -> FileHandler:
    return FileHandler(served_dir)


class TestFileRead:
    """Tests for GET /files/<name>."""

    def test_read_existing(self, files, served_dir):
        """Test that file contents come back as octet-stream."""
        (served_dir / "hello.txt").write_text("Hello, World!")

        response = files.handle(HTTPRequest(method="GET", path="/files/hello.txt"), "hello.txt")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 13\r\n"
            b"\r\n"
            b"Hello, World!"
        )

    def test_read_multibyte_length(self, files, served_dir):
        """Test that Content-Length is the UTF-8 byte count."""
        (served_dir / "u.txt").write_bytes("héllo".encode("utf-8"))

        response = files.read("u.txt")

        assert response.content_length == 6

    def test_read_keeps_carriage_returns(self, files, served_dir):
        """Test that CR and CRLF bytes come back unchanged."""
        (served_dir / "crlf.txt").write_bytes(b"a\r\nb\rc\n")

        response = files.read("crlf.txt")

        assert response.body == b"a\r\nb\rc\n"
        assert response.content_length == 7

    def test_read_empty_file(self, files, served_dir):
        (served_dir / "empty").write_bytes(b"")

        response = files.read("empty")

        assert response.body == b""
        assert response.content_type is ContentType.OCTET_STREAM

    def test_read_subdirectory(self, files, served_dir):
        (served_dir / "sub").mkdir()
        (served_dir / "sub" / "b.txt").write_text("b")

        assert files.read("sub/b.txt").body == b"b"

    def test_read_missing(self, files):
        """Test that a missing file raises NotFound."""
        with pytest.raises(NotFound):
            files.read("nope.txt")

    def test_read_directory(self, files, served_dir):
        (served_dir / "sub").mkdir()

        with pytest.raises(NotFound):
            files.read("sub")

    def test_read_served_directory_itself(self, files):
        with pytest.raises(NotFound):
            files.read("")

    def test_read_invalid_utf8(self, files, served_dir):
        """Test that non-UTF-8 contents are treated as unreadable."""
        (served_dir / "bin").write_bytes(b"\xff\xfe\x00")

        with pytest.raises(NotFound):
            files.read("bin")


class TestFileWrite:
    """Tests for POST /files/<name>."""

    def test_write_creates_file(self, files, served_dir):
        """Test that the body is written and 201 returned."""
        request = HTTPRequest(method="POST", path="/files/new.txt", body=b"hello, file")

        response = files.handle(request, "new.txt")

        assert response.to_bytes() == b"HTTP/1.1 201 Created\r\nContent-Type: text/plain\r\n\r\n"
        assert (served_dir / "new.txt").read_bytes() == b"hello, file"

    def test_write_overwrites(self, files, served_dir):
        (served_dir / "f").write_bytes(b"old contents")

        files.write("f", b"new")

        assert (served_dir / "f").read_bytes() == b"new"

    def test_write_raw_bytes(self, files, served_dir):
        """Test that non-UTF-8 bodies are written unchanged."""
        files.write("raw", b"\x00\xff")
        assert (served_dir / "raw").read_bytes() == b"\x00\xff"

    def test_write_empty_body(self, files, served_dir):
        files.write("zero", b"")
        assert (served_dir / "zero").read_bytes() == b""

    def test_write_missing_parent(self, files):
        """Test that a failed write raises IOFailure."""
        with pytest.raises(IOFailure) as exc_info:
            files.write("no/such/dir.txt", b"x")

        assert exc_info.value.status == HTTPStatus.INTERNAL_SERVER_ERROR


class TestFileRoundTrip:
    """Tests for POST followed by GET through the handler."""

    @pytest.mark.parametrize(
        "body",
        [b"a\r\nb\rc", b"line1\r\nline2\rline3\n", "h\u00e9llo \u2603\r\n".encode("utf-8")],
    )
    def test_round_trip(self, files, body):
        """Test that GET returns exactly the bytes POSTed."""
        files.handle(HTTPRequest(method="POST", path="/files/rt", body=body), "rt")

        response = files.handle(HTTPRequest(method="GET", path="/files/rt"), "rt")

        assert response.body == body
        assert response.content_length == len(body)


class TestFileHandlerGuards:
    """Tests for directory confinement and method handling."""

    @pytest.mark.parametrize("name", ["../outside.txt", "sub/../../outside.txt", "/etc/passwd"])
    def test_traversal_rejected(self, files, served_dir, name):
        """Test that paths resolving outside the directory are refused."""
        (served_dir.parent / "outside.txt").write_text("secret")

        with pytest.raises(NotFound):
            files.read(name)

    def test_traversal_logged(self, files, caplog):
        with caplog.at_level(logging.WARNING, logger="minihttp.handlers.files"):
            with pytest.raises(NotFound):
                files.read("../outside.txt")

        assert "Path traversal attempt" in caplog.text

    def test_traversal_write_rejected(self, files, served_dir):
        with pytest.raises(NotFound):
            files.write("../escape.txt", b"x")

        assert not (served_dir.parent / "escape.txt").exists()

    def test_dotdot_inside_directory_allowed(self, files, served_dir):
        (served_dir / "a.txt").write_text("a")
        (served_dir / "sub").mkdir()

        assert files.read("sub/../a.txt").body == b"a"

    def test_nul_byte(self, files):
        with pytest.raises(NotFound):
            files.read("bad\x00name")

    def test_no_directory(self):
        """Test that every file request fails without a directory."""
        files = FileHandler(None)

        with pytest.raises(NotFound):
            files.read("a.txt")
        with pytest.raises(NotFound):
            files.write("a.txt", b"x")

    @pytest.mark.parametrize("method", ["PUT", "DELETE", "HEAD"])
    def test_other_methods(self, files, served_dir, method):
        (served_dir / "a.txt").write_text("a")

        with pytest.raises(NotFound):
            files.handle(HTTPRequest(method=method, path="/files/a.txt"), "a.txt")
