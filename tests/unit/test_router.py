"""
Unit tests for URL routing.
"""

import pytest

from minihttp.errors import IOFailure, NotFound
from minihttp.http.request import HTTPRequest
from minihttp.http.response import ContentType
from minihttp.http.router import RouteKind, RouteMatch, Router, error_response, match_route
from minihttp.http.status_codes import HTTPStatus


def make_request(path: str, method: str = "GET", headers=None, body: bytes = b"") -> HTTPRequest:
    return HTTPRequest(method=method, path=path, headers=list(headers or []), body=body)


class TestMatchRoute:
    """Tests for the route table precedence."""

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/", RouteMatch(RouteKind.ROOT)),
            ("/echo/abc", RouteMatch(RouteKind.ECHO, "abc")),
            ("/echo/", RouteMatch(RouteKind.ECHO, "")),
            ("/echo/a/b", RouteMatch(RouteKind.ECHO, "a/b")),
            ("/files/notes.txt", RouteMatch(RouteKind.FILES, "notes.txt")),
            ("/user-agent", RouteMatch(RouteKind.USER_AGENT)),
            ("/api/user-agent/v1", RouteMatch(RouteKind.USER_AGENT)),
            ("/echo", RouteMatch(RouteKind.NOT_FOUND)),
            ("/missing", RouteMatch(RouteKind.NOT_FOUND)),
            ("", RouteMatch(RouteKind.NOT_FOUND)),
        ],
    )
    def test_match(self, path, expected):
        assert match_route(path) == expected

    def test_echo_beats_user_agent(self):
        """Test that the echo prefix is checked before the substring."""
        assert match_route("/echo/user-agent") == RouteMatch(RouteKind.ECHO, "user-agent")

    def test_files_beats_user_agent(self):
        assert match_route("/files/user-agent").kind is RouteKind.FILES

    def test_root_requires_exact_match(self):
        assert match_route("//").kind is RouteKind.NOT_FOUND


class TestRouter:
    """Tests for Router.handle()."""

    def test_root(self):
        """Test that "/" answers the bare 200."""
        response = Router().handle(make_request("/"))
        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_root_ignores_method(self):
        response = Router().handle(make_request("/", method="DELETE"))
        assert response.status == HTTPStatus.OK

    def test_echo(self):
        """Test echoing the path remainder."""
        response = Router().handle(make_request("/echo/abc"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\nabc"
        )

    def test_echo_is_not_url_decoded(self):
        response = Router().handle(make_request("/echo/a%20b"))
        assert response.body == b"a%20b"

    def test_echo_empty_remainder(self):
        """Test that "/echo/" answers an empty text body."""
        response = Router().handle(make_request("/echo/"))

        assert response.body == b""
        assert b"Content-Length: 0\r\n" in response.to_bytes()

    def test_unknown_path(self):
        """Test 404 for unmatched paths."""
        response = Router().handle(make_request("/nonexistent"))
        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_files_without_directory(self):
        """Test that file routes answer 404 when no directory is configured."""
        response = Router().handle(make_request("/files/anything"))
        assert response.status == HTTPStatus.NOT_FOUND

    def test_files_with_directory(self, served_dir):
        (served_dir / "a.txt").write_text("contents")

        response = Router(str(served_dir)).handle(make_request("/files/a.txt"))

        assert response.status == HTTPStatus.OK
        assert response.content_type is ContentType.OCTET_STREAM
        assert response.body == b"contents"


class TestUserAgentRoute:
    """Tests for the user-agent reflection rules."""

    def test_reflects_value(self):
        request = make_request("/user-agent", headers=["Host: x", "User-Agent: foobar/1.2.3"])
        response = Router().handle(request)

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 12\r\n"
            b"\r\nfoobar/1.2.3"
        )

    def test_value_is_trimmed(self):
        request = make_request("/user-agent", headers=["User-Agent:   spaced  "])
        assert Router().handle(request).body == b"spaced"

    def test_missing_header(self):
        """Test 404 when no header mentions User-Agent."""
        request = make_request("/user-agent", headers=["Host: x"])
        response = Router().handle(request)

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_lowercase_header_not_recognized(self):
        request = make_request("/user-agent", headers=["user-agent: curl"])
        assert Router().handle(request).status == HTTPStatus.NOT_FOUND

    def test_header_containing_marker_without_prefix(self):
        """Test that a line merely containing User-Agent: answers 200 without body."""
        request = make_request("/user-agent", headers=["X-User-Agent: scanner"])
        response = Router().handle(request)

        assert response.to_bytes() == b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\n"

    def test_first_matching_line_wins(self):
        request = make_request(
            "/user-agent",
            headers=["X-User-Agent: scanner", "User-Agent: real"],
        )
        assert Router().handle(request).body is None

    def test_substring_path(self):
        request = make_request("/v2/user-agent", headers=["User-Agent: ua"])
        assert Router().handle(request).body == b"ua"


class TestErrorResponse:
    """Tests for error_response()."""

    def test_not_found(self):
        assert error_response(NotFound("x")).status == HTTPStatus.NOT_FOUND

    def test_io_failure(self):
        assert error_response(IOFailure("x")).status == HTTPStatus.INTERNAL_SERVER_ERROR
