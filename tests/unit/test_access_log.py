"""
Unit tests for access logging.
"""

import json
import logging

from minihttp.access_log import build_log_entry, log_request
from minihttp.http.request import HTTPRequest
from minihttp.http.response import ContentType, not_found, ok


def make_request() -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path="/echo/hi",
        headers=["User-Agent: curl/7.81.0"],
        client_address=("192.168.1.100", 5555),
    )


class TestRequestLog:
    """Tests for RequestLog formatting."""

    def test_build_entry(self):
        entry = build_log_entry("abcd1234", make_request(), ok("hi", ContentType.TEXT_PLAIN), 1.234)

        assert entry.connection_id == "abcd1234"
        assert entry.client_ip == "192.168.1.100"
        assert entry.user_agent == "User-Agent: curl/7.81.0"
        assert entry.status_code == 200
        assert entry.content_length == 2

    def test_bodiless_response(self):
        entry = build_log_entry("abcd1234", HTTPRequest(method="GET", path="/x"), not_found(), 0.5)

        assert entry.status_code == 404
        assert entry.content_length == 0
        assert entry.user_agent == "-"
        assert entry.client_ip == "-"

    def test_to_text(self):
        entry = build_log_entry("abcd1234", make_request(), ok("hi", ContentType.TEXT_PLAIN), 1.234)
        line = entry.to_text()

        assert line.startswith("192.168.1.100 - - [")
        assert '"GET /echo/hi" 200 2 1.23ms' in line

    def test_to_dict_rounds_duration(self):
        entry = build_log_entry("abcd1234", make_request(), ok(), 1.23456)
        assert entry.to_dict()["duration_ms"] == 1.23


class TestLogRequest:
    """Tests for log_request()."""

    def test_text_format(self, caplog):
        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            log_request("abcd1234", make_request(), ok(), 1.0)

        assert '"GET /echo/hi" 200 0' in caplog.text

    def test_json_format(self, caplog):
        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            log_request("abcd1234", make_request(), ok("hi"), 1.0, log_format="json")

        entry = json.loads(caplog.records[-1].getMessage())
        assert entry["path"] == "/echo/hi"
        assert entry["status_code"] == 200
        assert entry["connection_id"] == "abcd1234"

    def test_disabled_below_info(self, caplog):
        with caplog.at_level(logging.WARNING, logger="minihttp.access"):
            log_request("abcd1234", make_request(), ok(), 1.0)

        assert caplog.records == []
