"""Tests for tsubo.request module."""

import pytest
from tsubo.headers import RequestHeaders
from tsubo.models import Request
from tsubo.request import FORM_CONTENT_TYPE, build_request, build_request_head, encode_body
from tsubo.utils import validate_url


class TestBuildRequestHead:
    """Tests for build_request_head function."""

    def test_request_line_and_headers(self, sample_request):
        """Test request line, headers and terminator."""
        assert build_request_head(sample_request) == (
            b"GET /a/b?x=1 HTTP/1.1\r\n"
            b"Host: example.com\r\n"
            b"Connection: Close\r\n"
            b"\r\n"
        )

    def test_cookie_line_after_headers(self, sample_request):
        """Test the served cookie header is appended last."""
        sample_request.cookie_header = "a=1; b=2"
        head = build_request_head(sample_request)
        assert head.endswith(b"Connection: Close\r\ncookie: a=1; b=2\r\n\r\n")

    def test_non_ascii_values_encoded_utf8(self, sample_request):
        """Test non-ASCII header and cookie values are written as UTF-8."""
        sample_request.headers.set("X-Name", "café")
        sample_request.cookie_header = "n=€"
        head = build_request_head(sample_request)
        assert "X-Name: café\r\n".encode("utf-8") in head
        assert head.endswith("cookie: n=€\r\n\r\n".encode("utf-8"))

    def test_no_cookie_line_when_empty(self, sample_request):
        """Test no cookie header is written when nothing is served."""
        assert b"cookie:" not in build_request_head(sample_request).lower()

    def test_path_without_query(self):
        """Test request target without query string."""
        request = Request("HEAD", validate_url("http://localhost:8080/"), RequestHeaders())
        assert build_request_head(request) == b"HEAD / HTTP/1.1\r\n\r\n"

    def test_build_request_appends_body(self, sample_request):
        """Test body follows the blank line."""
        sample_request.method = "POST"
        sample_request.body = b"a=1"
        assert build_request(sample_request).endswith(b"\r\n\r\na=1")


class TestEncodeBody:
    """Tests for encode_body function."""

    def test_form_mapping(self):
        """Test form mappings are url-encoded with a form content type."""
        headers = RequestHeaders()
        body = encode_body("POST", {"name": "John Doe", "age": "30"}, headers)
        assert body == b"name=John+Doe&age=30"
        assert headers.get("Content-Type") == FORM_CONTENT_TYPE
        assert headers.get("Content-Length") == str(len(body))

    def test_opaque_string(self):
        """Test strings are sent as-is without touching Content-Type."""
        headers = RequestHeaders()
        headers.add("Content-Type", "application/json")
        body = encode_body("PUT", '{"a": 1}', headers)
        assert body == b'{"a": 1}'
        assert headers.get("Content-Type") == "application/json"
        assert headers.get("Content-Length") == "8"

    @pytest.mark.parametrize("method", ["GET", "HEAD", "DELETE", "OPTIONS", "TRACE"])
    def test_bodyless_methods(self, method):
        """Test only POST and PUT carry a body."""
        headers = RequestHeaders()
        assert encode_body(method, {"a": "1"}, headers) == b""
        assert len(headers) == 0

    def test_none_data(self):
        """Test no data means no body and no Content-Length."""
        headers = RequestHeaders()
        assert encode_body("POST", None, headers) == b""
        assert "Content-Length" not in headers

    def test_utf8_length(self):
        """Test Content-Length counts encoded bytes."""
        headers = RequestHeaders()
        encode_body("POST", "é", headers)
        assert headers.get("Content-Length") == "2"
