"""Pytest configuration and fixtures."""

import pytest
from tsubo.headers import RequestHeaders
from tsubo.models import Request, Response
from tsubo.utils import validate_url


class FakeTransport:
    """Transport that records requests and replays a canned result."""

    def __init__(self, result=b""):
        self.result = result
        self.requests = []

    def exchange(self, request, want_response=True):
        self.requests.append((request, want_response))
        return self.result


@pytest.fixture
def sample_response():
    """Create a sample Response object."""
    return Response(
        status_code=200,
        reason="OK",
        http_version="1.1",
        headers=[
            ("Content-Type", "application/json"),
            ("Content-Length", "13"),
        ],
        body=b'{"key":"val"}',
    )


@pytest.fixture
def sample_request():
    """Create a GET request for https://example.com/a/b?x=1."""
    headers = RequestHeaders()
    headers.set("Host", "example.com")
    headers.set("Connection", "Close")
    return Request("GET", validate_url("https://example.com/a/b?x=1"), headers)


@pytest.fixture
def fake_transport():
    """Transport returning a minimal 200 response."""
    return FakeTransport(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\n\r\nhello")


@pytest.fixture
def mock_socket(mocker):
    """Create a mock socket."""
    sock = mocker.MagicMock()
    sock.recv.side_effect = [b"HTTP/1.1 200 OK\r\n\r\n", b"body", b""]
    return sock
