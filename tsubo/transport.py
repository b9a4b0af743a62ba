from __future__ import annotations

import logging
import socket
import ssl
from typing import Protocol

import httpx

from .errors import ConnectionError, TLSNegotiationError
from .models import Request
from .request import build_request

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 30.0
LIBRARY_CONNECT_TIMEOUT = 5.0
LIBRARY_TIMEOUT = 120.0


class Transport(Protocol):
    """
    Sends one request and returns what came back.

    ``exchange`` returns the raw response bytes, True when the request was
    sent and no response was wanted, or False when the exchange failed.
    It never raises for network failures.
    """

    def exchange(self, request: Request, want_response: bool = True) -> bytes | bool: ...


class SocketTransport:
    """
    Writes the raw request to a TCP/TLS socket and reads until the server
    closes it. Only connecting is bounded by a timeout.
    """

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        verify: bool = True,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.verify = verify

    def exchange(self, request: Request, want_response: bool = True) -> bytes | bool:
        url = request.url
        logger.debug(f"{request.method} {url.url} via socket")
        sock: socket.socket | None = None
        try:
            payload = build_request(request)
            sock = self.connect(url.host, url.port, url.scheme)
            sock.sendall(payload)
            if not want_response:
                return True
            return self._read_until_close(sock)
        except (ConnectionError, OSError, UnicodeError) as exc:
            logger.warning(f"Request to {url.url} failed: {exc}")
            return False
        finally:
            if sock is not None:
                sock.close()

    def connect(self, host: str, port: int, scheme: str) -> socket.socket:
        raw = self._open_tcp(host, port)
        if scheme != "https":
            raw.settimeout(None)
            return raw

        context = ssl.create_default_context()
        if not self.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        try:
            wrapped = context.wrap_socket(raw, server_hostname=host)
        except (ssl.SSLError, OSError) as exc:
            raw.close()
            raise TLSNegotiationError(f"TLS handshake failed: {exc}") from exc
        wrapped.settimeout(None)
        return wrapped

    def _read_until_close(self, sock: socket.socket) -> bytes:
        chunks: list[bytes] = []
        while True:
            data = sock.recv(4096)
            if not data:
                break
            chunks.append(data)
        return b"".join(chunks)

    def _open_tcp(self, host: str, port: int) -> socket.socket:
        try:
            return socket.create_connection((host, port), timeout=self.connect_timeout)
        except OSError as exc:
            raise ConnectionError(f"TCP connection failed: {exc}") from exc


class HttpxTransport:
    """
    Sends the request through httpx.

    The response is serialised back into HTTP/1.1 bytes so it goes through
    the same parser as the socket transport. httpx has already removed the
    chunked framing; content encoding is left for the parser.
    """

    def __init__(
        self,
        verify: bool = False,
        connect_timeout: float = LIBRARY_CONNECT_TIMEOUT,
        timeout: float = LIBRARY_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.verify = verify
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self.transport = transport

    def exchange(self, request: Request, want_response: bool = True) -> bytes | bool:
        if want_response:
            timeout = httpx.Timeout(self.timeout, connect=self.connect_timeout)
        else:
            timeout = httpx.Timeout(None)

        logger.debug(f"{request.method} {request.url.url} via httpx")
        try:
            # httpx encodes str header values as ASCII; pass UTF-8 bytes.
            headers = [
                (name, value.encode("utf-8"))
                for name, value in request.headers
                if name.lower() != "content-length"
            ]
            if request.cookie_header:
                headers.append(("Cookie", request.cookie_header.encode("utf-8")))

            with httpx.Client(
                verify=self.verify, timeout=timeout, transport=self.transport
            ) as client:
                with client.stream(
                    request.method,
                    request.url.url,
                    headers=headers,
                    content=request.body or None,
                ) as response:
                    if not want_response:
                        return True
                    raw_body = b"".join(response.iter_raw())
                    return _serialize_response(response, raw_body)
        except (httpx.HTTPError, UnicodeError) as exc:
            logger.warning(f"Request to {request.url.url} failed: {exc}")
            return False


def _serialize_response(response: httpx.Response, body: bytes) -> bytes:
    version = response.http_version or "HTTP/1.1"
    lines = [f"{version} {response.status_code} {response.reason_phrase}\r\n".encode("latin-1")]
    for name, value in response.headers.raw:
        if name.lower() == b"transfer-encoding":
            continue
        lines.append(name + b": " + value + b"\r\n")
    lines.append(b"\r\n")
    return b"".join(lines) + body
