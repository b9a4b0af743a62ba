from __future__ import annotations

import logging
import os
import time
import urllib.parse
from collections.abc import Callable, Mapping

from .cookies import CookieJar
from .errors import InvalidBodyError, InvalidMethodError, ProtocolError, TsuboError
from .headers import RequestHeaders
from .models import Request, Response
from .parser import parse_response
from .request import encode_body
from .transport import HttpxTransport, SocketTransport, Transport
from .utils import UrlParts, resolve_host, validate_url

logger = logging.getLogger(__name__)

METHODS = ("GET", "HEAD", "POST", "PUT", "DELETE", "TRACE", "OPTIONS")


class Client:
    """
    Single-request HTTP/1.1 client with a browser-like cookie jar.

    The client holds one configured request at a time. ``send`` performs it
    and keeps the decoded response; cookies persist across sends in the jar.

    Args:
        url: Initial target URL
        use_library: Send through httpx instead of a raw socket
        transport: Explicit transport; overrides ``use_library``
        keep_cookies: Keep a cookie jar across requests
        cookie_path: File the jar is loaded from and saved to (implies keep_cookies)
        cookie_jar: Existing jar to use (implies keep_cookies)
        resolver: Callable checking that a host resolves (default: DNS lookup)
        verify: Verify TLS certificates; None keeps the transport default
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        use_library: bool = False,
        transport: Transport | None = None,
        keep_cookies: bool = False,
        cookie_path: str | os.PathLike[str] | None = None,
        cookie_jar: CookieJar | None = None,
        resolver: Callable[[str], bool] | None = None,
        verify: bool | None = None,
    ) -> None:
        if transport is None:
            if use_library:
                transport = HttpxTransport() if verify is None else HttpxTransport(verify=verify)
            else:
                transport = SocketTransport() if verify is None else SocketTransport(verify=verify)
        self.transport = transport
        self.resolver = resolver or resolve_host

        if cookie_jar is None and (keep_cookies or cookie_path):
            cookie_jar = CookieJar(cookie_path)
        self._cookies = cookie_jar

        self._url: UrlParts | None = None
        self._method = "GET"
        self._headers = RequestHeaders()
        self._data: dict[str, str] | str = {}
        self._response: Response | None = None
        if url:
            self.set_url(url)

    def set_url(self, url: str, reset_headers: bool = True, set_query: bool = True) -> None:
        """
        Point the client at a new URL.

        Args:
            url: URL to validate and use
            reset_headers: Drop previously added request headers
            set_query: Take the query string from ``url``; otherwise keep the
                current one

        Raises:
            InvalidUrlError: if the URL does not validate
        """
        parts = validate_url(url)
        if not set_query:
            parts = parts._replace(query=self._url.query if self._url else "")
        if reset_headers:
            self._headers.clear()
        self._url = parts
        self._headers.set("Host", parts.host_header)

    @property
    def url(self) -> UrlParts | None:
        return self._url

    @url.setter
    def url(self, url: str) -> None:
        self.set_url(url)

    @property
    def method(self) -> str:
        return self._method

    @method.setter
    def method(self, method: str) -> None:
        method = method.upper()
        if method not in METHODS:
            raise InvalidMethodError(f"Unsupported method: {method}")
        self._method = method

    @property
    def port(self) -> int | None:
        return self._url.port if self._url else None

    @port.setter
    def port(self, port: int) -> None:
        if self._url is None:
            raise TsuboError("No URL configured")
        self._url = self._url.with_port(int(port))
        self._headers.set("Host", self._url.host_header)

    @property
    def query_string(self) -> str:
        return self._url.query if self._url else ""

    @query_string.setter
    def query_string(self, query: str) -> None:
        if self._url is None:
            raise TsuboError("No URL configured")
        self._url = self._url.with_query(query)

    def add_header(self, name: str, value: object) -> None:
        """
        Add a header to the next request.

        Raises:
            InvalidHeaderError: for invalid names and for Content-Length or
                Cookie, which are computed.
        """
        self._headers.add(name, value)

    def add_form_data(self, data: Mapping[str, str] | str) -> dict[str, str]:
        """
        Merge form fields into the next POST/PUT body.

        ``data`` is a mapping or an ``a=1&b=2`` string. Replaces any raw
        content set with ``set_content``.
        """
        if isinstance(data, str):
            if "=" not in data:
                raise InvalidBodyError(f"Form data must be key=value pairs: {data!r}")
            data = dict(urllib.parse.parse_qsl(data, keep_blank_values=True))
        if not isinstance(self._data, dict):
            self._data = {}
        self._data.update(data)
        return dict(self._data)

    def set_content(self, content: str) -> None:
        """Use an opaque pre-encoded string as the next POST/PUT body."""
        if not isinstance(content, str) or not content:
            raise InvalidBodyError("Invalid Post String must be String")
        self._data = content

    def send(self, capture_response: bool = True) -> bool:
        """
        Perform the configured request.

        Args:
            capture_response: Wait for and decode the response. When False
                the request is written and the connection dropped.

        Returns:
            True on success, False when the host does not resolve, the
            transport fails or the response cannot be parsed
        """
        if self._url is None:
            raise TsuboError("No URL configured")
        self._response = None
        url = self._url
        self._headers.set("Connection", "Close")

        if not self.resolver(url.host):
            logger.warning(f"Host {url.host} did not resolve")
            return False

        headers = self._headers.copy()
        body = encode_body(self._method, self._data or None, headers)
        cookie_header = ""
        if self._cookies is not None and len(self._cookies):
            cookie_header = self._cookies.serve(url.url, time.time())
        request = Request(self._method, url, headers, body, cookie_header)

        result = self.transport.exchange(request, capture_response)
        if result is True or result is False:
            return result
        if not result:
            logger.warning(f"Empty response from {url.url}")
            return False

        try:
            response = parse_response(result, self._method)
        except ProtocolError as exc:
            logger.warning(f"Unparseable response from {url.url}: {exc}")
            return False

        if self._cookies is not None:
            for line in response.get_list("set-cookie"):
                self._cookies.store_from_line(line, url.url)
        self._response = response

        if self._cookies is not None and self._cookies.path:
            self._cookies.save()
        return True

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        data: Mapping[str, str] | str | None = None,
    ) -> Response | None:
        """
        Configure and send a request in one call.

        Returns:
            The Response, or None when the exchange failed
        """
        self.set_url(url)
        self.method = method
        for name, value in (headers or {}).items():
            self.add_header(name, value)
        self._data = {}
        if isinstance(data, str):
            self.set_content(data)
        elif data is not None:
            self.add_form_data(data)
        if not self.send():
            return None
        return self._response

    def get(self, url: str, headers: dict[str, str] | None = None) -> Response | None:
        return self.request("GET", url, headers=headers)

    def head(self, url: str, headers: dict[str, str] | None = None) -> Response | None:
        return self.request("HEAD", url, headers=headers)

    def post(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        data: Mapping[str, str] | str | None = None,
    ) -> Response | None:
        return self.request("POST", url, headers=headers, data=data)

    @property
    def response(self) -> Response | None:
        return self._response

    @property
    def status_code(self) -> int | None:
        return self._response.status_code if self._response else None

    @property
    def response_headers(self) -> dict[str, str | list[str]]:
        return dict(self._response.headers) if self._response else {}

    @property
    def response_content(self) -> bytes | None:
        return self._response.content if self._response else None

    @property
    def request_headers(self) -> list[tuple[str, str]]:
        return self._headers.items()

    @property
    def cookies(self) -> CookieJar | None:
        return self._cookies

    def close(self) -> None:
        if self._cookies is not None and self._cookies.path:
            self._cookies.save()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
