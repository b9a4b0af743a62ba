from __future__ import annotations

import logging
import re
import socket
from typing import NamedTuple
from urllib.parse import parse_qsl, urlencode, urlsplit

from .errors import InvalidUrlError

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

URL_PATTERN = re.compile(
    r"^(?:(?P<scheme>https?)://)?"
    r"(?P<host>(?:[a-z0-9\-]{1,63}\.){1,6}[a-z]+"
    r"|(?:(?:[12]\d\d|\d\d|\d)\.){3}(?:[12]\d\d|\d\d|\d)"
    r"|localhost)"
    r"(?::(?P<port>[1-9][0-9]{0,4}))?"
    r"(?P<path>(?:/[_\-A-Za-z0-9.@\[\]%]+)*/?)?"
    r"(?:\?(?P<query>(?:[0-9a-z_A-Z\-]+=[\S ]*&?)*))?$",
    re.IGNORECASE,
)


class UrlParts(NamedTuple):
    scheme: str
    host: str
    port: int
    path: str
    query: str
    original: str

    @property
    def target(self) -> str:
        """Request-target as written on the request line."""
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path

    @property
    def host_header(self) -> str:
        if self.port == DEFAULT_PORTS[self.scheme]:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host_header}{self.target}"

    def with_port(self, port: int) -> UrlParts:
        return self._replace(port=port)

    def with_query(self, query: str) -> UrlParts:
        return self._replace(query=rebuild_query(query))


def rebuild_query(query: str | None) -> str:
    """
    Re-encode a query string from its parsed pairs.

    Senders are forgiving about encoding, so the pairs are decoded and
    encoded again instead of being passed through verbatim.
    """
    if not query:
        return ""
    return urlencode(parse_qsl(query, keep_blank_values=True))


def validate_url(url: str) -> UrlParts:
    """
    Validate a URL and split it into the parts used to build a request.

    Raises:
        InvalidUrlError: if the URL is not an http(s) URL this client accepts.
    """
    if not isinstance(url, str):
        raise InvalidUrlError("Invalid Url provided")
    match = URL_PATTERN.match(url)
    if not match:
        raise InvalidUrlError(f"Invalid Url provided: {url!r}")

    scheme = (match.group("scheme") or "http").lower()
    port = int(match.group("port")) if match.group("port") else DEFAULT_PORTS[scheme]
    return UrlParts(
        scheme=scheme,
        host=match.group("host").lower(),
        port=port,
        path=match.group("path") or "/",
        query=rebuild_query(match.group("query")),
        original=url,
    )


def parse_url(url: str) -> tuple[str, str, str]:
    """Leniently split a URL into (scheme, host, path) for cookie scoping."""
    parsed = urlsplit(url)
    return parsed.scheme.lower(), parsed.hostname or "", parsed.path or "/"


def resolve_host(host: str) -> bool:
    """Return True when the host name resolves to at least one address."""
    try:
        return bool(socket.getaddrinfo(host, None))
    except (socket.gaierror, UnicodeError) as exc:
        logger.warning(f"Could not resolve {host}: {exc}")
        return False
