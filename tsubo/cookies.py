from __future__ import annotations

import enum
import logging
import os
import time
from collections.abc import Iterator
from dataclasses import dataclass
from http.cookiejar import http2time
from urllib.parse import quote, unquote_plus

from .errors import (
    CookieError,
    InvalidCookieDomainError,
    InvalidCookieExpirationError,
    InvalidCookieNameError,
    InvalidCookiePathError,
    InvalidCookieValueError,
)
from .utils import parse_url

logger = logging.getLogger(__name__)

_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_MONTHS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def cookie_dir_path(path: str) -> str:
    """
    Directory portion of a path, up to and including the last slash.

    Unlike os.path.dirname this keeps the trailing slash, so "/a/b/" stays
    "/a/b/" and "/a/b" becomes "/a/".
    """
    return path[: path.rfind("/") + 1]


def format_cookie_date(epoch: int) -> str:
    # Fixed English names; strftime would follow the process locale.
    t = time.gmtime(epoch)
    return (
        f"{_WEEKDAYS[t.tm_wday]}, {t.tm_mday:02d}-{_MONTHS[t.tm_mon - 1]}-{t.tm_year:04d} "
        f"{t.tm_hour:02d}:{t.tm_min:02d}:{t.tm_sec:02d} GMT"
    )


@dataclass(frozen=True)
class Cookie:
    """
    A single HTTP cookie.

    Fields are fixed after construction; a changed cookie is a new Cookie.
    A ``domain`` of None matches every host. ``http_only`` is kept only so
    the flag survives a save/load round trip.
    """

    name: str
    value: str = ""
    expires: int = 0
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    http_only: bool = False

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise InvalidCookieNameError("Cookie name must be non-empty string")
        if not isinstance(self.value, str):
            raise InvalidCookieValueError("Cookie value must be a string")
        object.__setattr__(self, "expires", self._coerce_expires(self.expires))
        if not isinstance(self.path, str) or not self.path.startswith("/"):
            raise InvalidCookiePathError(
                "Cookie path is invalid. It must be a string of absolute path"
            )
        if self.domain is not None and not isinstance(self.domain, str):
            raise InvalidCookieDomainError("Domain must be valid string")
        if self.domain == "":
            object.__setattr__(self, "domain", None)
        object.__setattr__(self, "secure", bool(self.secure))
        object.__setattr__(self, "http_only", bool(self.http_only))

    @staticmethod
    def _coerce_expires(expires: object) -> int:
        if isinstance(expires, bool):
            raise InvalidCookieExpirationError("Cookie expiration must be a timestamp")
        if isinstance(expires, int):
            return expires
        if isinstance(expires, str) and expires.strip():
            parsed = http2time(expires.strip())
            if parsed is not None:
                return int(parsed)
        raise InvalidCookieExpirationError(
            f"Cookie expiration must be a timestamp, got {expires!r}"
        )

    def get_cookie_line(self, request_only: bool = True) -> str:
        """
        Render the cookie for a Cookie request header, or as a full
        Set-Cookie value when ``request_only`` is False.

        The full form percent-encodes name and value so parse_cookie_line
        reads them back unchanged.
        """
        if request_only:
            return f"{self.name}={self.value}"
        line = f"{quote(self.name)}={quote(self.value)}"
        if self.domain:
            line += f"; Domain={self.domain}"
        if self.path:
            line += f"; Path={self.path}"
        if self.expires:
            line += f"; expires={format_cookie_date(self.expires)}"
        if self.secure:
            line += "; secure"
        if self.http_only:
            line += "; httponly"
        return line

    def is_valid(self, url: str = "", as_of: float | None = None) -> bool:
        """
        Whether the cookie should be sent to ``url`` at time ``as_of``.

        ``as_of`` is the moment validity is judged and defaults to now. A
        cookie with a non-zero ``expires`` earlier than ``as_of`` is expired.
        This is not a comparison of ``as_of`` against the current clock.
        An empty ``url`` checks expiry only.
        """
        if url:
            scheme, host, path = parse_url(url)
            if not host:
                return False
            if not (
                self.matches_domain(host)
                and self.matches_path(path)
                and self.matches_security(scheme)
            ):
                return False
        return not self.is_expired(as_of)

    def is_expired(self, as_of: float | None = None) -> bool:
        if self.expires == 0:
            return False
        if as_of is None:
            as_of = time.time()
        return self.expires < as_of

    def matches_domain(self, host: str) -> bool:
        if self.domain is None:
            return True

        labels = self.domain.lower().split(".")
        # Leading dot, or a bare two-label domain, also covers subdomains.
        include_subdomains = False
        if labels[0] == "":
            include_subdomains = True
            labels = labels[1:]
        elif len(labels) == 2:
            include_subdomains = True

        cookie_labels = labels[::-1]
        host_labels = host.lower().split(".")[::-1]
        if len(host_labels) < len(cookie_labels):
            return False

        for index, part in enumerate(host_labels):
            if index >= len(cookie_labels):
                return include_subdomains
            if part != cookie_labels[index]:
                return False
        return True

    def matches_path(self, path: str) -> bool:
        if self.path == "/":
            return True
        scope = cookie_dir_path(self.path).strip("/")
        if not scope:
            return True
        candidate = path.lstrip("/").split("/")
        for index, piece in enumerate(scope.split("/")):
            if index >= len(candidate) or candidate[index] != piece:
                return False
        return True

    def matches_security(self, scheme: str) -> bool:
        return not self.secure or scheme.lower() == "https"

    def __str__(self) -> str:
        return self.get_cookie_line()


class ParseOutcome(enum.Enum):
    COOKIE = "cookie"
    DELETE = "delete"
    FAILURE = "failure"


@dataclass(frozen=True)
class CookieParseResult:
    """Outcome of parsing one Set-Cookie line; inspect ``kind``."""

    kind: ParseOutcome
    cookie: Cookie | None = None
    name: str | None = None
    reason: str | None = None

    @classmethod
    def stored(cls, cookie: Cookie) -> CookieParseResult:
        return cls(ParseOutcome.COOKIE, cookie=cookie, name=cookie.name)

    @classmethod
    def deletion(cls, name: str) -> CookieParseResult:
        return cls(ParseOutcome.DELETE, name=name)

    @classmethod
    def failure(cls, reason: str) -> CookieParseResult:
        return cls(ParseOutcome.FAILURE, reason=reason)


def parse_cookie_line(line: str, origin_url: str = "") -> CookieParseResult:
    """
    Parse a Set-Cookie header value.

    Args:
        line: Header value, optionally still prefixed with "Set-Cookie:"
        origin_url: URL the cookie came from; supplies the default domain
            and path when the line omits them

    Returns:
        CookieParseResult of kind COOKIE, DELETE (empty value) or FAILURE
    """
    if line[:11].lower() == "set-cookie:":
        line = line[11:].strip()

    attrs: dict[str, object] = {
        "expires": 0,
        "path": "/",
        "domain": None,
        "secure": False,
        "http_only": False,
    }
    if origin_url:
        _, host, path = parse_url(origin_url)
        attrs["domain"] = host or None
        attrs["path"] = cookie_dir_path(path) or "/"

    first, *segments = line.split(";")
    key, sep, value = first.partition("=")
    key = unquote_plus(key.strip())
    value = unquote_plus(value.strip())
    if key and sep and value == "":
        return CookieParseResult.deletion(key)
    if not key or not value:
        return CookieParseResult.failure(f"Missing cookie name or value in {line!r}")

    for segment in segments:
        attr, _, attr_value = segment.strip().partition("=")
        attr = attr.strip().lower()
        attr_value = attr_value.strip()
        if attr == "expires":
            attrs["expires"] = attr_value
        elif attr == "path" and attr_value:
            attrs["path"] = cookie_dir_path(attr_value)
        elif attr == "domain":
            attrs["domain"] = attr_value or None
        elif attr == "secure":
            attrs["secure"] = True
        elif attr == "httponly":
            attrs["http_only"] = True

    try:
        cookie = Cookie(key, value, **attrs)  # type: ignore[arg-type]
    except CookieError as exc:
        return CookieParseResult.failure(str(exc))
    return CookieParseResult.stored(cookie)


class CookieJar:
    """
    Cookie store keyed by cookie name only.

    Domain and path are checked when serving, not when storing, so two
    sites that set a cookie with the same name overwrite each other.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._cookies: dict[str, Cookie] = {}
        self.path = path
        if path:
            self.load(path)

    def store_from_line(self, line: str, origin_url: str = "") -> Cookie | bool:
        """
        Parse a Set-Cookie line and apply it to the jar.

        Returns the stored Cookie, True when a deletion removed an existing
        cookie, or False when nothing was stored or removed.
        """
        result = parse_cookie_line(line, origin_url)
        if result.kind is ParseOutcome.COOKIE:
            assert result.cookie is not None
            self._cookies[result.cookie.name] = result.cookie
            logger.debug(f"Stored cookie {result.cookie.name!r}")
            return result.cookie
        if result.kind is ParseOutcome.DELETE:
            assert result.name is not None
            return self.remove(result.name)
        logger.debug(f"Ignored cookie line: {result.reason}")
        return False

    def add(
        self,
        cookie: Cookie | str,
        value: str = "",
        expires: int | str = 0,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        http_only: bool = False,
    ) -> Cookie:
        if not isinstance(cookie, Cookie):
            cookie = Cookie(cookie, value, expires, path, domain, secure, http_only)  # type: ignore[arg-type]
        self._cookies[cookie.name] = cookie
        return cookie

    def remove(self, cookie: Cookie | str) -> bool:
        name = cookie.name if isinstance(cookie, Cookie) else cookie
        if name not in self._cookies:
            return False
        del self._cookies[name]
        logger.debug(f"Removed cookie {name!r}")
        return True

    def serve(self, url: str, as_of: float | None = None) -> str:
        """Cookie header value for ``url``; empty when nothing applies."""
        return "; ".join(
            cookie.get_cookie_line(True)
            for cookie in self._cookies.values()
            if cookie.is_valid(url, as_of)
        )

    def export(self, as_of: float | None = None) -> str:
        """All unexpired cookies as CRLF-separated Set-Cookie lines."""
        return "\r\n".join(
            cookie.get_cookie_line(False)
            for cookie in self._cookies.values()
            if cookie.is_valid("", as_of)
        )

    def load(self, path: str | os.PathLike[str] | None = None) -> int:
        """
        Fill the jar from a file written by save().

        Returns the number of lines read; a missing file reads as empty.
        """
        path = path or self.path
        if not path or not os.path.exists(path):
            return 0
        with open(path, encoding="utf-8", newline="") as f:
            content = f.read().rstrip()
        lines = [line for line in content.split("\r\n") if line.strip()]
        for line in lines:
            self.store_from_line(line)
        logger.debug(f"Loaded {len(lines)} cookie lines from {path}")
        return len(lines)

    def save(self) -> bool:
        if not self.path:
            return False
        try:
            with open(self.path, "w", encoding="utf-8", newline="") as f:
                f.write(self.export())
        except OSError as exc:
            logger.warning(f"Could not save cookies to {self.path}: {exc}")
            return False
        return True

    def get(self, name: str) -> Cookie | None:
        return self._cookies.get(name)

    def __getitem__(self, name: str) -> Cookie:
        return self._cookies[name]

    def __contains__(self, name: object) -> bool:
        return name in self._cookies

    def __iter__(self) -> Iterator[Cookie]:
        return iter(list(self._cookies.values()))

    def __len__(self) -> int:
        return len(self._cookies)

    def __repr__(self) -> str:
        return f"<Cookies {list(self._cookies)}>"
