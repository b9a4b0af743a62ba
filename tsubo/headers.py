from __future__ import annotations

import re
from collections.abc import Iterator

from .errors import InvalidHeaderError

# Computed by the client from the body and the cookie jar.
RESERVED_HEADERS = frozenset({"content-length", "cookie"})

_TOKEN = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z\-]+$")
_NAME_RUN = re.compile(r"[A-Za-z\-_]{2,}")


def _sanitize_header(name: str, value: str) -> tuple[str, str]:
    """
    Sanitize header name and value to prevent HTTP header injection (CRLF injection).
    Strips CR, LF, and null bytes from both name and value.
    """
    clean_name = name.replace("\r", "").replace("\n", "").replace("\x00", "")
    clean_value = value.replace("\r", "").replace("\n", "").replace("\x00", "")
    return clean_name, clean_value


def is_valid_header_name(name: str) -> bool:
    return bool(
        isinstance(name, str) and _TOKEN.match(name) and _NAME_RUN.search(name)
    )


class RequestHeaders:
    """
    Ordered request headers.

    Names keep the case they were first set with; lookups and replacement
    are case-insensitive.
    """

    def __init__(self) -> None:
        self._items: dict[str, tuple[str, str]] = {}

    def add(self, name: str, value: object) -> None:
        """
        Add a caller-supplied header.

        Raises:
            InvalidHeaderError: for malformed names, or Content-Length and
                Cookie, which are always computed.
        """
        if not is_valid_header_name(name):
            raise InvalidHeaderError(f"Invalid header name: {name!r}")
        if name.lower() in RESERVED_HEADERS:
            raise InvalidHeaderError(f"{name} header can not be set directly")
        self.set(name, value)

    def set(self, name: str, value: object) -> None:
        name, text = _sanitize_header(name, str(value))
        key = name.lower()
        if key in self._items:
            name = self._items[key][0]
        self._items[key] = (name, text)

    def get(self, name: str, default: str | None = None) -> str | None:
        item = self._items.get(name.lower())
        return item[1] if item else default

    def remove(self, name: str) -> None:
        self._items.pop(name.lower(), None)

    def clear(self) -> None:
        self._items.clear()

    def items(self) -> list[tuple[str, str]]:
        return list(self._items.values())

    def copy(self) -> RequestHeaders:
        other = RequestHeaders()
        other._items = dict(self._items)
        return other

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<RequestHeaders {dict(self.items())}>"
