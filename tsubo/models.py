from __future__ import annotations

import json
from collections.abc import Iterable

from .headers import RequestHeaders
from .utils import UrlParts


class Request:
    """One outgoing request, as handed to a transport."""

    def __init__(
        self,
        method: str,
        url: UrlParts,
        headers: RequestHeaders,
        body: bytes = b"",
        cookie_header: str = "",
    ) -> None:
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body
        self.cookie_header = cookie_header

    def __repr__(self) -> str:
        return f"<Request [{self.method}] {self.url.url}>"


class Response:
    """
    Decoded HTTP response.

    ``headers`` maps lower-cased names to a single value, or to a list of
    values when the name was repeated. ``set-cookie`` is always a list.
    """

    def __init__(
        self,
        status_code: int,
        reason: str,
        http_version: str,
        headers: Iterable[tuple[str, str]],
        body: bytes,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.http_version = http_version
        self.raw_headers: list[tuple[str, str]] = list(headers)
        self.headers = coalesce_headers(self.raw_headers)
        self._body = body

    def get_list(self, name: str) -> list[str]:
        value = self.headers.get(name.lower())
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        return [value]

    def header(self, name: str, default: str | None = None) -> str | None:
        """Last value received for ``name``."""
        values = self.get_list(name)
        return values[-1] if values else default

    @property
    def content(self) -> bytes:
        return self._body

    @property
    def text(self) -> str:
        encoding = "utf-8"
        ctype = self.header("content-type")
        if ctype and "charset=" in ctype:
            encoding = ctype.split("charset=")[-1].split(";")[0].strip() or encoding
        try:
            return self._body.decode(encoding, errors="replace")
        except LookupError:
            return self._body.decode("utf-8", errors="replace")

    def json(self) -> object:
        return json.loads(self.text)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] {len(self._body)} bytes>"


def coalesce_headers(
    headers: Iterable[tuple[str, str]],
) -> dict[str, str | list[str]]:
    out: dict[str, str | list[str]] = {}
    for name, value in headers:
        key = name.lower()
        current = out.get(key)
        if current is None:
            out[key] = [value] if key == "set-cookie" else value
        elif isinstance(current, list):
            current.append(value)
        else:
            out[key] = [current, value]
    return out
