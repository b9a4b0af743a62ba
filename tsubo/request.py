from __future__ import annotations

import urllib.parse
from collections.abc import Mapping

from .headers import RequestHeaders
from .models import Request

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
BODY_METHODS = ("POST", "PUT")


def encode_body(
    method: str,
    data: Mapping[str, str] | str | None,
    headers: RequestHeaders,
) -> bytes:
    """
    Encode the request body and set the headers that describe it.

    Form mappings are url-encoded with a form Content-Type. Strings are
    sent as given and the caller owns Content-Type. Only POST and PUT
    carry a body.
    """
    if method not in BODY_METHODS or data is None:
        return b""
    if isinstance(data, str):
        body = data.encode("utf-8")
    else:
        body = urllib.parse.urlencode(dict(data)).encode("utf-8")
        headers.set("Content-Type", FORM_CONTENT_TYPE)
    if body:
        headers.set("Content-Length", str(len(body)))
    return body


def build_request_head(request: Request) -> bytes:
    lines = [f"{request.method} {request.url.target} HTTP/1.1\r\n".encode("ascii")]
    for name, value in request.headers:
        lines.append(f"{name}: {value}\r\n".encode("utf-8"))
    if request.cookie_header:
        lines.append(f"cookie: {request.cookie_header}\r\n".encode("utf-8"))
    lines.append(b"\r\n")
    return b"".join(lines)


def build_request(request: Request) -> bytes:
    return build_request_head(request) + request.body
