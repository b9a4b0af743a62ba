from __future__ import annotations

import re

from .compression import decode_body, decode_chunked
from .errors import ProtocolError
from .models import Response

STATUS_PATTERN = re.compile(r"(?<!\d)([1-5][0-4]\d)(?!\d)")
VERSION_PATTERN = re.compile(r"^HTTP/(\d(?:\.\d)?)\s+\d{3}\s*(.*)$", re.IGNORECASE)


def parse_status_code(status_line: str) -> int:
    match = STATUS_PATTERN.search(status_line)
    if not match:
        raise ProtocolError(f"Malformed status line: {status_line!r}")
    return int(match.group(1))


def parse_header_block(block: bytes) -> tuple[int, str, str, list[tuple[str, str]]]:
    """
    Parse the status line and header lines of a response.

    Returns:
        (status_code, reason, http_version, headers) with header names
        lower-cased and values stripped
    """
    lines = block.decode("latin-1").split("\r\n")
    status_line = lines[0].strip()
    if not status_line:
        raise ProtocolError("Empty response")
    status_code = parse_status_code(status_line)
    version, reason = "1.1", ""
    match = VERSION_PATTERN.match(status_line)
    if match:
        version, reason = match.group(1), match.group(2)

    headers: list[tuple[str, str]] = []
    for line in lines[1:]:
        if not line.strip():
            continue
        name, sep, value = line.partition(":")
        if not sep:
            raise ProtocolError(f"Malformed header line: {line!r}")
        headers.append((name.strip().lower(), value.strip()))
    return status_code, reason, version, headers


def parse_response(raw: bytes, method: str) -> Response:
    """
    Split raw response bytes into a decoded Response.

    HEAD responses have no body; everything received is the header block.

    Raises:
        ProtocolError: when the response cannot be parsed
    """
    if method.upper() == "HEAD":
        head, body = raw.strip(), b""
    else:
        head, _, body = raw.partition(b"\r\n\r\n")

    status_code, reason, version, headers = parse_header_block(head)
    if _last_value(headers, "transfer-encoding").lower() == "chunked":
        body = decode_chunked(body)
    body = decode_body(body, _last_value(headers, "content-encoding"))
    return Response(status_code, reason, version, headers, body)


def _last_value(headers: list[tuple[str, str]], name: str) -> str:
    for key, value in reversed(headers):
        if key == name:
            return value
    return ""
