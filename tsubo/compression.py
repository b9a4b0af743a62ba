"""
Body decoding for transfer and content encodings.

Chunked transfer-encoding and gzip content-encoding are decoded; any other
encoding is passed through untouched.
"""

from __future__ import annotations

import gzip
import logging
import zlib

from .errors import ProtocolError

logger = logging.getLogger(__name__)


def decode_chunked(data: bytes) -> bytes:
    """
    Decode a chunked transfer-encoded body.

    Args:
        data: Body bytes as received, starting at the first chunk size line

    Returns:
        The concatenated chunk payloads

    Raises:
        ProtocolError: on a malformed chunk size line or a truncated chunk
    """
    chunks: list[bytes] = []
    pos = 0
    while pos < len(data):
        line_end = data.find(b"\r\n", pos)
        if line_end == -1:
            raise ProtocolError(f"Unterminated chunk size line: {data[pos:pos + 20]!r}")
        size_line = data[pos:line_end].split(b";", 1)[0].strip()
        try:
            size = int(size_line, 16)
        except ValueError as exc:
            raise ProtocolError(f"Invalid chunk size line: {size_line!r}") from exc
        if size == 0:
            # Trailers, if any, are ignored.
            break
        start = line_end + 2
        end = start + size
        if end > len(data):
            raise ProtocolError("Unexpected EOF while reading chunk")
        chunks.append(data[start:end])
        # Discard CRLF
        pos = end + 2
    return b"".join(chunks)


def decode_body(body: bytes, content_encoding: str) -> bytes:
    """
    Decode response body based on Content-Encoding header.

    Args:
        body: Raw response body bytes
        content_encoding: Value of Content-Encoding header

    Returns:
        Decoded body bytes, or the body unchanged when it is not gzip or
        cannot be decompressed
    """
    if not content_encoding or not body:
        return body

    if content_encoding.lower().strip() != "gzip":
        return body
    try:
        return gzip.decompress(body)
    except (OSError, EOFError, zlib.error) as exc:
        logger.warning(f"Could not gunzip response body: {exc}")
        return body
