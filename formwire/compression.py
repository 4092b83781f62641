"""
Content-Encoding decoding for response bodies.

Supports gzip, deflate and brotli (br).
"""

from __future__ import annotations

import gzip
import logging
import zlib

import brotli

logger = logging.getLogger(__name__)


def _gunzip(body: bytes) -> bytes:
    return gzip.decompress(body)


def _inflate(body: bytes) -> bytes:
    try:
        # Raw deflate first (no zlib header)
        return zlib.decompress(body, -zlib.MAX_WBITS)
    except zlib.error:
        return zlib.decompress(body)


_DECODERS = {
    "gzip": _gunzip,
    "x-gzip": _gunzip,
    "deflate": _inflate,
    "br": brotli.decompress,
}


def decode_body(body: bytes, content_encoding: str | None) -> bytes:
    """
    Decode a body according to its Content-Encoding header.

    Encodings are undone in reverse order of application. Unknown encodings
    and bodies that fail to decode are returned unchanged.
    """
    if not content_encoding or not body:
        return body

    encodings = [e.strip().lower() for e in content_encoding.split(",") if e.strip()]
    result = body
    for enc in reversed(encodings):
        if enc == "identity":
            continue
        decoder = _DECODERS.get(enc)
        if decoder is None:
            logger.warning("Unsupported Content-Encoding %r, leaving body as-is", enc)
            return result
        try:
            result = decoder(result)
        except (OSError, EOFError, zlib.error, brotli.error) as exc:
            logger.warning("Failed to decode %s body: %s", enc, exc)
            return result
    return result
