from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)


def _sanitize_header(name: str, value: str) -> tuple[str, str]:
    """
    Strip CR, LF and NUL from a header name and value to prevent header
    injection.
    """
    clean_name = name.replace("\r", "").replace("\n", "").replace("\x00", "")
    clean_value = value.replace("\r", "").replace("\n", "").replace("\x00", "")
    return clean_name, clean_value


def sanitize_headers(headers: Mapping[str, str] | None) -> list[tuple[str, str]]:
    if not headers:
        return []
    return [_sanitize_header(name, str(value)) for name, value in headers.items()]


def get_header(headers: Iterable[tuple[str, str]], name: str) -> str | None:
    # Last-write wins, matching how responses expose headers.
    found = None
    key = name.lower()
    for header_name, value in headers:
        if header_name.lower() == key:
            found = value
    return found


def set_header(headers: list[tuple[str, str]], name: str, value: str) -> None:
    """
    Replace every header called `name` (case-insensitive) with a single
    entry, keeping the position of the first one.
    """
    name, value = _sanitize_header(name, value)
    key = name.lower()
    existing = get_header(headers, name)
    if existing is not None and existing != value:
        logger.warning("Overriding existing %s header %r with %r", name, existing, value)

    out: list[tuple[str, str]] = []
    placed = False
    for header_name, header_value in headers:
        if header_name.lower() != key:
            out.append((header_name, header_value))
        elif not placed:
            out.append((name, value))
            placed = True
    if not placed:
        out.append((name, value))
    headers[:] = out
