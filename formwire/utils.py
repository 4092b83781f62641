from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlsplit, urlunsplit

from .form import encode_form


def parse_url(url: str):
    parsed = urlsplit(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError("Only http and https schemes are supported")
    if not parsed.hostname:
        raise ValueError(f"URL has no host: {url}")
    return parsed


def append_query(url: str, parameters: Mapping[str, object]) -> str:
    """Append form-encoded parameters after any query the URL already has."""
    extra = encode_form(parameters)
    if not extra:
        return url
    parsed = urlsplit(url)
    query = f"{parsed.query}&{extra}" if parsed.query else extra
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, query, parsed.fragment))
