"""application/x-www-form-urlencoded encoding."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote

# RFC 3986 section 3.4 leaves "?" and "/" unescaped in query components.
_SAFE = "/?"


def _escape(value: str) -> str:
    return quote(value, safe=_SAFE)


def _format_scalar(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def form_pairs(key: str, value: object) -> list[tuple[str, str]]:
    """
    Flatten one key/value into escaped pairs, expanding mappings to
    key[nested] and sequences to key[].
    """
    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for nested_key, nested_value in value.items():
            pairs.extend(form_pairs(f"{key}[{nested_key}]", nested_value))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for item in value:
            pairs.extend(form_pairs(f"{key}[]", item))
        return pairs
    return [(_escape(key), _escape(_format_scalar(value)))]


def encode_form(parameters: Mapping[str, object]) -> str:
    """
    Encode parameters as a URL-encoded form string.
    Top-level keys are sorted so output is deterministic.
    """
    pairs: list[tuple[str, str]] = []
    for key in sorted(parameters):
        pairs.extend(form_pairs(key, parameters[key]))
    return "&".join(f"{k}={v}" for k, v in pairs)
