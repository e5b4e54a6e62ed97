"""Response sanitization.

API payloads carry user-generated text (list descriptions, comments,
usernames). When a client renders that text in HTML, markup coming from the
API must not be trusted, so by default every string leaf of a decoded
response is passed through :func:`nh3.clean`, which drops disallowed tags and
attributes and escapes the rest.

The string function is pluggable: :class:`~traktclient.trakt.Trakt`
accepts any ``Callable[[str], str]`` as ``sanitizer``.
"""

from __future__ import annotations

from typing import Any, Callable

import nh3

StringSanitizer = Callable[[str], str]


def clean_string(value: str) -> str:
    """Default string sanitizer: strip unsafe HTML with :func:`nh3.clean`."""
    return nh3.clean(value)


def sanitize(payload: Any, sanitizer: StringSanitizer = clean_string) -> Any:
    """Return a copy of *payload* with every string leaf passed through *sanitizer*.

    The walk covers the JSON value space: objects and arrays are rebuilt
    recursively, strings are rewritten, and every other scalar (numbers,
    booleans, ``None``) is returned unchanged. Object keys are left alone.

    Args:
        payload: A decoded JSON document or a bare string.
        sanitizer: Function applied to each string leaf.

    Returns:
        The sanitized value. The input is never modified.
    """
    if isinstance(payload, dict):
        return {key: sanitize(value, sanitizer) for key, value in payload.items()}
    if isinstance(payload, list):
        return [sanitize(item, sanitizer) for item in payload]
    if isinstance(payload, str):
        return sanitizer(payload)
    return payload


def make_transform(sanitizer: StringSanitizer) -> Callable[[Any], Any]:
    """Bind *sanitizer* into a one-argument response transform for the transport."""

    def _transform(payload: Any) -> Any:
        return sanitize(payload, sanitizer)

    return _transform
