"""Resolve an endpoint descriptor and call parameters into a request URL.

The URL template of a descriptor has two parts::

    /search/:type?query=&fields=
    \\__________/ \\___________/
        path          query

**Algorithm summary**

1. For each name listed in the query part, append ``name=value`` when the
   parameter is present, in template order.
2. Walk the path segments: literals are kept, ``:name`` placeholders are
   replaced by the encoded parameter. A missing mandatory placeholder raises
   :class:`~traktclient.exceptions.BindingError`; a missing optional one is
   dropped.
3. Append present filter parameters (:data:`FILTER_PARAMETERS`) that are not
   already in the query.
4. Append ``page`` and ``limit`` when the endpoint paginates.
5. Append ``extended`` when the endpoint supports it.

Binding is pure: the same descriptor and parameters always give the same URL.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from traktclient.exceptions import BindingError
from traktclient.models import EndpointDescriptor

FILTER_PARAMETERS: tuple[str, ...] = (
    "query",
    "years",
    "genres",
    "languages",
    "countries",
    "runtimes",
    "ratings",
    "certifications",
    "networks",
    "status",
)
"""Query parameters accepted by every endpoint regardless of its template."""

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def is_present(value: Any) -> bool:
    """Return whether a parameter value counts as supplied.

    ``None``, ``False``, the empty string and empty lists are absent. Every
    number is present, including ``0``.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (str, list, tuple)):
        return len(value) > 0
    return True


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_to_text(item) for item in value)
    return str(value)


def encode_value(value: Any) -> str:
    """Percent-encode *value* the way ``encodeURIComponent`` does.

    Lists and tuples are comma-joined before encoding (the comma itself is
    escaped), booleans render as ``true`` / ``false``.

    Example::

        >>> encode_value("a b&c")
        'a%20b%26c'
        >>> encode_value(["action", "drama"])
        'action%2Cdrama'
    """
    return quote(_to_text(value), safe=_URI_COMPONENT_SAFE)


def _split_template(url: str) -> tuple[str, list[str]]:
    path, _, query = url.partition("?")
    names = [part.split("=", 1)[0] for part in query.split("&") if part]
    return path, names


def bind_url(descriptor: EndpointDescriptor, params: Mapping[str, Any]) -> str:
    """Build the request path and query string for one call.

    Args:
        descriptor: The endpoint being called.
        params: Call parameters by name.

    Returns:
        The path relative to the API root, e.g.
        ``/search/movie?query=tron&extended=full``.

    Raises:
        BindingError: If a mandatory placeholder has no present parameter.
    """
    path, query_names = _split_template(descriptor.url)
    query: list[str] = []

    for name in query_names:
        value = params.get(name)
        if is_present(value):
            query.append(f"{name}={encode_value(value)}")

    segments: list[str] = []
    for segment in path.split("/"):
        if not segment.startswith(":"):
            segments.append(segment)
            continue
        name = segment[1:]
        value = params.get(name)
        if is_present(value):
            segments.append(encode_value(value))
        elif name not in descriptor.optional:
            raise BindingError(name)

    for name, value in params.items():
        if name not in FILTER_PARAMETERS or not is_present(value):
            continue
        entry = f"{name}={encode_value(value)}"
        if entry not in query:
            query.append(entry)

    if descriptor.opts.pagination:
        for name in ("page", "limit"):
            value = params.get(name)
            if is_present(value):
                query.append(f"{name}={encode_value(value)}")

    extended = params.get("extended")
    if descriptor.opts.extended and is_present(extended):
        query.append(f"extended={encode_value(extended)}")

    bound = "/".join(segments)
    if query:
        bound += "?" + "&".join(query)
    return bound
