"""Response normalisation -- optional pagination envelope.

When pagination is requested for a call, the decoded payload is wrapped in a
:class:`~traktclient.models.PaginatedResponse`. The envelope carries the
``x-pagination-*`` headers for endpoints that paginate, and
``pagination=False`` for those that do not. Without a request the payload is
returned unchanged.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from traktclient.client.transport import ResponseDescriptor
from traktclient.models import EndpointDescriptor, PaginatedResponse, Pagination

PAGINATION_HEADERS: dict[str, str] = {
    "item_count": "x-pagination-item-count",
    "limit": "x-pagination-limit",
    "page": "x-pagination-page",
    "page_count": "x-pagination-page-count",
}
"""Pagination field name to response header name."""


def _header_value(raw: Optional[str]) -> Optional[Union[int, str]]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


def read_pagination(headers: dict[str, str]) -> Pagination:
    """Build a :class:`Pagination` from lower-cased response headers."""
    return Pagination(
        **{field: _header_value(headers.get(header)) for field, header in PAGINATION_HEADERS.items()}
    )


def normalize_response(
    descriptor: EndpointDescriptor,
    response: ResponseDescriptor,
    paginate: bool,
) -> Any:
    """Return the value a generated endpoint resolves with.

    Args:
        descriptor: The endpoint that was called.
        response: The transport's response.
        paginate: Whether the caller asked for the pagination envelope.

    Returns:
        ``response.data``, or a :class:`PaginatedResponse` when *paginate*
        is set.
    """
    if not paginate:
        return response.data
    if descriptor.opts.pagination:
        return PaginatedResponse(data=response.data, pagination=read_pagination(response.headers))
    return PaginatedResponse(data=response.data, pagination=False)
