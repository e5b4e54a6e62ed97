"""HTTP transport boundary.

The executor and the token manager never talk to :mod:`httpx` directly. They
build a :class:`RequestDescriptor`, hand it to a :class:`Transport`, and get a
:class:`ResponseDescriptor` back (or a
:class:`~traktclient.exceptions.TransportError`). :class:`HttpxTransport` is
the default implementation, wrapping :class:`httpx.AsyncClient`.

Tests substitute the network by passing an :class:`httpx.MockTransport` as
``http_transport``::

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True})

    transport = HttpxTransport(settings, http_transport=httpx.MockTransport(handler))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import httpx

from traktclient.exceptions import TransportError
from traktclient.models import Settings


@dataclass
class RequestDescriptor:
    """A fully assembled request.

    Attributes:
        method: HTTP verb.
        url: Path and query relative to the API root.
        headers: Per-request headers (the transport adds its defaults).
        body: JSON body, or ``None`` for requests without one.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[dict[str, Any]] = None


@dataclass
class ResponseDescriptor:
    """A successful response.

    Attributes:
        status: HTTP status code.
        headers: Response headers with lower-cased names.
        data: Decoded body (JSON value, text, or ``None`` when empty).
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None


class Transport(Protocol):
    """Anything that can send a :class:`RequestDescriptor`."""

    async def send(self, request: RequestDescriptor) -> ResponseDescriptor: ...

    async def aclose(self) -> None: ...


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body: JSON first, raw text as fallback, ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxTransport:
    """Default transport over :class:`httpx.AsyncClient`.

    Args:
        settings: Supplies the base URL, ``User-Agent`` and timeout.
        http_transport: Optional lower-level httpx transport (for example
            :class:`httpx.MockTransport`).
        transform: Optional function applied to every decoded successful
            response body (the response sanitizer).
    """

    def __init__(
        self,
        settings: Settings,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        transform: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        self._transform = transform
        self._client = httpx.AsyncClient(
            base_url=settings.api_url,
            headers={
                "User-Agent": settings.useragent,
                "Content-Type": "application/json",
            },
            timeout=settings.timeout,
            transport=http_transport,
        )

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(self, request: RequestDescriptor) -> ResponseDescriptor:
        """Send *request* and decode the response.

        Raises:
            TransportError: On network failures (``status`` is ``None``) and
                on any response with status 400 or above.
        """
        kwargs: dict[str, Any] = {"headers": request.headers}
        if request.body is not None:
            kwargs["json"] = request.body

        try:
            response = await self._client.request(request.method, request.url, **kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc

        headers = {name.lower(): value for name, value in response.headers.items()}
        data = decode_body(response)

        if response.status_code >= 400:
            raise TransportError(
                _error_message(response.status_code, data),
                status=response.status_code,
                headers=headers,
                body=data,
            )

        if self._transform is not None:
            data = self._transform(data)
        return ResponseDescriptor(status=response.status_code, headers=headers, data=data)


def _error_message(status: int, data: Any) -> str:
    if isinstance(data, dict):
        msg = data.get("error_description") or data.get("error") or data.get("message") or ""
    elif data:
        msg = str(data)[:200]
    else:
        msg = ""
    prefix = f"HTTP {status}"
    return f"{prefix}: {msg}" if msg else prefix
