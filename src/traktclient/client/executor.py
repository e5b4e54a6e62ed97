"""Call execution for generated endpoints.

:meth:`CallExecutor.invoke` is what every :class:`~traktclient.generator.Endpoint`
delegates to. It runs in two phases:

1. **Prepare** (synchronous): enforce the endpoint's auth policy, bind the
   URL, assemble headers and body. Precondition failures raise here, before
   any awaitable exists.
2. **Dispatch** (awaitable): send through the transport and normalise the
   response.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Coroutine, Mapping, Optional

from traktclient.client.response import normalize_response
from traktclient.client.transport import RequestDescriptor, Transport
from traktclient.exceptions import AuthorizationRequiredError
from traktclient.generator.binder import bind_url
from traktclient.models import AuthenticationState, EndpointDescriptor, HTTPMethod, Settings

logger = logging.getLogger(__name__)

API_VERSION = "2"


def build_body(descriptor: EndpointDescriptor, params: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """Assemble the JSON body for a call.

    Starts from a copy of the descriptor's body template, overwrites the
    fields that also appear in *params*, then drops every falsy value.
    Returns ``None`` for GET requests.
    """
    if descriptor.method is HTTPMethod.GET:
        return None
    body = dict(descriptor.body)
    for name, value in params.items():
        if name in body:
            body[name] = value
    return {name: value for name, value in body.items() if value}


class CallExecutor:
    """Turn descriptor plus parameters into a request and dispatch it.

    Args:
        settings: Client settings (client id and secret, default pagination).
        transport: Where requests are sent.
        auth_state: Zero-argument callable returning the current
            :class:`~traktclient.models.AuthenticationState`. Read on every
            call so a refreshed or revoked token takes effect immediately.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Transport,
        auth_state: Callable[[], AuthenticationState],
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._auth_state = auth_state

    def prepare(self, descriptor: EndpointDescriptor, params: Mapping[str, Any]) -> RequestDescriptor:
        """Build the request for one call without sending it.

        Raises:
            AuthorizationRequiredError: If the endpoint requires auth and no
                access token or client secret is available.
            BindingError: If a mandatory placeholder is missing.
        """
        state = self._auth_state()
        if descriptor.requires_auth and not (state.access_token and self._settings.client_secret):
            raise AuthorizationRequiredError("OAuth required")

        headers = {
            "trakt-api-version": API_VERSION,
            "trakt-api-key": self._settings.client_id or "",
        }
        if descriptor.sends_auth and state.access_token:
            headers["Authorization"] = f"Bearer {state.access_token}"

        return RequestDescriptor(
            method=descriptor.method.value,
            url=bind_url(descriptor, params),
            headers=headers,
            body=build_body(descriptor, params),
        )

    def wants_pagination(self, params: Mapping[str, Any]) -> bool:
        """Per-call ``pagination`` wins when given; otherwise the client default."""
        override = params.get("pagination")
        if override is not None:
            return bool(override)
        return self._settings.pagination

    def invoke(self, descriptor: EndpointDescriptor, params: Mapping[str, Any]) -> Coroutine[Any, Any, Any]:
        """Prepare a call now and return a coroutine that dispatches it."""
        request = self.prepare(descriptor, params)
        return self._dispatch(descriptor, request, self.wants_pagination(params))

    async def _dispatch(
        self,
        descriptor: EndpointDescriptor,
        request: RequestDescriptor,
        paginate: bool,
    ) -> Any:
        logger.debug("%s: %s", request.method, request.url)
        response = await self._transport.send(request)
        return normalize_response(descriptor, response, paginate)
