"""OAuth2 token lifecycle.

:class:`TokenManager` owns the client's single
:class:`~traktclient.models.AuthenticationState` and implements every
operation that reads or replaces it::

    unauthenticated --exchange_code / poll_access / import_token--> authenticated
    authenticated   --time passes-->                               expired
    expired         --refresh_token / import_token-->              authenticated
    any             --revoke_token-->                              unauthenticated

The state is never mutated in place; each write swaps in a new frozen
instance, so readers always see a consistent token/expiry pair.
"""

from __future__ import annotations

import logging
import re
import secrets
import time
from typing import Any, Coroutine, Mapping, Optional, Union
from urllib.parse import urlencode

from pydantic import ValidationError

from traktclient.auth.polling import PollSession
from traktclient.client.transport import RequestDescriptor, Transport
from traktclient.exceptions import (
    AuthorizationRequiredError,
    AuthServerError,
    CsrfMismatchError,
    InvalidPollError,
    TransportError,
)
from traktclient.models import (
    AuthenticationState,
    DeviceCodes,
    PollDescriptor,
    Settings,
    TokenRecord,
)

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/token"
REVOKE_PATH = "/oauth/revoke"
DEVICE_CODE_PATH = "/oauth/device/code"
DEVICE_TOKEN_PATH = "/oauth/device/token"
AUTHORIZE_PATH = "/oauth/authorize"

_API_LABEL = re.compile(r"api\W")


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


class TokenManager:
    """Exchange, poll, refresh, import, export and revoke OAuth2 tokens.

    Args:
        settings: Supplies client id, secret, redirect URI and API URL.
        transport: Used for every OAuth request.
    """

    def __init__(self, settings: Settings, transport: Transport) -> None:
        self._settings = settings
        self._transport = transport
        self._state = AuthenticationState()

    @property
    def state(self) -> AuthenticationState:
        """The current authentication state (read-only snapshot)."""
        return self._state

    # ------------------------------------------------------------------ #
    # Authorization code flow
    # ------------------------------------------------------------------ #

    def get_url(self) -> str:
        """Return the browser authorization URL with a fresh CSRF state.

        The site root is the API URL with its ``api.`` label removed
        (``https://api.trakt.tv`` gives ``https://trakt.tv``).
        """
        csrf_state = secrets.token_hex(6)
        self._state = self._state.model_copy(update={"csrf_state": csrf_state})
        base_url = _API_LABEL.sub("", self._settings.api_url, count=1)
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self._settings.client_id or "",
                "redirect_uri": self._settings.redirect_uri,
                "state": csrf_state,
            }
        )
        return f"{base_url}{AUTHORIZE_PATH}?{query}"

    def exchange_code(self, code: str, state: Optional[str] = None) -> Coroutine[Any, Any, dict[str, Any]]:
        """Exchange an authorization code for tokens.

        The CSRF check runs immediately; the returned coroutine performs
        the request.

        Raises:
            CsrfMismatchError: If *state* is given and differs from the
                state issued by :meth:`get_url`.
        """
        if state and state != self._state.csrf_state:
            raise CsrfMismatchError("Invalid CSRF (State)")
        return self._exchange(
            {
                "code": code,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
                "redirect_uri": self._settings.redirect_uri,
                "grant_type": "authorization_code",
            },
            consume_csrf=True,
        )

    async def refresh_token(self) -> dict[str, Any]:
        """Replace the current tokens using the refresh token.

        Raises:
            AuthorizationRequiredError: If no refresh token is installed.
            AuthServerError: If the server answers 401.
        """
        if not self._state.refresh_token:
            raise AuthorizationRequiredError("No refresh token available")
        return await self._exchange(
            {
                "refresh_token": self._state.refresh_token,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
                "redirect_uri": self._settings.redirect_uri,
                "grant_type": "refresh_token",
            }
        )

    async def _exchange(self, payload: dict[str, Any], consume_csrf: bool = False) -> dict[str, Any]:
        data = await self._post(TOKEN_PATH, payload)
        created_at = data.get("created_at")
        if created_at is None:
            created_at = int(time.time())
        update: dict[str, Any] = {
            "access_token": data.get("access_token"),
            "refresh_token": data.get("refresh_token"),
            "expires": int((created_at + data.get("expires_in", 0)) * 1000),
        }
        if consume_csrf:
            update["csrf_state"] = None
        self._state = self._state.model_copy(update=update)
        return data

    # ------------------------------------------------------------------ #
    # Device code flow
    # ------------------------------------------------------------------ #

    async def get_codes(self) -> DeviceCodes:
        """Request a device code and user code. Does not change the state."""
        data = await self._post(DEVICE_CODE_PATH, {"client_id": self._settings.client_id})
        return DeviceCodes.model_validate(data)

    def poll_access(self, poll: Union[DeviceCodes, PollDescriptor, Mapping[str, Any]]) -> PollSession:
        """Start polling for the token of an approved device code.

        Args:
            poll: The result of :meth:`get_codes`, or any mapping with
                ``device_code``, ``expires_in`` and ``interval`` (seconds).

        Returns:
            An awaitable, cancellable :class:`PollSession` resolving with
            the token payload.

        Raises:
            InvalidPollError: Immediately, if *poll* is malformed.
        """
        if isinstance(poll, PollDescriptor):
            descriptor = poll
        else:
            if isinstance(poll, DeviceCodes):
                poll = poll.model_dump()
            if not isinstance(poll, Mapping):
                raise InvalidPollError("Invalid Poll object")
            try:
                descriptor = PollDescriptor.model_validate(dict(poll))
            except ValidationError as exc:
                raise InvalidPollError(f"Invalid Poll object: {exc}") from exc

        async def attempt() -> dict[str, Any]:
            return await self._request_device_token(descriptor.device_code)

        return PollSession(attempt, descriptor)

    async def _request_device_token(self, device_code: str) -> dict[str, Any]:
        data = await self._post(
            DEVICE_TOKEN_PATH,
            {
                "code": device_code,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
            },
        )
        self._state = self._state.model_copy(
            update={
                "access_token": data.get("access_token"),
                "refresh_token": data.get("refresh_token"),
                "expires": now_ms() + int(data.get("expires_in", 0) * 1000),
            }
        )
        return data

    # ------------------------------------------------------------------ #
    # Import / export / revoke
    # ------------------------------------------------------------------ #

    async def import_token(self, token: Union[TokenRecord, Mapping[str, Any]]) -> dict[str, Any]:
        """Install a previously exported token, refreshing it first if expired.

        Returns:
            The token as exported after the import (and refresh, if any).
        """
        record = token if isinstance(token, TokenRecord) else TokenRecord.model_validate(dict(token))
        self._state = self._state.model_copy(
            update={
                "access_token": record.access_token,
                "refresh_token": record.refresh_token,
                "expires": record.expires,
            }
        )
        if record.expires is not None and record.expires < now_ms():
            logger.debug("Imported token expired, refreshing")
            await self.refresh_token()
        return self.export_token()

    def export_token(self) -> dict[str, Any]:
        """Return ``{access_token, expires, refresh_token}`` for persistence."""
        return TokenRecord(
            access_token=self._state.access_token,
            expires=self._state.expires,
            refresh_token=self._state.refresh_token,
        ).model_dump()

    async def revoke_token(self) -> None:
        """Revoke the access token server-side and clear all state.

        A no-op when no access token is installed. The state is left intact
        if the revoke request fails.
        """
        if not self._state.access_token:
            return
        await self._post(
            REVOKE_PATH,
            {
                "token": self._state.access_token,
                "client_id": self._settings.client_id,
                "client_secret": self._settings.client_secret,
            },
        )
        self._state = AuthenticationState()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _post(self, path: str, payload: dict[str, Any]) -> Any:
        """POST to an OAuth endpoint, translating 401 into :class:`AuthServerError`."""
        logger.debug("POST: %s", path)
        try:
            response = await self._transport.send(RequestDescriptor(method="POST", url=path, body=payload))
        except TransportError as exc:
            if exc.status == 401:
                raise AuthServerError(exc.headers.get("www-authenticate") or "HTTP 401") from exc
            raise
        return response.data if response.data is not None else {}
