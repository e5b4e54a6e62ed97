"""The :class:`Trakt` client facade.

A :class:`Trakt` instance ties the pieces together: it resolves
:class:`~traktclient.models.Settings`, builds the transport, the token
manager and the call executor, generates the endpoint tree from the endpoint
table, and attaches plugins.

Generated endpoints are reached by attribute or by key::

    trakt = Trakt(client_id="...", client_secret="...")
    await trakt.movies.trending(page=2, limit=10, pagination=True)
    await trakt.call("/movies/summary", id="tron-legacy-2010")
    trakt.endpoint("movies.summary").descriptor

Endpoint calls raise binding and authorisation errors synchronously and
return an awaitable for the request itself.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Coroutine, Mapping, Optional, Union

import httpx

from traktclient.auth.manager import TokenManager
from traktclient.auth.polling import PollSession
from traktclient.client.executor import CallExecutor
from traktclient.client.transport import HttpxTransport, Transport
from traktclient.exceptions import ConfigurationError
from traktclient.generator.namespace import Endpoint, Namespace, build_namespace
from traktclient.models import (
    AuthenticationState,
    DeviceCodes,
    EndpointDescriptor,
    PollDescriptor,
    Settings,
    TokenRecord,
)
from traktclient.plugins.manager import PluginManager
from traktclient.sanitize import StringSanitizer, clean_string, make_transform
from traktclient.table.loader import load_table, parse_table

logger = logging.getLogger(__name__)


class Trakt:
    """Async Trakt.tv API client generated from an endpoint table.

    Args:
        settings: A :class:`~traktclient.models.Settings` instance or a
            plain mapping of settings. Keyword *overrides* are applied on top.
        table: Endpoint table. A mapping of keys to descriptors (or raw
            dicts), a path/URL understood by
            :func:`~traktclient.table.load_table`, or ``None`` for the
            bundled table.
        transport: Custom :class:`~traktclient.client.transport.Transport`.
            When given, *http_transport* and *sanitizer* are ignored.
        http_transport: Low-level httpx transport for the default
            :class:`~traktclient.client.transport.HttpxTransport`.
        sanitizer: String function applied to every string in successful
            responses when ``settings.sanitize`` is on. Defaults to
            :func:`~traktclient.sanitize.clean_string`.
        plugins: Plugins to attach, keyed by name.
        plugin_options: Per-plugin options, keyed by the same names.
        **overrides: Individual settings (``client_id=...``, ``debug=True``...).

    Raises:
        ConfigurationError: If no ``client_id`` is configured or the table
            cannot be loaded.
    """

    def __init__(
        self,
        settings: Union[Settings, Mapping[str, Any], None] = None,
        *,
        table: Union[Mapping[str, Any], str, None] = None,
        transport: Optional[Transport] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        sanitizer: Optional[StringSanitizer] = None,
        plugins: Optional[Mapping[str, Any]] = None,
        plugin_options: Optional[Mapping[str, Mapping[str, Any]]] = None,
        **overrides: Any,
    ) -> None:
        self._settings = _merge_settings(settings, overrides)
        if not self._settings.client_id:
            raise ConfigurationError("Missing client_id")

        if self._settings.debug:
            logging.getLogger("traktclient").setLevel(logging.DEBUG)

        if transport is None:
            transform = None
            if self._settings.sanitize:
                transform = make_transform(sanitizer or clean_string)
            transport = HttpxTransport(self._settings, http_transport=http_transport, transform=transform)
        self._transport = transport

        self._auth = TokenManager(self._settings, self._transport)
        self._executor = CallExecutor(self._settings, self._transport, lambda: self._auth.state)

        if table is None or isinstance(table, str):
            self._table = load_table(table)
        else:
            self._table = parse_table(table)
        self._root = build_namespace(self._table, self._executor)
        logger.debug("Trakt.tv: module loaded, as %s", self._settings.useragent)

        self._plugins = PluginManager(self)
        options = plugin_options or {}
        for name, plugin in (plugins or {}).items():
            self._plugins.load_plugin(name, plugin, options.get(name))

    # ------------------------------------------------------------------ #
    # Endpoint access
    # ------------------------------------------------------------------ #

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        plugin = self._plugins.get(name)
        if plugin is not None:
            return plugin
        return getattr(self._root, name)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._root) | set(self._plugins))

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def table(self) -> Mapping[str, EndpointDescriptor]:
        return self._table

    @property
    def root(self) -> Namespace:
        """Root of the generated endpoint tree."""
        return self._root

    @property
    def plugins(self) -> PluginManager:
        return self._plugins

    @property
    def executor(self) -> CallExecutor:
        return self._executor

    def endpoint(self, key: str) -> Endpoint:
        """Look up an endpoint by key (``"shows/summary"``, ``"/shows/summary"`` or ``"shows.summary"``).

        Raises:
            KeyError: If *key* does not name an endpoint.
        """
        node = self._root[key]
        if not isinstance(node, Endpoint):
            raise KeyError(key)
        return node

    def call(self, key: str, **params: Any) -> Awaitable[Any]:
        """Invoke the endpoint named *key* with *params*."""
        return self.endpoint(key)(**params)

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    @property
    def auth(self) -> TokenManager:
        return self._auth

    @property
    def authentication(self) -> AuthenticationState:
        """Current authentication state snapshot."""
        return self._auth.state

    def get_url(self) -> str:
        return self._auth.get_url()

    def exchange_code(self, code: str, state: Optional[str] = None) -> Coroutine[Any, Any, dict[str, Any]]:
        return self._auth.exchange_code(code, state)

    async def get_codes(self) -> DeviceCodes:
        return await self._auth.get_codes()

    def poll_access(self, poll: Union[DeviceCodes, PollDescriptor, Mapping[str, Any]]) -> PollSession:
        return self._auth.poll_access(poll)

    async def refresh_token(self) -> dict[str, Any]:
        return await self._auth.refresh_token()

    async def import_token(self, token: Union[TokenRecord, Mapping[str, Any]]) -> dict[str, Any]:
        return await self._auth.import_token(token)

    def export_token(self) -> dict[str, Any]:
        return self._auth.export_token()

    async def revoke_token(self) -> None:
        await self._auth.revoke_token()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def aclose(self) -> None:
        await self._plugins.aclose()
        await self._transport.aclose()

    async def __aenter__(self) -> Trakt:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<Trakt {self._settings.api_url} endpoints={len(self._table)}>"


def _merge_settings(settings: Union[Settings, Mapping[str, Any], None], overrides: Mapping[str, Any]) -> Settings:
    if isinstance(settings, Settings):
        base = settings.model_dump()
    else:
        base = dict(settings or {})
    base.update(overrides)
    try:
        return Settings.model_validate(base)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc
