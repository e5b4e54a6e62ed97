"""Abstract base class for traktclient plugins.

A plugin is attached to a :class:`~traktclient.trakt.Trakt` client under a
name and becomes reachable as ``client.plugins[name]`` and ``client.<name>``.
It receives the client once, in :meth:`Plugin.init`, together with its own
options, and can then call any generated endpoint or token method.

Plugins are passed explicitly to the client or registered as entry points in
the ``traktclient.plugins`` group and discovered by
:class:`~traktclient.plugins.manager.PluginManager`.

Example:
    A plugin that fetches a show with its seasons::

        class ShowBundle(Plugin):
            @property
            def name(self) -> str:
                return "bundle"

            def init(self, client, options):
                self._client = client
                self._extended = options.get("extended", "full")

            async def show(self, slug):
                summary = await self._client.shows.summary(id=slug, extended=self._extended)
                seasons = await self._client.seasons.summary(id=slug)
                return {"show": summary, "seasons": seasons}
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from traktclient.trakt import Trakt


class Plugin(ABC):
    """Base class for all traktclient plugins.

    Subclasses must implement :attr:`name`. :meth:`init` stores the client
    and options by default; override it for further setup.
    """

    client: Trakt | None = None
    options: Mapping[str, Any] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the default name the plugin is registered under."""
        ...

    @property
    def version(self) -> str:
        return "0.1.0"

    @property
    def description(self) -> str:
        return ""

    def init(self, client: Trakt, options: Mapping[str, Any]) -> None:
        """Called once when the plugin is attached to *client*.

        Args:
            client: The client the plugin is attached to.
            options: The plugin's entry from ``plugin_options`` (empty when
                none was given).
        """
        self.client = client
        self.options = options

    async def aclose(self) -> None:
        """Called when the client is closed. Override to release resources."""
