"""Plugin manager -- discovery, loading and lookup.

:class:`PluginManager` attaches plugins to one client. Plugins come either
from the ``plugins`` argument of :class:`~traktclient.trakt.Trakt` or from
the ``traktclient.plugins`` entry-point group. Third-party packages register
plugins in their ``pyproject.toml``::

    [project.entry-points."traktclient.plugins"]
    bundle = "my_package.plugin:ShowBundle"
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional

from traktclient.exceptions import PluginError
from traktclient.plugins.base import Plugin

if TYPE_CHECKING:
    from traktclient.trakt import Trakt

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "traktclient.plugins"
"""The entry-point group name used for plugin discovery."""


class PluginManager:
    """Loads plugins into a client and keeps them by name.

    Args:
        client: The client every plugin is initialised with.

    Example::

        manager = PluginManager(client)
        manager.load_plugin("bundle", ShowBundle(), {"extended": "full"})
        manager["bundle"].show("dexter")
    """

    def __init__(self, client: Trakt) -> None:
        self._client = client
        self._plugins: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(
        self,
        options: Optional[Mapping[str, Mapping[str, Any]]] = None,
        enabled: Optional[list[str]] = None,
    ) -> list[str]:
        """Load plugins registered in the ``traktclient.plugins`` entry-point group.

        Args:
            options: Per-plugin options keyed by plugin name.
            enabled: When given, only these entry-point names are loaded.

        Returns:
            Names of the plugins that were loaded. Plugins that fail to
            load are logged as warnings and skipped.
        """
        options = options or {}
        loaded: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            if enabled is not None and ep.name not in enabled:
                logger.debug("Plugin '%s' not in enabled list, skipping", ep.name)
                continue
            try:
                plugin_obj = ep.load()
                self.load_plugin(ep.name, plugin_obj, options.get(ep.name))
                loaded.append(ep.name)
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", ep.name, exc)
        return loaded

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(
        self,
        name: str,
        plugin: Any,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Initialise *plugin* with the client and register it as *name*.

        Args:
            name: Name to register under (becomes ``client.<name>``).
            plugin: A :class:`Plugin` instance or subclass, or any object
                exposing ``init(client, options)``.
            options: Options handed to ``init`` (defaults to ``{}``).

        Returns:
            The registered plugin instance.

        Raises:
            PluginError: If *name* is taken or the plugin cannot be
                initialised.
        """
        if name in self._plugins:
            raise PluginError(f"Plugin '{name}' is already loaded")
        if isinstance(plugin, type) and issubclass(plugin, Plugin):
            plugin = plugin()
        init = getattr(plugin, "init", None)
        if not callable(init):
            raise PluginError(f"Plugin '{name}' has no init(client, options) method")

        try:
            init(self._client, dict(options or {}))
        except PluginError:
            raise
        except Exception as exc:
            raise PluginError(f"Plugin '{name}' failed to initialise: {exc}") from exc

        self._plugins[name] = plugin
        logger.debug("Trakt.tv: %s plugin loaded", name)
        return plugin

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def __getitem__(self, name: str) -> Any:
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginError(f"Plugin '{name}' is not loaded") from None

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def get(self, name: str) -> Optional[Any]:
        return self._plugins.get(name)

    def list_plugins(self) -> list[dict[str, str]]:
        """List loaded plugins with ``name``, ``version`` and ``description``."""
        return [
            {
                "name": name,
                "version": getattr(plugin, "version", ""),
                "description": getattr(plugin, "description", ""),
            }
            for name, plugin in self._plugins.items()
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close every plugin that supports it, then forget them all.

        Errors from individual plugins are logged so one failing plugin
        does not stop the others from closing.
        """
        for name, plugin in self._plugins.items():
            aclose = getattr(plugin, "aclose", None)
            if aclose is None:
                continue
            try:
                await aclose()
            except Exception as exc:
                logger.warning("Error closing plugin '%s': %s", name, exc)
        self._plugins.clear()
