"""Plugin system for traktclient.

Plugins extend a :class:`~traktclient.trakt.Trakt` client with extra
behaviour built on its generated endpoints. They are passed explicitly or
discovered from the ``traktclient.plugins`` entry-point group.

Key classes:

* :class:`Plugin` -- Abstract base class for plugins.
* :class:`PluginManager` -- Loads plugins into a client and looks them up.
"""

from traktclient.plugins.base import Plugin
from traktclient.plugins.manager import ENTRY_POINT_GROUP, PluginManager

__all__ = ["Plugin", "PluginManager", "ENTRY_POINT_GROUP"]
