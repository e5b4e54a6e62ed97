"""Client generator -- turn an endpoint table into callables.

Typical usage::

    from traktclient.generator import bind_url, build_namespace

    url = bind_url(descriptor, {"id": "tron-legacy-2010", "extended": "full"})
    root = build_namespace(table, executor)
    await root.movies.summary(id="tron-legacy-2010")

Sub-modules:

* :mod:`~traktclient.generator.binder` -- Resolve a URL template and call
  parameters into a request path with query string.
* :mod:`~traktclient.generator.namespace` -- Build the tree of
  :class:`Namespace` nodes and :class:`Endpoint` callables.
"""

from traktclient.generator.binder import FILTER_PARAMETERS, bind_url, encode_value, is_present
from traktclient.generator.namespace import Endpoint, Namespace, build_namespace, split_key

__all__ = [
    "FILTER_PARAMETERS",
    "bind_url",
    "encode_value",
    "is_present",
    "Endpoint",
    "Namespace",
    "build_namespace",
    "split_key",
]
