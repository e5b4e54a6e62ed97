"""Build the tree of namespace nodes and endpoint callables from a table.

Each key of the endpoint table is split into segments (``/sync/history/add``
gives ``sync``, ``history``, ``add``). Intermediate segments become
:class:`Namespace` nodes and the last one an :class:`Endpoint`. A key may be
both a leaf and a prefix of other keys, so an :class:`Endpoint` can have
children of its own::

    root.comments.replies(id=1)             # /comments/replies
    root.comments.replies.add(id=1, ...)    # /comments/replies/add

Children are held in an explicit registry per node; attribute access and
``node["a/b"]`` both read from it.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Awaitable, Iterator, Mapping

from traktclient.models import EndpointDescriptor

if TYPE_CHECKING:
    from traktclient.client.executor import CallExecutor

_KEY_SEPARATOR = re.compile(r"[/.]")


def split_key(key: str) -> list[str]:
    """Split a namespace key on ``/`` or ``.`` into its non-empty segments."""
    return [segment for segment in _KEY_SEPARATOR.split(key) if segment]


class Namespace:
    """An inner node of the endpoint tree.

    Args:
        path: Slash-joined key of this node (``""`` for the root).
    """

    def __init__(self, path: str = "") -> None:
        self._path = path
        self._children: dict[str, Namespace] = {}

    @property
    def path(self) -> str:
        return self._path

    @property
    def children(self) -> Mapping[str, Namespace]:
        return self._children

    def __getattr__(self, name: str) -> Namespace:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._children[name]
        except KeyError:
            raise AttributeError(
                f"'{self._path or '/'}' has no endpoint or namespace '{name}'"
            ) from None

    def __getitem__(self, key: str) -> Namespace:
        node: Namespace = self
        for segment in split_key(key):
            try:
                node = node._children[segment]
            except KeyError:
                raise KeyError(key) from None
        return node

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            self[key]
        except KeyError:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._children))

    def __repr__(self) -> str:
        return f"<Namespace '/{self._path}' children={sorted(self._children)}>"

    def endpoints(self) -> Iterator[Endpoint]:
        """Yield every endpoint at or below this node, depth first in insertion order."""
        if isinstance(self, Endpoint):
            yield self
        for child in self._children.values():
            yield from child.endpoints()


class Endpoint(Namespace):
    """A callable leaf bound to its own copy of an endpoint descriptor.

    Calling the endpoint binds the parameters and checks the auth policy
    immediately (raising :class:`~traktclient.exceptions.BindingError` or
    :class:`~traktclient.exceptions.AuthorizationRequiredError`), then
    returns an awaitable that performs the request.
    """

    def __init__(self, path: str, descriptor: EndpointDescriptor, executor: CallExecutor) -> None:
        super().__init__(path)
        self._descriptor = descriptor.model_copy(deep=True)
        self._executor = executor

    @property
    def descriptor(self) -> EndpointDescriptor:
        return self._descriptor

    def __call__(self, **params: Any) -> Awaitable[Any]:
        return self._executor.invoke(self._descriptor, params)

    def __repr__(self) -> str:
        return f"<Endpoint {self._descriptor.method.value} {self._descriptor.url} ('/{self._path}')>"


def build_namespace(
    table: Mapping[str, EndpointDescriptor],
    executor: CallExecutor,
) -> Namespace:
    """Walk *table* once and return the root of the endpoint tree.

    Args:
        table: Mapping from namespace key to descriptor, as returned by
            :func:`~traktclient.table.load_table`.
        executor: The executor every generated endpoint delegates to.

    Returns:
        The root :class:`Namespace`.
    """
    root = Namespace()
    for key, descriptor in table.items():
        segments = split_key(key)
        if not segments:
            continue
        parent = root
        for index, segment in enumerate(segments[:-1]):
            child = parent._children.get(segment)
            if child is None:
                child = Namespace("/".join(segments[: index + 1]))
                parent._children[segment] = child
            parent = child

        leaf_name = segments[-1]
        endpoint = Endpoint("/".join(segments), descriptor, executor)
        existing = parent._children.get(leaf_name)
        if existing is not None:
            endpoint._children.update(existing._children)
        parent._children[leaf_name] = endpoint
    return root
