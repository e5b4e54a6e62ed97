"""HTTP layer: transport, call execution and response normalisation.

Sub-modules:

* :mod:`~traktclient.client.transport` -- Request/response descriptors, the
  :class:`Transport` protocol and the default :class:`HttpxTransport`.
* :mod:`~traktclient.client.executor` -- :class:`CallExecutor`, which
  enforces auth policy, builds and dispatches endpoint calls.
* :mod:`~traktclient.client.response` -- Pagination envelope handling.
"""

from traktclient.client.executor import CallExecutor, build_body
from traktclient.client.response import normalize_response, read_pagination
from traktclient.client.transport import (
    HttpxTransport,
    RequestDescriptor,
    ResponseDescriptor,
    Transport,
)

__all__ = [
    "CallExecutor",
    "build_body",
    "normalize_response",
    "read_pagination",
    "HttpxTransport",
    "RequestDescriptor",
    "ResponseDescriptor",
    "Transport",
]
