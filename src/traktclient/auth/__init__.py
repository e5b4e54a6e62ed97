"""OAuth2 token lifecycle.

* :class:`~traktclient.auth.manager.TokenManager` -- authorization code and
  device code flows, refresh, import, export and revoke.
* :class:`~traktclient.auth.polling.PollSession` -- the cancellable
  device-token polling loop.
"""

from traktclient.auth.manager import TokenManager, now_ms
from traktclient.auth.polling import PollSession

__all__ = ["TokenManager", "PollSession", "now_ms"]
