"""traktclient -- a table-driven async client for the Trakt.tv API.

The client is generated at construction time from an *endpoint table*: a
mapping of namespace keys (``/shows/summary``) to descriptors that declare the
HTTP verb, URL template, body shape and per-endpoint flags. Every entry becomes
an awaitable callable reachable by attribute::

    async with Trakt(client_id="...", client_secret="...") as trakt:
        show = await trakt.shows.summary(id="game-of-thrones", extended="full")

An OAuth2 token lifecycle (authorization code, device code, refresh, revoke,
import/export) is attached to the same object.

Modules:
    trakt: The :class:`Trakt` facade.
    models: Pydantic models shared across the package.
    table: Endpoint table loading and validation.
    generator: URL binding and namespace tree construction.
    client: Transport, call execution and response normalisation.
    auth: Token lifecycle and device-code polling.
    sanitize: Response string sanitisation.
    config: XDG-aware configuration and token storage for the CLI.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command-line entry point.
"""

__version__ = "0.1.0"

from traktclient.exceptions import (  # noqa: E402
    AuthorizationRequiredError,
    AuthServerError,
    BindingError,
    ConfigurationError,
    CsrfMismatchError,
    InvalidPollError,
    PluginError,
    PollExpiredError,
    TraktError,
    TransportError,
)
from traktclient.trakt import Trakt  # noqa: E402

__all__ = [
    "__version__",
    "Trakt",
    "TraktError",
    "ConfigurationError",
    "BindingError",
    "InvalidPollError",
    "AuthorizationRequiredError",
    "CsrfMismatchError",
    "AuthServerError",
    "TransportError",
    "PollExpiredError",
    "PluginError",
]
