"""Helpers shared by the CLI commands.

Options given to the root callback are stored in ``ctx.obj`` and turned into
a :class:`~traktclient.trakt.Trakt` client by :func:`build_client`. Tests can
put an :class:`httpx.MockTransport` under ``ctx.obj["http_transport"]`` to
keep the CLI off the network.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

import typer

from traktclient.config import load_token, resolve_settings, save_token
from traktclient.exceptions import TraktError
from traktclient.output import error
from traktclient.trakt import Trakt

T = TypeVar("T")


def build_client(ctx: typer.Context) -> Trakt:
    """Create a client from resolved settings and the root CLI options.

    Raises:
        ConfigurationError: If no client id can be resolved.
    """
    obj: dict[str, Any] = ctx.obj or {}
    settings = resolve_settings(
        client_id=obj.get("client_id"),
        client_secret=obj.get("client_secret"),
        api_url=obj.get("api_url"),
        debug=obj.get("verbose") or None,
    )
    return Trakt(settings, table=obj.get("table"), http_transport=obj.get("http_transport"))


async def restore_token(trakt: Trakt) -> bool:
    """Import the stored token into *trakt*, saving it again if it was refreshed.

    Returns:
        Whether a token was installed.
    """
    record = load_token()
    if record is None or not record.access_token:
        return False
    before = record.model_dump()
    after = await trakt.import_token(record)
    if after != before:
        save_token(after)
    return True


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro* to completion, turning :class:`TraktError` into a clean exit."""
    try:
        return asyncio.run(coro)
    except TraktError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
