"""Call command -- invoke any endpoint of the table.

Parameters are given as ``name=value`` pairs. Values are read as JSON when
they parse (numbers, booleans, arrays, objects) and as plain strings
otherwise::

    traktclient call shows/summary id=game-of-thrones extended=full
    traktclient call movies/trending limit=5 --paginate
    traktclient call sync/history/add 'movies=[{"ids": {"trakt": 1}}]'
"""

from __future__ import annotations

import json
from typing import Any, Optional

import typer

from traktclient.commands.common import build_client, restore_token, run
from traktclient.output import debug, get_output


def parse_params(pairs: list[str]) -> dict[str, Any]:
    """Turn ``name=value`` strings into a parameter dict.

    Raises:
        typer.BadParameter: If a pair has no ``=``.
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got '{pair}'")
        try:
            params[name] = json.loads(raw)
        except ValueError:
            params[name] = raw
    return params


def call_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Endpoint key, e.g. shows/summary or shows.summary."),
    params: Optional[list[str]] = typer.Argument(None, help="Parameters as name=value."),
    paginate: Optional[bool] = typer.Option(
        None, "--paginate/--no-paginate", help="Wrap the result with pagination headers."
    ),
) -> None:
    """Call an API endpoint and print the response.

    A stored token (see ``traktclient auth``) is used when present.

    Example::

        traktclient call movies/summary id=tron-legacy-2010 extended=full
    """
    call_params = parse_params(params or [])
    if paginate is not None:
        call_params["pagination"] = paginate

    async def _run() -> Any:
        async with build_client(ctx) as trakt:
            try:
                endpoint = trakt.endpoint(key)
            except KeyError:
                raise typer.BadParameter(f"Unknown endpoint '{key}'", param_hint="KEY") from None
            if await restore_token(trakt):
                debug("Using stored token")
            return await endpoint(**call_params)

    get_output().print_response(run(_run()))
