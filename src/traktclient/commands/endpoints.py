"""Endpoints command -- list the endpoint table.

Works without credentials; only the table is loaded::

    traktclient endpoints
    traktclient endpoints sync/history
    traktclient --table ./methods.yaml endpoints
"""

from __future__ import annotations

from typing import Optional

import typer

from traktclient.exceptions import TraktError
from traktclient.generator.namespace import split_key
from traktclient.output import error, get_output, info
from traktclient.table.loader import load_table


def _flags(auth: object, pagination: bool, extended: bool) -> str:
    flags = []
    if auth is True:
        flags.append("auth")
    elif auth:
        flags.append("auth?")
    if pagination:
        flags.append("paginated")
    if extended:
        flags.append("extended")
    return ",".join(flags)


def endpoints_command(
    ctx: typer.Context,
    prefix: Optional[str] = typer.Argument(None, help="Only show keys under this prefix."),
) -> None:
    """List endpoints with their method, URL template and flags.

    Flags: ``auth`` (token required), ``auth?`` (token sent when available),
    ``paginated`` and ``extended``.

    Example::

        traktclient endpoints movies
    """
    obj = ctx.obj or {}
    try:
        table = load_table(obj.get("table"))
    except TraktError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    wanted = split_key(prefix) if prefix else []
    rows: list[list[str]] = []
    for key, descriptor in table.items():
        if split_key(key)[: len(wanted)] != wanted:
            continue
        opts = descriptor.opts
        rows.append(
            [
                "/".join(split_key(key)),
                descriptor.method.value,
                descriptor.url,
                _flags(opts.auth, opts.pagination, opts.extended),
            ]
        )

    if not rows:
        info(f"No endpoints under '{prefix}'." if prefix else "The endpoint table is empty.")
        return

    get_output().print_table(["Key", "Method", "URL", "Flags"], rows, title="Endpoints")
