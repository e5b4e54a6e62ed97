"""Typer application and CLI entry point for traktclient.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``auth``, ``call``, ``endpoints``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a Ctrl-C handler and invokes the Typer app;
a :class:`~traktclient.exceptions.TraktError` escaping a command becomes a
clean exit with the error's ``exit_code``.

See Also:
    :mod:`traktclient.config`: Settings resolution used by every command.
    :mod:`traktclient.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
from typing import Any, Optional

import typer

from traktclient import __version__
from traktclient.commands.auth import auth_app
from traktclient.commands.call import call_command
from traktclient.commands.endpoints import endpoints_command
from traktclient.exit_codes import EXIT_GENERIC_FAILURE
from traktclient.output import OutputFormat, OutputManager, set_output


app = typer.Typer(
    name="traktclient",
    help="Call the Trakt.tv API from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth", help="Authorise and manage the stored token.")
app.command("call")(call_command)
app.command("endpoints")(endpoints_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"traktclient {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", help="API client id (overrides TRAKT_CLIENT_ID)."
    ),
    client_secret: Optional[str] = typer.Option(
        None, "--client-secret", help="API client secret (overrides TRAKT_CLIENT_SECRET)."
    ),
    api_url: Optional[str] = typer.Option(
        None, "--api-url", help="API root URL (overrides TRAKT_API_URL)."
    ),
    table: Optional[str] = typer.Option(
        None, "--table", help="Endpoint table: file path, URL or '-' for stdin."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~traktclient.output.OutputManager`,
    configures logging, and stores the connection options in ``ctx.obj``
    for :func:`~traktclient.commands.common.build_client`.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj["client_id"] = client_id
    ctx.obj["client_secret"] = client_secret
    ctx.obj["api_url"] = api_url
    ctx.obj["table"] = table
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``traktclient`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from traktclient.exceptions import TraktError
        from traktclient.output import error

        if isinstance(exc, TraktError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
