"""Auth commands -- authorise the CLI against Trakt and manage the stored token.

Provides the ``traktclient auth`` sub-command group. Tokens obtained here are
exported and written to ``<data dir>/token.json`` so that later ``call``
invocations can use them.

Typical workflow::

    traktclient auth url                 # open the printed URL, approve
    traktclient auth exchange 1a2b3c4d   # paste the code shown by Trakt
    traktclient auth show

or, on a machine without a browser::

    traktclient auth device
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import typer

from traktclient.commands.common import build_client, restore_token, run
from traktclient.config import delete_token, load_token, pop_pending_state, save_pending_state, save_token
from traktclient.exceptions import AuthorizationRequiredError, CsrfMismatchError
from traktclient.output import get_output, info, success, suggest


auth_app = typer.Typer(no_args_is_help=True)


@auth_app.command("url")
def auth_url(ctx: typer.Context) -> None:
    """Print the browser authorization URL.

    The CSRF state embedded in the URL is remembered so that
    ``auth exchange --state`` can verify it.

    Example::

        traktclient auth url
    """

    async def _run() -> str:
        async with build_client(ctx) as trakt:
            url = trakt.get_url()
            save_pending_state(trakt.authentication.csrf_state or "")
            return url

    url = run(_run())
    get_output().print_data(url)
    info("Open the URL above, approve access and copy the code Trakt shows you.")
    suggest("traktclient auth exchange <code>")


@auth_app.command("exchange")
def auth_exchange(
    ctx: typer.Context,
    code: str = typer.Argument(help="Authorization code shown after approving access."),
    state: Optional[str] = typer.Option(
        None, "--state", help="State returned with the code; checked against the last 'auth url'."
    ),
) -> None:
    """Exchange an authorization code for a token and store it.

    Example::

        traktclient auth exchange 1a2b3c4d
    """

    async def _run() -> None:
        if state is not None and state != pop_pending_state():
            raise CsrfMismatchError("Invalid CSRF (State)")
        async with build_client(ctx) as trakt:
            await trakt.exchange_code(code)
            save_token(trakt.export_token())

    run(_run())
    success("Authenticated.")


@auth_app.command("device")
def auth_device(ctx: typer.Context) -> None:
    """Authorise with a device code and wait for approval.

    Prints the verification URL and user code, then polls until the code is
    approved or expires.

    Example::

        traktclient auth device
    """
    output = get_output()

    async def _run() -> None:
        async with build_client(ctx) as trakt:
            codes = await trakt.get_codes()
            output.info(f"Go to {codes.verification_url} and enter code: {codes.user_code}")
            output.info(f"Waiting for approval (expires in {codes.expires_in}s)...")
            await trakt.poll_access(codes)
            save_token(trakt.export_token())

    run(_run())
    success("Authenticated.")


@auth_app.command("refresh")
def auth_refresh(ctx: typer.Context) -> None:
    """Refresh the stored token.

    Example::

        traktclient auth refresh
    """

    async def _run() -> None:
        async with build_client(ctx) as trakt:
            if not await restore_token(trakt):
                raise AuthorizationRequiredError("No stored token. Run: traktclient auth url")
            await trakt.refresh_token()
            save_token(trakt.export_token())

    run(_run())
    success("Token refreshed.")


@auth_app.command("revoke")
def auth_revoke(ctx: typer.Context) -> None:
    """Revoke the stored token and delete it.

    Example::

        traktclient auth revoke
    """

    async def _run() -> bool:
        async with build_client(ctx) as trakt:
            if not await restore_token(trakt):
                return False
            await trakt.revoke_token()
            delete_token()
            return True

    if run(_run()):
        success("Token revoked.")
    else:
        info("No stored token.")


@auth_app.command("show")
def auth_show() -> None:
    """Show the stored token's status.

    Example::

        traktclient auth show
    """
    record = load_token()
    if record is None or not record.access_token:
        info("Not authenticated.")
        suggest("traktclient auth url")
        return

    expires = "unknown"
    status = "valid"
    if record.expires is not None:
        when = datetime.fromtimestamp(record.expires / 1000, tz=timezone.utc)
        expires = when.isoformat(timespec="seconds")
        if when < datetime.now(tz=timezone.utc):
            status = "expired"

    get_output().print_table(
        ["Field", "Value"],
        [
            ["access_token", _mask(record.access_token)],
            ["refresh_token", _mask(record.refresh_token)],
            ["expires", expires],
            ["status", status],
        ],
        title="Stored token",
    )


def _mask(value: Optional[str]) -> str:
    if not value:
        return "-"
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}...{value[-4:]}"
