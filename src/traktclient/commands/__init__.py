"""Built-in CLI sub-commands for traktclient.

* :mod:`~traktclient.commands.auth` -- authorise the CLI and manage the
  stored token.
* :mod:`~traktclient.commands.call` -- invoke any endpoint of the table.
* :mod:`~traktclient.commands.endpoints` -- list the endpoint table.
* :mod:`~traktclient.commands.common` -- client construction and error
  handling shared by the commands.

Multi-command groups (``auth``) export a :class:`typer.Typer` sub-application;
single commands export a plain callback registered on the root app.
"""
