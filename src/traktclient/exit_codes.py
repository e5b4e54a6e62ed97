"""Numeric process exit codes for the ``traktclient`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~traktclient.exceptions.TraktError` subclass.
Shell wrappers can inspect the exit code to tell a rejected token apart
from a malformed call without parsing stderr.

Example::

    $ traktclient call sync/history
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- no access token installed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The call was missing a mandatory URL parameter or was otherwise malformed."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_TRANSPORT_ERROR = 5
"""The API answered with an HTTP error or could not be reached."""

EXIT_TIMEOUT = 6
"""Device-code polling ran past its expiry window."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load or initialise."""
