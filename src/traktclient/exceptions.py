"""Exception hierarchy for traktclient.

All exceptions inherit from :class:`TraktError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`traktclient.exit_codes`. The command-line entry point in
:func:`traktclient.app.main` catches ``TraktError`` and exits with the
appropriate code; library callers simply catch the subclass they care about.

Subclass hierarchy::

    TraktError (exit 1)
    +-- ConfigurationError          (exit 1)
    +-- BindingError                (exit 2)
    +-- InvalidPollError            (exit 2)
    +-- AuthorizationRequiredError  (exit 3)
    +-- CsrfMismatchError           (exit 3)
    +-- AuthServerError             (exit 3)
    +-- TransportError              (exit 5)
    +-- PollExpiredError            (exit 6)
    +-- PluginError                 (exit 10)

Binding and authorisation-precondition errors are raised before any request
is sent. Everything that depends on the network surfaces when the awaitable
returned by a call is awaited.
"""

from __future__ import annotations

from typing import Any, Optional

from traktclient.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_TIMEOUT,
    EXIT_TRANSPORT_ERROR,
)


class TraktError(Exception):
    """Base exception for all traktclient errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(TraktError):
    """Raised for configuration problems (missing client id, unreadable config or endpoint table)."""

    exit_code = EXIT_GENERIC_FAILURE


class BindingError(TraktError):
    """Raised when a mandatory URL placeholder has no matching call parameter.

    Attributes:
        parameter: Name of the missing placeholder (without the leading ``:``).
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, parameter: str):
        super().__init__(f"Missing mandatory parameter: {parameter}")
        self.parameter = parameter


class InvalidPollError(TraktError):
    """Raised when :meth:`~traktclient.auth.TokenManager.poll_access` gets a malformed poll descriptor."""

    exit_code = EXIT_INVALID_USAGE


class AuthorizationRequiredError(TraktError):
    """Raised when an auth-only endpoint is called without an access token or client secret."""

    exit_code = EXIT_AUTH_FAILURE


class CsrfMismatchError(TraktError):
    """Raised when the state returned by the authorization redirect does not match the issued one."""

    exit_code = EXIT_AUTH_FAILURE


class AuthServerError(TraktError):
    """Raised when an OAuth endpoint answers 401.

    The message is the content of the ``WWW-Authenticate`` response header,
    which carries the server's reason (``invalid_grant``, ``invalid_client``...).
    """

    exit_code = EXIT_AUTH_FAILURE


class TransportError(TraktError):
    """Raised for every HTTP or network failure not translated into a more specific error.

    Attributes:
        status: HTTP status code, or ``None`` for network-level failures
            (DNS, refused connection, timeout).
        headers: Response headers with lower-cased names (empty when
            there was no response).
        body: Decoded response body, if any.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.headers = headers or {}
        self.body = body


class PollExpiredError(TraktError):
    """Raised when device-code polling exceeds the code's ``expires_in`` window."""

    exit_code = EXIT_TIMEOUT


class PluginError(TraktError):
    """Raised when a plugin fails to load or initialise."""

    exit_code = EXIT_PLUGIN_ERROR
