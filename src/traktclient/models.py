"""Canonical Pydantic models shared across all traktclient modules.

The models fall into three groups:

**Configuration** -- :class:`Settings`, resolved by
:func:`traktclient.config.resolve_settings` or passed straight to
:class:`~traktclient.trakt.Trakt`.

**Endpoint table** -- :class:`HTTPMethod`, :class:`EndpointOptions` and
:class:`EndpointDescriptor`, produced by :mod:`traktclient.table` and
consumed by the namespace builder and request binder.

**Authentication and responses** -- :class:`AuthenticationState`,
:class:`TokenRecord`, :class:`DeviceCodes`, :class:`PollDescriptor`,
:class:`Pagination` and :class:`PaginatedResponse`.

Descriptors and the authentication state are frozen: the token manager
never mutates a state in place, it swaps in a new instance built with
``model_copy(update=...)``.
"""

from __future__ import annotations

import enum
import platform
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from traktclient import __version__

DEFAULT_API_URL = "https://api.trakt.tv"
"""Production API endpoint used when ``api_url`` is not configured."""

REDIRECT_URN = "urn:ietf:wg:oauth:2.0:oob"
"""Out-of-band redirect URI: the authorization code is shown to the user instead of redirected."""


def default_useragent() -> str:
    """Return the ``User-Agent`` sent when none is configured."""
    return f"traktclient/{__version__} (Python {platform.python_version()})"


# --- Configuration ---


class Settings(BaseModel):
    """Client configuration.

    Only ``client_id`` is required, and its absence is reported by
    :class:`~traktclient.trakt.Trakt` as a
    :class:`~traktclient.exceptions.ConfigurationError` rather than a
    validation error so that a config file can be loaded before the id is
    known. Empty strings for ``redirect_uri``, ``api_url`` and ``useragent``
    fall back to their defaults.
    """

    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    redirect_uri: str = REDIRECT_URN
    api_url: str = DEFAULT_API_URL
    pagination: bool = Field(
        default=False, description="Wrap paginated responses in a PaginatedResponse by default"
    )
    useragent: str = Field(default_factory=default_useragent)
    sanitize: bool = Field(default=True, description="Sanitize string values in responses")
    debug: bool = Field(default=False, description="Log every request at DEBUG level")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @field_validator("redirect_uri", mode="before")
    @classmethod
    def _default_redirect(cls, value: Any) -> Any:
        return value or REDIRECT_URN

    @field_validator("api_url", mode="before")
    @classmethod
    def _default_api_url(cls, value: Any) -> Any:
        return (value or DEFAULT_API_URL).rstrip("/")

    @field_validator("useragent", mode="before")
    @classmethod
    def _default_ua(cls, value: Any) -> Any:
        return value or default_useragent()


# --- Endpoint table ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs an endpoint descriptor may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class EndpointOptions(BaseModel):
    """Per-endpoint option flags (the ``opts`` object of a table entry).

    ``auth`` is ``True`` for endpoints that require an access token,
    ``"optional"`` for endpoints that accept one when available, and
    ``False`` otherwise. Unknown flags are preserved in ``model_extra``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    auth: Union[bool, Literal["optional"]] = False
    pagination: bool = False
    extended: bool = False

    @field_validator("pagination", "extended", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class EndpointDescriptor(BaseModel):
    """Static definition of a single API endpoint.

    Example table entry::

        "/shows/summary": {
            "method": "GET",
            "url": "/shows/:id",
            "opts": {"extended": true}
        }

    Placeholders (``:name``) in ``url`` are mandatory unless listed in
    ``optional``. The part after ``?`` lists the query parameters the
    endpoint recognises (``/search/:type?query=&fields=``).
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod = HTTPMethod.GET
    url: str
    body: dict[str, Any] = Field(default_factory=dict)
    optional: list[str] = Field(default_factory=list)
    opts: EndpointOptions = Field(default_factory=EndpointOptions)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def requires_auth(self) -> bool:
        """Whether a call must be refused when no access token is installed."""
        return self.opts.auth is True

    @property
    def sends_auth(self) -> bool:
        """Whether the bearer header is attached when a token is available."""
        return bool(self.opts.auth)


# --- Authentication ---


class AuthenticationState(BaseModel):
    """Token state owned by a :class:`~traktclient.auth.TokenManager`.

    ``expires`` is an epoch timestamp in milliseconds. ``csrf_state`` is the
    value embedded in the last authorization URL and is consumed by a
    successful code exchange.
    """

    model_config = ConfigDict(frozen=True)

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires: Optional[int] = None
    csrf_state: Optional[str] = None


class TokenRecord(BaseModel):
    """Import/export shape of a token: the only state a caller needs to persist."""

    access_token: Optional[str] = None
    expires: Optional[int] = Field(default=None, description="Epoch milliseconds")
    refresh_token: Optional[str] = None


class DeviceCodes(BaseModel):
    """Payload of ``POST /oauth/device/code``.

    Can be handed unchanged to
    :meth:`~traktclient.auth.TokenManager.poll_access`. Fields the server
    adds beyond these are kept in ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    device_code: str
    user_code: str
    verification_url: str = ""
    expires_in: int = 600
    interval: int = 5


class PollDescriptor(BaseModel):
    """Validated input of a device-code polling session (seconds)."""

    model_config = ConfigDict(extra="ignore")

    device_code: str = Field(min_length=1)
    expires_in: float = Field(gt=0)
    interval: float = Field(gt=0)


# --- Responses ---


class Pagination(BaseModel):
    """Values of the ``x-pagination-*`` response headers.

    Numeric header values are converted to ``int``; anything else is kept
    as the raw string, and missing headers are ``None``.
    """

    model_config = ConfigDict(populate_by_name=True)

    item_count: Optional[Union[int, str]] = Field(default=None, alias="item-count")
    limit: Optional[Union[int, str]] = None
    page: Optional[Union[int, str]] = None
    page_count: Optional[Union[int, str]] = Field(default=None, alias="page-count")


class PaginatedResponse(BaseModel):
    """Envelope returned when pagination is requested.

    ``pagination`` is ``False`` when the endpoint does not paginate.
    """

    data: Any = None
    pagination: Union[Pagination, Literal[False]] = False
