"""Shared test fixtures for traktclient.

Provides a small endpoint table, an HTTP double built on
:class:`httpx.MockTransport` that records every request, a client factory
wired to it, and config isolation for the CLI tests. These fixtures are
discovered by pytest and available to all test modules without imports.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from traktclient.models import EndpointDescriptor, Settings
from traktclient.output import OutputFormat, OutputManager, reset_output, set_output
from traktclient.table import parse_table
from traktclient.trakt import Trakt


SAMPLE_TABLE: dict[str, Any] = {
    "/shows/summary": {
        "method": "GET",
        "url": "/shows/:id",
        "opts": {"extended": True},
    },
    "/shows/trending": {
        "method": "GET",
        "url": "/shows/trending",
        "opts": {"pagination": True, "extended": True},
    },
    "/search/text": {
        "method": "GET",
        "url": "/search/:type?query=&fields=",
        "opts": {"pagination": True},
    },
    "/sync/history/get": {
        "method": "GET",
        "url": "/sync/history/:type/:id?start_at=&end_at=",
        "optional": ["type", "id"],
        "opts": {"auth": True, "pagination": True, "extended": True},
    },
    "/users/profile": {
        "method": "GET",
        "url": "/users/:username",
        "opts": {"auth": "optional"},
    },
    "/checkin/add": {
        "method": "POST",
        "url": "/checkin",
        "body": {"movie": None, "episode": None, "sharing": None, "message": None},
        "opts": {"auth": True},
    },
    "/comments/replies": {
        "method": "GET",
        "url": "/comments/:id/replies",
        "opts": {"pagination": True},
    },
    "/comments/replies/add": {
        "method": "POST",
        "url": "/comments/:id/replies",
        "body": {"comment": None, "spoiler": False},
        "opts": {"auth": True},
    },
    "/networks": {
        "method": "GET",
        "url": "/networks",
    },
}


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams the
    cached references go stale once the test finishes.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Table and settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_table() -> dict[str, EndpointDescriptor]:
    return parse_table(SAMPLE_TABLE)


@pytest.fixture
def settings() -> Settings:
    return Settings(client_id="client-id", client_secret="client-secret")


# ---------------------------------------------------------------------------
# HTTP double
# ---------------------------------------------------------------------------


class FakeAPI:
    """Routes requests to canned responses and records what was sent.

    Routes are keyed by ``"METHOD /path"`` (query string excluded). A route
    value is an :class:`httpx.Response`, a callable taking the request, or a
    list of either consumed one per request (the last one repeats).
    A fresh copy of the response is returned for every request.
    Unrouted requests get ``404``.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, response: Any) -> None:
        self.routes[f"{method.upper()} {path}"] = response

    def json(self, method: str, path: str, data: Any, status: int = 200, headers: Optional[dict[str, str]] = None) -> None:
        self.route(method, path, httpx.Response(status, json=data, headers=headers))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        response = self.routes.get(key)
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if callable(response):
            response = response(request)
        if response is None:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(response.status_code, headers=response.headers, content=response.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def body(self, index: int = -1) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def make_trakt(fake_api: FakeAPI) -> Callable[..., Trakt]:
    """Factory for a :class:`Trakt` wired to :fixture:`fake_api` and the sample table."""

    def _make(**overrides: Any) -> Trakt:
        options: dict[str, Any] = {
            "client_id": "client-id",
            "client_secret": "client-secret",
            "table": SAMPLE_TABLE,
            "http_transport": fake_api.transport,
        }
        options.update(overrides)
        return Trakt(**options)

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration and token storage to a temporary directory.

    Sets the XDG directories under tmp_path, clears every TRAKT_*
    variable, and changes the working directory to tmp_path.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["TRAKT_CLIENT_ID", "TRAKT_CLIENT_SECRET", "TRAKT_REDIRECT_URI", "TRAKT_API_URL"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("traktclient.config._is_xdg_platform", lambda: True)
    monkeypatch.chdir(tmp_path)
    return tmp_path
