"""Tests for the Trakt client facade (traktclient.trakt)."""

from __future__ import annotations

import logging
from typing import Any, Callable

import pytest

from traktclient import Trakt as ExportedTrakt
from traktclient.exceptions import BindingError, ConfigurationError
from traktclient.generator.namespace import Endpoint, Namespace
from traktclient.models import PaginatedResponse, Settings
from traktclient.trakt import Trakt


class TestConstruction:
    def test_missing_client_id(self, fake_api: Any) -> None:
        with pytest.raises(ConfigurationError, match="Missing client_id"):
            Trakt(table={}, http_transport=fake_api.transport)

    def test_settings_object_and_overrides(self, fake_api: Any) -> None:
        trakt = Trakt(
            Settings(client_id="a", api_url="https://api-staging.trakt.tv/"),
            client_secret="s",
            table={},
            http_transport=fake_api.transport,
        )
        assert trakt.settings.client_id == "a"
        assert trakt.settings.client_secret == "s"
        assert trakt.settings.api_url == "https://api-staging.trakt.tv"

    def test_invalid_setting(self, fake_api: Any) -> None:
        with pytest.raises(ConfigurationError):
            Trakt({"client_id": "a", "timeout": "never"}, table={}, http_transport=fake_api.transport)

    def test_bundled_table_by_default(self, fake_api: Any) -> None:
        trakt = Trakt(client_id="a", http_transport=fake_api.transport)
        assert isinstance(trakt.movies.trending, Endpoint)
        assert isinstance(trakt.sync.history, Namespace)

    def test_bad_table(self, fake_api: Any) -> None:
        with pytest.raises(ConfigurationError):
            Trakt(client_id="a", table={"/x": {"method": "PATCH", "url": "/x"}}, http_transport=fake_api.transport)

    def test_debug_enables_logging(self, make_trakt: Callable[..., Trakt]) -> None:
        logger = logging.getLogger("traktclient")
        previous = logger.level
        try:
            make_trakt(debug=True)
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_package_export(self) -> None:
        assert ExportedTrakt is Trakt


class TestEndpointAccess:
    def test_attribute_and_key_access(self, make_trakt: Callable[..., Trakt]) -> None:
        trakt = make_trakt()
        assert trakt.endpoint("shows/summary") is trakt.shows.summary
        assert trakt.endpoint("/shows/summary") is trakt.shows.summary
        assert trakt.endpoint("shows.summary") is trakt.shows.summary
        assert trakt.shows.summary.descriptor.url == "/shows/:id"

    def test_group_is_not_an_endpoint(self, make_trakt: Callable[..., Trakt]) -> None:
        with pytest.raises(KeyError):
            make_trakt().endpoint("shows")

    def test_unknown(self, make_trakt: Callable[..., Trakt]) -> None:
        trakt = make_trakt()
        with pytest.raises(KeyError):
            trakt.endpoint("nope")
        with pytest.raises(AttributeError):
            trakt.nope

    def test_dir(self, make_trakt: Callable[..., Trakt]) -> None:
        names = dir(make_trakt())
        assert "shows" in names
        assert "get_url" in names

    def test_leaf_with_children(self, make_trakt: Callable[..., Trakt]) -> None:
        replies = make_trakt().comments.replies
        assert replies.descriptor.method.value == "GET"
        assert replies.add.descriptor.method.value == "POST"

    def test_table_is_shared_and_descriptors_are_copies(self, make_trakt: Callable[..., Trakt]) -> None:
        trakt = make_trakt()
        assert trakt.table["/shows/summary"] == trakt.shows.summary.descriptor
        assert trakt.table["/shows/summary"] is not trakt.shows.summary.descriptor

    def test_binding_error_is_synchronous(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        with pytest.raises(BindingError) as exc_info:
            make_trakt().shows.summary()
        assert exc_info.value.parameter == "id"
        assert fake_api.requests == []


class TestCalls:
    @pytest.mark.asyncio
    async def test_call_by_key(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.json("GET", "/search/show", [{"type": "show"}])
        async with make_trakt() as trakt:
            result = await trakt.call("search/text", type="show", query="tron legacy", fields="title")
        assert result == [{"type": "show"}]
        assert fake_api.last.url.raw_path == b"/search/show?query=tron%20legacy&fields=title"

    @pytest.mark.asyncio
    async def test_optional_placeholders_dropped(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.json("GET", "/sync/history", [])
        async with make_trakt() as trakt:
            await trakt.import_token({"access_token": "t", "expires": None, "refresh_token": None})
            await trakt.sync.history.get(start_at="2024-01-01", page=1, limit=10, extended="full")
        assert fake_api.last.url.raw_path == b"/sync/history?start_at=2024-01-01&page=1&limit=10&extended=full"

    @pytest.mark.asyncio
    async def test_client_default_pagination(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.json("GET", "/networks", [])
        fake_api.json("GET", "/shows/trending", [], headers={"X-Pagination-Page": "1"})
        async with make_trakt(pagination=True) as trakt:
            networks = await trakt.networks()
            trending = await trakt.shows.trending()
        assert networks == PaginatedResponse(data=[], pagination=False)
        assert trending.pagination.page == 1
        assert trending.pagination.limit is None

    @pytest.mark.asyncio
    async def test_optional_auth_sends_token_when_present(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.json("GET", "/users/sean", {"username": "sean"})
        async with make_trakt() as trakt:
            await trakt.users.profile(username="sean")
            assert "Authorization" not in fake_api.last.headers
            await trakt.import_token({"access_token": "t", "expires": None, "refresh_token": None})
            await trakt.users.profile(username="sean")
            assert fake_api.last.headers["Authorization"] == "Bearer t"

    @pytest.mark.asyncio
    async def test_debug_logs_requests(
        self, make_trakt: Callable[..., Trakt], fake_api: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        fake_api.json("GET", "/networks", [])
        caplog.set_level(logging.DEBUG, logger="traktclient")
        async with make_trakt() as trakt:
            await trakt.networks()
        assert "GET: /networks" in caplog.text
