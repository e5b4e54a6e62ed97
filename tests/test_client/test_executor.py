"""Tests for traktclient.client.executor -- auth policy, request assembly and dispatch."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from traktclient.client.executor import CallExecutor, build_body
from traktclient.client.transport import RequestDescriptor, ResponseDescriptor
from traktclient.exceptions import AuthorizationRequiredError, BindingError, TransportError
from traktclient.models import AuthenticationState, EndpointDescriptor, PaginatedResponse, Settings
from traktclient.trakt import Trakt


class RecordingTransport:
    """Transport double that records requests and returns a fixed response."""

    def __init__(self, response: ResponseDescriptor | None = None) -> None:
        self.sent: list[RequestDescriptor] = []
        self.response = response or ResponseDescriptor(status=200, data={"ok": True})

    async def send(self, request: RequestDescriptor) -> ResponseDescriptor:
        self.sent.append(request)
        return self.response

    async def aclose(self) -> None:
        pass


def _executor(
    transport: RecordingTransport,
    state: AuthenticationState | None = None,
    **settings: Any,
) -> CallExecutor:
    values: dict[str, Any] = {"client_id": "client-id", "client_secret": "client-secret"}
    values.update(settings)
    current = state or AuthenticationState()
    return CallExecutor(Settings(**values), transport, lambda: current)


class TestBuildBody:
    def test_get_has_no_body(self) -> None:
        descriptor = EndpointDescriptor(url="/a", body={"x": 1})
        assert build_body(descriptor, {"x": 2}) is None

    def test_template_overwritten_and_falsy_stripped(self) -> None:
        descriptor = EndpointDescriptor(
            method="POST",
            url="/checkin",
            body={"movie": None, "sharing": None, "message": "default", "spoiler": False},
        )
        body = build_body(descriptor, {"movie": {"ids": {"trakt": 1}}, "message": "", "other": "x"})
        assert body == {"movie": {"ids": {"trakt": 1}}}

    def test_empty_body_for_post(self) -> None:
        descriptor = EndpointDescriptor(method="DELETE", url="/checkin")
        assert build_body(descriptor, {}) == {}


class TestAuthPolicy:
    def test_required_auth_without_token_raises_before_dispatch(self) -> None:
        transport = RecordingTransport()
        executor = _executor(transport)
        descriptor = EndpointDescriptor(url="/sync/last_activities", opts={"auth": True})
        with pytest.raises(AuthorizationRequiredError):
            executor.invoke(descriptor, {})
        assert transport.sent == []

    def test_required_auth_without_secret_raises(self) -> None:
        transport = RecordingTransport()
        executor = _executor(
            transport, AuthenticationState(access_token="token"), client_secret=None
        )
        descriptor = EndpointDescriptor(url="/sync/last_activities", opts={"auth": True})
        with pytest.raises(AuthorizationRequiredError):
            executor.prepare(descriptor, {})

    def test_bearer_header_when_authenticated(self) -> None:
        executor = _executor(RecordingTransport(), AuthenticationState(access_token="token"))
        request = executor.prepare(EndpointDescriptor(url="/sync/last_activities", opts={"auth": True}), {})
        assert request.headers["Authorization"] == "Bearer token"

    def test_optional_auth_sends_header_only_with_token(self) -> None:
        descriptor = EndpointDescriptor(url="/users/:username", opts={"auth": "optional"})
        anonymous = _executor(RecordingTransport()).prepare(descriptor, {"username": "sean"})
        assert "Authorization" not in anonymous.headers
        authed = _executor(RecordingTransport(), AuthenticationState(access_token="t")).prepare(
            descriptor, {"username": "sean"}
        )
        assert authed.headers["Authorization"] == "Bearer t"

    def test_public_endpoint_never_sends_token(self) -> None:
        executor = _executor(RecordingTransport(), AuthenticationState(access_token="token"))
        request = executor.prepare(EndpointDescriptor(url="/networks"), {})
        assert "Authorization" not in request.headers

    def test_api_headers(self) -> None:
        request = _executor(RecordingTransport()).prepare(EndpointDescriptor(url="/networks"), {})
        assert request.headers["trakt-api-version"] == "2"
        assert request.headers["trakt-api-key"] == "client-id"

    def test_binding_error_is_synchronous(self) -> None:
        transport = RecordingTransport()
        with pytest.raises(BindingError):
            _executor(transport).invoke(EndpointDescriptor(url="/shows/:id"), {})
        assert transport.sent == []


class TestDispatch:
    @pytest.mark.asyncio
    async def test_returns_payload(self) -> None:
        transport = RecordingTransport(ResponseDescriptor(status=200, data=[{"title": "Dexter"}]))
        result = await _executor(transport).invoke(EndpointDescriptor(url="/shows/:id"), {"id": "dexter"})
        assert result == [{"title": "Dexter"}]
        assert transport.sent[0].method == "GET"
        assert transport.sent[0].url == "/shows/dexter"
        assert transport.sent[0].body is None

    @pytest.mark.asyncio
    async def test_pagination_envelope(self) -> None:
        headers = {
            "x-pagination-item-count": "120",
            "x-pagination-limit": "10",
            "x-pagination-page": "2",
            "x-pagination-page-count": "12",
        }
        transport = RecordingTransport(ResponseDescriptor(status=200, headers=headers, data=[1, 2]))
        descriptor = EndpointDescriptor(url="/shows/trending", opts={"pagination": True})
        result = await _executor(transport).invoke(descriptor, {"pagination": True, "page": 2})
        assert isinstance(result, PaginatedResponse)
        assert result.data == [1, 2]
        assert result.pagination is not False
        assert (result.pagination.item_count, result.pagination.limit) == (120, 10)
        assert (result.pagination.page, result.pagination.page_count) == (2, 12)
        assert transport.sent[0].url == "/shows/trending?page=2"

    @pytest.mark.asyncio
    async def test_pagination_requested_on_non_paginating_endpoint(self) -> None:
        transport = RecordingTransport(ResponseDescriptor(status=200, data={"title": "x"}))
        result = await _executor(transport).invoke(
            EndpointDescriptor(url="/shows/:id"), {"id": "x", "pagination": True}
        )
        assert result == PaginatedResponse(data={"title": "x"}, pagination=False)

    @pytest.mark.asyncio
    async def test_client_default_and_per_call_override(self) -> None:
        descriptor = EndpointDescriptor(url="/shows/trending", opts={"pagination": True})
        transport = RecordingTransport(ResponseDescriptor(status=200, data=[]))
        executor = _executor(transport, pagination=True)
        assert isinstance(await executor.invoke(descriptor, {}), PaginatedResponse)
        assert await executor.invoke(descriptor, {"pagination": False}) == []

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self) -> None:
        class FailingTransport(RecordingTransport):
            async def send(self, request: RequestDescriptor) -> ResponseDescriptor:
                raise TransportError("HTTP 500", status=500)

        with pytest.raises(TransportError):
            await _executor(FailingTransport()).invoke(EndpointDescriptor(url="/networks"), {})


class TestEndToEnd:
    """Generated endpoints over an httpx mock transport."""

    @pytest.mark.asyncio
    async def test_post_body_and_headers(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.json("POST", "/checkin", {"id": 1})
        async with make_trakt() as trakt:
            await trakt.import_token({"access_token": "abc", "expires": None, "refresh_token": "r"})
            result = await trakt.checkin.add(movie={"ids": {"trakt": 1}}, sharing=None, unknown="x")
        assert result == {"id": 1}
        request = fake_api.last
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["trakt-api-key"] == "client-id"
        assert fake_api.body() == {"movie": {"ids": {"trakt": 1}}}

    @pytest.mark.asyncio
    async def test_auth_gate_does_not_touch_transport(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        async with make_trakt() as trakt:
            with pytest.raises(AuthorizationRequiredError):
                trakt.sync.history.get()
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_http_error_surfaces_on_await(self, make_trakt: Callable[..., Trakt], fake_api: Any) -> None:
        fake_api.route("GET", "/shows/missing", httpx.Response(404, json={"error": "not found"}))
        async with make_trakt() as trakt:
            pending = trakt.shows.summary(id="missing")
            with pytest.raises(TransportError) as exc_info:
                await pending
        assert exc_info.value.status == 404
