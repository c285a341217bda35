from __future__ import annotations

import asyncio
import base64
import logging

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from services.castr_client import (
    CastrAPIError,
    CastrAuthError,
    CastrClient,
    CastrTransportError,
)
from services.command_service import CommandService
from services.connection_status import ConnectionStatus, ConnectionStatusTracker
from services.reference_resolver import ReferenceResolver
from services.stream_directory import StreamDirectory

TOKEN = "token-id"
SECRET = "secret-key"


def _fake_castr_app(received):
    expected = "Basic " + base64.b64encode(f"{TOKEN}:{SECRET}".encode()).decode()

    def _authorized(request):
        return request.headers.get("Authorization") == expected

    async def list_streams(request):
        received.append((request.method, request.path, None))
        if not _authorized(request):
            raise web.HTTPUnauthorized()
        return web.json_response({"docs": [{"_id": "s1", "name": "A"}]})

    async def patch_stream(request):
        body = await request.json()
        received.append((request.method, request.path, body))
        if not _authorized(request):
            raise web.HTTPUnauthorized()
        if request.match_info["stream_id"] == "broken":
            raise web.HTTPInternalServerError()
        if request.match_info["stream_id"] == "html":
            return web.Response(text="<html>maintenance</html>", content_type="text/html")
        return web.json_response({"_id": request.match_info["stream_id"], **body})

    async def patch_platform(request):
        body = await request.json()
        received.append((request.method, request.path, body))
        if request.match_info["platform_id"].startswith("html"):
            return web.Response(text="<html>maintenance</html>", content_type="text/html")
        return web.json_response({"_id": request.match_info["platform_id"], **body})

    app = web.Application()
    app.router.add_get("/v2/live_streams", list_streams)
    app.router.add_patch("/v2/live_streams/{stream_id}", patch_stream)
    app.router.add_patch("/v2/live_streams/{stream_id}/platforms/{platform_id}", patch_platform)
    return app


async def _with_server(scenario, token=TOKEN, secret=SECRET):
    received = []
    server = TestServer(_fake_castr_app(received))
    await server.start_server()
    try:
        tracker = ConnectionStatusTracker()
        client = CastrClient(token, secret, api_url=str(server.make_url("/v2/")), status_tracker=tracker)
        result = await scenario(client)
        return result, received, tracker
    finally:
        await server.close()


def test_build_url() -> None:
    client = CastrClient(TOKEN, SECRET, api_url="https://api.castr.com/v2/")

    assert client.build_url("live_streams") == "https://api.castr.com/v2/live_streams"
    assert client.build_url("live_streams", "s1/platforms/p1") == "https://api.castr.com/v2/live_streams/s1/platforms/p1"


def test_blank_api_url_falls_back_to_default() -> None:
    assert CastrClient(TOKEN, SECRET, api_url="").api_url == "https://api.castr.com/v2/"


def test_list_streams_sends_basic_auth() -> None:
    result, received, tracker = asyncio.run(_with_server(lambda client: client.list_streams()))

    assert result == {"docs": [{"_id": "s1", "name": "A"}]}
    assert received == [("GET", "/v2/live_streams", None)]
    assert tracker.status is None


def test_patch_stream_and_platform_bodies() -> None:
    async def scenario(client):
        stream = await client.set_stream_enabled("s1", True)
        platform = await client.set_platform_enabled("s2", "p1", False)
        return stream, platform

    (stream, platform), received, _ = asyncio.run(_with_server(scenario))

    assert stream == {"_id": "s1", "enabled": True}
    assert platform == {"_id": "p1", "enabled": False}
    assert received == [
        ("PATCH", "/v2/live_streams/s1", {"enabled": True}),
        ("PATCH", "/v2/live_streams/s2/platforms/p1", {"enabled": False}),
    ]


def test_unauthorized_is_an_auth_failure() -> None:
    async def scenario(client):
        with pytest.raises(CastrAuthError) as excinfo:
            await client.list_streams()
        return excinfo.value

    error, _, tracker = asyncio.run(_with_server(scenario, secret="wrong"))

    assert error.status == 401
    assert error.reason == "Unauthorized"
    assert tracker.status is ConnectionStatus.AUTHENTICATION_FAILURE


def test_server_error_is_an_api_failure() -> None:
    async def scenario(client):
        with pytest.raises(CastrAPIError) as excinfo:
            await client.set_stream_enabled("broken", True)
        return excinfo.value

    error, _, tracker = asyncio.run(_with_server(scenario))

    assert error.status == 500
    assert not isinstance(error, CastrAuthError)
    assert tracker.status is ConnectionStatus.UNKNOWN_ERROR


def test_connection_refused_is_a_transport_failure() -> None:
    async def scenario():
        server = TestServer(web.Application())
        await server.start_server()
        url = str(server.make_url("/v2/"))
        await server.close()

        client = CastrClient(TOKEN, SECRET, api_url=url, timeout=5)
        with pytest.raises(CastrTransportError):
            await client.list_streams()
        return client.status_tracker.status

    # transport errors do not change the connection status
    assert asyncio.run(scenario()) is None


def test_non_json_success_body_is_an_api_failure() -> None:
    async def scenario(client):
        with pytest.raises(CastrAPIError) as excinfo:
            await client.set_stream_enabled("html", True)
        return excinfo.value

    error, _, tracker = asyncio.run(_with_server(scenario))

    assert error.status == 200
    assert error.reason == "Invalid JSON response"
    assert tracker.status is ConnectionStatus.UNKNOWN_ERROR


def test_non_json_platform_responses_are_reported_per_platform(caplog) -> None:
    docs = [{
        "_id": "s2",
        "name": "B",
        "enabled": True,
        "platforms": [
            {"_id": "html-1", "name": "yt", "enabled": True},
            {"_id": "p2", "name": "twitch", "enabled": False},
            {"_id": "html-3", "name": "fb", "enabled": True},
        ],
    }]

    async def scenario(client):
        directory = StreamDirectory()
        directory.rebuild(docs)
        commands = CommandService(directory, ReferenceResolver(directory), client)
        return await commands.enable_platform("B :: *ALL*", "toggle")

    with caplog.at_level(logging.ERROR):
        results, received, _ = asyncio.run(_with_server(scenario))

    assert results == [False, True, False]
    assert len(received) == 3
    failures = [r for r in caplog.records if "failed to enable platform" in r.message]
    assert len(failures) == 2
