from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from pyvitaltwin._transport import HttpTransport
from pyvitaltwin.config import TwinConfig
from pyvitaltwin.exceptions import TwinProtocolError, TwinTransportError

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


async def _serve(path: str, handler: Handler) -> test_utils.TestServer:
    app = web.Application()
    app.router.add_get(path, handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


def _base_url(server: test_utils.TestServer) -> str:
    return str(server.make_url("")).rstrip("/")


@pytest.mark.asyncio
async def test_get_json_returns_decoded_body() -> None:
    async def handler(request: web.Request) -> web.Response:
        assert request.headers["accept"] == "application/json"
        return web.json_response({"success": True, "data": [1, 2, 3]})

    server = await _serve("/api/iot/data", handler)
    try:
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(TwinConfig(base_url=_base_url(server)), session)
            body = await transport.get_json("/api/iot/data")
    finally:
        await server.close()

    assert body == {"success": True, "data": [1, 2, 3]}


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error_with_status() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({"success": False}, status=503)

    server = await _serve("/api/iot/status", handler)
    try:
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(TwinConfig(base_url=_base_url(server)), session)
            with pytest.raises(TwinTransportError, match="HTTP 503") as excinfo:
                await transport.get_json("/api/iot/status")
    finally:
        await server.close()

    assert excinfo.value.status_code == 503
    assert excinfo.value.endpoint == "/api/iot/status"


@pytest.mark.asyncio
async def test_non_json_body_raises_protocol_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(text="<html>maintenance</html>", content_type="text/html")

    server = await _serve("/api/iot/anomalies", handler)
    try:
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(TwinConfig(base_url=_base_url(server)), session)
            with pytest.raises(TwinProtocolError, match="Invalid JSON"):
                await transport.get_json("/api/iot/anomalies")
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_timeout_raises_transport_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        await asyncio.sleep(0.5)
        return web.json_response({"success": True})

    server = await _serve("/api/iot/data/latest", handler)
    try:
        async with aiohttp.ClientSession() as session:
            config = TwinConfig(base_url=_base_url(server), request_timeout=0.05)
            transport = HttpTransport(config, session)
            with pytest.raises(TwinTransportError, match="timed out"):
                await transport.get_json("/api/iot/data/latest")
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_connection_refused_raises_transport_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.json_response({})

    server = await _serve("/", handler)
    base_url = _base_url(server)
    await server.close()

    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(TwinConfig(base_url=base_url), session)
        with pytest.raises(TwinTransportError, match="failed"):
            await transport.get_json("/api/iot/data/latest")


@pytest.mark.asyncio
async def test_body_that_is_not_utf8_raises_protocol_error() -> None:
    async def handler(_request: web.Request) -> web.Response:
        return web.Response(body=b'{"success": true, "data": "\xff\xfe"}', content_type="application/json")

    server = await _serve("/api/iot/data", handler)
    try:
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(TwinConfig(base_url=_base_url(server)), session)
            with pytest.raises(TwinProtocolError, match="Invalid JSON") as excinfo:
                await transport.get_json("/api/iot/data")
    finally:
        await server.close()

    assert excinfo.value.endpoint == "/api/iot/data"
