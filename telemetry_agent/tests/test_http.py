"""
Telemetry Agent - HTTP Transport Tests

HttpTransport against a local aiohttp server.
"""

import asyncio
import time

import pytest
from aiohttp import web
from aiohttp import test_utils

from telemetry_agent.api.errors import TransportError
from telemetry_agent.api.http import HttpTransport


def collector_app(received):
    async def telemetry(request):
        received.append({"headers": dict(request.headers), "body": await request.json()})
        return web.json_response({"success": True, "data": {"id": "a1", "received": True, "timestamp": "t"}})

    async def plain(request):
        return web.Response(text="ok", content_type="text/plain")

    async def slow(request):
        await asyncio.sleep(0.5)
        return web.json_response({"success": True})

    async def rejected(request):
        return web.json_response({"success": False, "error": "bad payload"}, status=400)

    async def empty(request):
        return web.Response(status=204)

    app = web.Application()
    app.router.add_post("/api/telemetry", telemetry)
    app.router.add_get("/api/health", plain)
    app.router.add_post("/slow", slow)
    app.router.add_post("/rejected", rejected)
    app.router.add_post("/empty", empty)
    return app


class TestHttpTransport:
    """Test the aiohttp-backed transport."""

    @pytest.mark.asyncio
    async def test_post_json(self):
        received = []
        transport = HttpTransport()

        async with test_utils.TestServer(collector_app(received)) as server:
            try:
                response = await transport.post(
                    str(server.make_url("/api/telemetry")),
                    {"id": "e1", "tier": "high"},
                    {"X-Device-ID": "test-device"},
                    timeout=2.0,
                )
            finally:
                await transport.close()

        assert response.status == 200
        assert response.body["success"] is True
        assert received[0]["body"] == {"id": "e1", "tier": "high"}
        assert received[0]["headers"]["X-Device-ID"] == "test-device"

    @pytest.mark.asyncio
    async def test_non_json_body_is_none(self):
        transport = HttpTransport()

        async with test_utils.TestServer(collector_app([])) as server:
            try:
                response = await transport.get(str(server.make_url("/api/health")), timeout=2.0)
            finally:
                await transport.close()

        assert response.status == 200
        assert response.body is None

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self):
        transport = HttpTransport()

        async with test_utils.TestServer(collector_app([])) as server:
            try:
                response = await transport.post(str(server.make_url("/empty")), {}, {}, timeout=2.0)
            finally:
                await transport.close()

        assert response.status == 204
        assert response.body is None

    @pytest.mark.asyncio
    async def test_error_status_is_returned(self):
        """HTTP error statuses are responses, not transport errors."""
        transport = HttpTransport()

        async with test_utils.TestServer(collector_app([])) as server:
            try:
                response = await transport.post(str(server.make_url("/rejected")), {}, {}, timeout=2.0)
            finally:
                await transport.close()

        assert response.status == 400
        assert response.body == {"success": False, "error": "bad payload"}

    @pytest.mark.asyncio
    async def test_deadline_raises_transport_error(self):
        transport = HttpTransport()

        async with test_utils.TestServer(collector_app([])) as server:
            start = time.monotonic()
            try:
                with pytest.raises(TransportError):
                    await transport.post(str(server.make_url("/slow")), {}, {}, timeout=0.1)
            finally:
                await transport.close()
            elapsed = time.monotonic() - start

        assert elapsed < 0.4

    @pytest.mark.asyncio
    async def test_connection_refused_raises_transport_error(self):
        async with test_utils.TestServer(collector_app([])) as server:
            url = str(server.make_url("/api/telemetry"))

        transport = HttpTransport()
        try:
            with pytest.raises(TransportError):
                await transport.post(url, {}, {}, timeout=2.0)
        finally:
            await transport.close()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        transport = HttpTransport()

        await transport.close()
        await transport.close()
