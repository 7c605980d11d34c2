#!/usr/bin/env python3
"""Tests for the HTTP endpoints: message POST status mapping, health and monitoring."""

from datetime import datetime

import httpx
import orjson
import pytest

from mcp_sse_server import SSEMCPServer, ServerConfig


@pytest.fixture
def server() -> SSEMCPServer:
    server = SSEMCPServer(ServerConfig(name="test-server", version="9.9.9", keepalive_interval=0, max_body_bytes=256))

    @server.tool
    def echo(message: str) -> str:
        return message

    return server


def _client(server: SSEMCPServer) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=server.app), base_url="http://testserver")


PING = orjson.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"})


class TestMessagesEndpoint:
    @pytest.mark.asyncio
    async def test_accepted_and_answered_on_stream(self, server, drain_events):
        connection = await server.lifecycle.open_session()
        drain_events(connection)

        async with _client(server) as client:
            response = await client.post(f"/messages?sessionId={connection.token}", content=PING)

        assert response.status_code == 202
        assert response.json() == {"status": "accepted"}

        await connection.transport.drain()
        assert [event.json() for event in drain_events(connection)] == [{"jsonrpc": "2.0", "id": 1, "result": {}}]

    @pytest.mark.asyncio
    async def test_missing_session_id_before_any_session(self, server):
        async with _client(server) as client:
            response = await client.post("/messages", content=PING)

        assert response.status_code == 503
        assert response.json()["error"] == "SSE transport not initialized."

    @pytest.mark.asyncio
    async def test_missing_session_id_with_live_sessions(self, server):
        await server.lifecycle.open_session()

        async with _client(server) as client:
            response = await client.post("/messages", content=PING)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_session(self, server):
        await server.lifecycle.open_session()

        async with _client(server) as client:
            response = await client.post("/messages?sessionId=doesnotexist", content=PING)

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == 404
        assert body["type"] == "session_not_found"

    @pytest.mark.asyncio
    async def test_closed_session(self, server):
        connection = await server.lifecycle.open_session()
        await server.lifecycle.close_session(connection.token)

        async with _client(server) as client:
            response = await client.post(f"/messages?sessionId={connection.token}", content=PING)

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("body", "status"), [(b"", 400), (b"{not json", 400), (b"x" * 1024, 413)])
    async def test_bad_bodies(self, server, body, status):
        connection = await server.lifecycle.open_session()

        async with _client(server) as client:
            response = await client.post(f"/messages?sessionId={connection.token}", content=body)

        assert response.status_code == status
        assert connection.is_open

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, server):
        async with _client(server) as client:
            response = await client.get("/messages")
        assert response.status_code == 405


class TestHealthEndpoints:
    @pytest.mark.asyncio
    async def test_healthcheck(self, server):
        async with _client(server) as client:
            response = await client.get("/healthcheck")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["version"] == "9.9.9"
        assert "test-server" in body["message"]
        datetime.fromisoformat(body["timestamp"])

    @pytest.mark.asyncio
    async def test_health_reports_uptime(self, server):
        async with _client(server) as client:
            response = await client.get("/health")
        assert response.json()["uptime"] >= 0

    @pytest.mark.asyncio
    async def test_health_independent_of_sessions(self, server):
        for _ in range(3):
            await server.lifecycle.open_session()
        await server.lifecycle.shutdown()

        async with _client(server) as client:
            response = await client.get("/healthcheck")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_ping_and_version(self, server):
        async with _client(server) as client:
            ping = await client.get("/ping")
            version = await client.get("/version")

        assert ping.json()["status"] == "pong"
        assert version.json()["protocol"]["transport"] == "sse"
        assert version.json()["version"] == "9.9.9"

    @pytest.mark.asyncio
    async def test_sessions_listing_truncates_tokens(self, server):
        connection = await server.lifecycle.open_session()

        async with _client(server) as client:
            response = await client.get("/sessions")

        body = response.json()
        assert body["active_sessions"] == 1
        assert body["sessions"][0]["session_id"] == connection.token[:8] + "..."
        assert connection.token not in response.text
        assert body["lifecycle"]["sessions_opened"] == 1

    @pytest.mark.asyncio
    async def test_unknown_path_is_json_not_found(self, server):
        async with _client(server) as client:
            response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found", "code": 404, "type": "not_found"}

    @pytest.mark.asyncio
    async def test_cors_preflight(self, server):
        async with _client(server) as client:
            response = await client.options(
                "/messages",
                headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
            )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
