#!/usr/bin/env python3
"""
endpoints/health.py - Health and liveness endpoints

Answer from process state only, so they stay available whatever the
session registry is doing.
"""

import time
from datetime import datetime, timezone

from starlette.requests import Request
from starlette.responses import Response

from .constants import FRAMEWORK_DESCRIPTION, MCP_DEFAULT_PROTOCOL_VERSION, STATUS_OK, STATUS_PONG
from .utils import json_response_fast


async def healthcheck_endpoint(request: Request) -> Response:
    """Process liveness and version."""
    config = request.app.state.config
    health_data = {
        "status": STATUS_OK,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.version,
        "message": f"{config.name} server is running",
    }
    return json_response_fast(health_data, cache_level="health")


async def health_endpoint(request: Request) -> Response:
    """``/healthcheck`` plus uptime."""
    config = request.app.state.config
    started_at: float = request.app.state.started_at
    health_data = {
        "status": STATUS_OK,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.version,
        "uptime": round(time.time() - started_at, 2),
    }
    return json_response_fast(health_data, cache_level="health")


async def ping_endpoint(request: Request) -> Response:
    """Ping with Unix millisecond timestamp"""
    response_data = {"status": STATUS_PONG, "server": request.app.state.config.name, "timestamp": int(time.time() * 1000)}
    return json_response_fast(response_data)


async def version_endpoint(request: Request) -> Response:
    config = request.app.state.config
    version_info = {
        "name": config.name,
        "version": config.version,
        "framework": FRAMEWORK_DESCRIPTION,
        "protocol": {"name": "MCP", "version": MCP_DEFAULT_PROTOCOL_VERSION, "transport": "sse"},
    }
    return json_response_fast(version_info, cache_level="long")


__all__ = ["health_endpoint", "healthcheck_endpoint", "ping_endpoint", "version_endpoint"]
