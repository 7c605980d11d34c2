#!/usr/bin/env python3
# src/mcp_sse_server/app.py
"""
Starlette application factory.

Wires the session endpoints and the health endpoints onto one app. The
server object is stored on ``app.state`` so endpoints reach the registry,
lifecycle manager and config without module globals.
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from .endpoints import (
    MessagesEndpoint,
    SSEEndpoint,
    health_endpoint,
    healthcheck_endpoint,
    ping_endpoint,
    sessions_endpoint,
    version_endpoint,
)
from .endpoints.constants import PATH_HEALTH, PATH_HEALTHCHECK, PATH_PING, PATH_SESSIONS, PATH_VERSION
from .endpoints.utils import internal_error_response, not_found_response

if TYPE_CHECKING:
    from .server import SSEMCPServer

logger = logging.getLogger(__name__)


async def _not_found_handler(request: Request, exc: Exception) -> Response:
    return not_found_response()


async def _server_error_handler(request: Request, exc: Exception) -> Response:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return internal_error_response()


def create_app(server: "SSEMCPServer") -> Starlette:
    """
    Create the Starlette application for ``server``.

    Args:
        server: Composition root holding config, registry, lifecycle and router

    Returns:
        Configured Starlette application
    """
    config = server.config

    sse_endpoint = SSEEndpoint(server.lifecycle, keepalive_interval=config.keepalive_interval)
    messages_endpoint = MessagesEndpoint(server.router, server.registry, max_body_bytes=config.max_body_bytes)

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
            max_age=3600,
        ),
    ]

    routes = [
        # Session channel
        Route(config.sse_path, sse_endpoint.handle_request, methods=["GET"]),
        Route(config.messages_path, messages_endpoint.handle_request, methods=["POST"]),
        # Health and monitoring
        Route(PATH_HEALTHCHECK, healthcheck_endpoint, methods=["GET"]),
        Route(PATH_HEALTH, health_endpoint, methods=["GET"]),
        Route(PATH_PING, ping_endpoint, methods=["GET"]),
        Route(PATH_VERSION, version_endpoint, methods=["GET"]),
        Route(PATH_SESSIONS, sessions_endpoint, methods=["GET"]),
    ]

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(f"{config.name} {config.version} ready: stream at {config.sse_path}, messages at {config.messages_path}")
        try:
            yield
        finally:
            logger.info("Shutting down sessions")
            await server.lifecycle.shutdown()

    exception_handlers = {404: _not_found_handler, 500: _server_error_handler}

    app = Starlette(
        debug=config.debug,
        routes=routes,
        middleware=middleware,
        exception_handlers=exception_handlers,
        lifespan=lifespan,
    )
    app.state.server = server
    app.state.config = config
    app.state.started_at = time.time()
    return app


__all__ = ["create_app"]
