#!/usr/bin/env python3
# src/mcp_sse_server/endpoints/sse.py
"""
SSE streaming endpoint.

Each GET opens one session and holds the response open, streaming that
session's events until the client disconnects or the server closes the
session.
"""

import logging
import math
from collections.abc import Callable
from typing import Any

from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from ..constants import CONTENT_TYPE_SSE
from ..errors import SessionError, short_token
from ..session.connection import StreamConnection
from ..session.events import SSE_LINE_END, keepalive_event
from ..session.lifecycle import ConnectionLifecycleManager
from .constants import ERROR_SESSION_OPEN_FAILED, HEADERS_SSE
from .utils import error_response_fast

logger = logging.getLogger(__name__)

# anyio sleeps forever on an infinite interval, so no pings are sent
PING_DISABLED = math.inf


class SessionEventSourceResponse(EventSourceResponse):
    """Streams one session's event sink.

    ``EventSourceResponse`` sends the sink's events in order, pings while
    the stream is idle and stops when the client disconnects or the sink
    is closed. ``on_close`` runs exactly once afterwards, including when
    the request task is cancelled.
    """

    def __init__(
        self,
        connection: StreamConnection,
        on_close: Callable[[], Any],
        keepalive_interval: float | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(
            connection.sink.events(),
            headers=headers,
            media_type=CONTENT_TYPE_SSE,
            ping=keepalive_interval or PING_DISABLED,
            ping_message_factory=keepalive_event,
            sep=SSE_LINE_END,
        )
        self.connection = connection
        self._on_close = on_close

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        except OSError:
            logger.debug(f"Client of session {short_token(self.connection.token)} went away mid-write")
        finally:
            self._on_close()


class SSEEndpoint:
    """``GET /sse``: open a session and stream it."""

    def __init__(self, lifecycle: ConnectionLifecycleManager, keepalive_interval: float | None = None):
        self.lifecycle = lifecycle
        self.keepalive_interval = keepalive_interval

    async def handle_request(self, request: Request) -> Response:
        try:
            connection = await self.lifecycle.open_session()
        except SessionError as e:
            logger.error(f"Failed to open session: {e}")
            return error_response_fast(e.http_status, ERROR_SESSION_OPEN_FAILED, e.error_type)

        token = connection.token
        client = request.client.host if request.client else "unknown"
        logger.debug(f"Streaming session {short_token(token)} to {client}")

        return SessionEventSourceResponse(
            connection,
            on_close=lambda: self.lifecycle.notify_disconnect(token),
            keepalive_interval=self.keepalive_interval,
            headers=HEADERS_SSE,
        )


__all__ = ["SSEEndpoint", "SessionEventSourceResponse"]
