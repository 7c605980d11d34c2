#!/usr/bin/env python3
# src/mcp_sse_server/session/events.py
"""
SSE event construction.

Server-to-client events are ``sse_starlette`` ``ServerSentEvent`` objects,
one protocol message per event, framed with CRLF line endings.
"""

from typing import Any

import orjson
from sse_starlette import ServerSentEvent

SSE_EVENT_MESSAGE = "message"
SSE_EVENT_ENDPOINT = "endpoint"
SSE_LINE_END = "\r\n"


def message_event(message: dict[str, Any], event_id: int | None = None) -> ServerSentEvent:
    """Build a ``message`` event from a JSON-serializable protocol message."""
    return ServerSentEvent(
        data=orjson.dumps(message).decode(),
        event=SSE_EVENT_MESSAGE,
        id=str(event_id) if event_id is not None else None,
        sep=SSE_LINE_END,
    )


def endpoint_event(url: str) -> ServerSentEvent:
    """Build the ``endpoint`` event that tells the client where to POST."""
    return ServerSentEvent(data=url, event=SSE_EVENT_ENDPOINT, sep=SSE_LINE_END)


def keepalive_event() -> ServerSentEvent:
    """Comment-only event sent while a stream is idle."""
    return ServerSentEvent(comment="keepalive", sep=SSE_LINE_END)


__all__ = [
    "SSE_EVENT_ENDPOINT",
    "SSE_EVENT_MESSAGE",
    "SSE_LINE_END",
    "ServerSentEvent",
    "endpoint_event",
    "keepalive_event",
    "message_event",
]
