#!/usr/bin/env python3
# src/mcp_sse_server/session/__init__.py
"""
Session registry and message routing.

One SSE stream per session; POSTed messages are routed to the stream whose
token they carry.
"""

from .connection import ConnectionState, EventSink, StreamConnection
from .events import endpoint_event, message_event
from .lifecycle import ConnectionLifecycleManager
from .registry import SessionRegistry
from .router import MessageRouter
from .token import mint_token

__all__ = [
    "ConnectionLifecycleManager",
    "ConnectionState",
    "EventSink",
    "MessageRouter",
    "SessionRegistry",
    "StreamConnection",
    "endpoint_event",
    "message_event",
    "mint_token",
]
