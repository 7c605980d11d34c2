#!/usr/bin/env python3
"""
HTTP endpoints: SSE stream, message POST, health and monitoring.
"""

from .health import health_endpoint, healthcheck_endpoint, ping_endpoint, version_endpoint
from .messages import MessagesEndpoint
from .sessions import sessions_endpoint
from .sse import SessionEventSourceResponse, SSEEndpoint

__all__ = [
    "MessagesEndpoint",
    "SSEEndpoint",
    "SessionEventSourceResponse",
    "health_endpoint",
    "healthcheck_endpoint",
    "ping_endpoint",
    "sessions_endpoint",
    "version_endpoint",
]
