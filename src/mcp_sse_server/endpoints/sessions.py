#!/usr/bin/env python3
"""
Session listing endpoint for debugging and monitoring
"""

import time

from starlette.requests import Request
from starlette.responses import Response

from .utils import json_response_fast


async def sessions_endpoint(request: Request) -> Response:
    """List live sessions (tokens truncated) and lifecycle counters."""
    server = request.app.state.server
    # RegistryCorruptionError propagates
    server.registry.verify()
    connections = server.registry.connections()

    sessions_info = {
        "active_sessions": len(connections),
        "sessions": [connection.info() for connection in connections],
        "lifecycle": server.lifecycle.stats(),
        "routing": {
            "messages_routed": server.router.messages_routed,
            "messages_rejected": server.router.messages_rejected,
        },
        "timestamp": time.time(),
    }
    return json_response_fast(sessions_info)


__all__ = ["sessions_endpoint"]
