#!/usr/bin/env python3
# src/mcp_sse_server/errors.py
"""
Structured error types for session routing.

Every per-session failure derives from ``SessionError`` and carries the
token it concerns plus the HTTP status the endpoint layer maps it to.
``RegistryCorruptionError`` is the only fatal kind and is never caught by
the server.
"""

from .constants import TOKEN_LOG_PREFIX


def short_token(token: str | None) -> str:
    """Truncate a session token for log output."""
    if not token:
        return "<none>"
    return f"{token[:TOKEN_LOG_PREFIX]}..."


class SessionError(Exception):
    """Base class for per-session errors."""

    http_status: int = 500
    error_type: str = "session_error"

    def __init__(self, message: str, token: str | None = None):
        self.token = token
        super().__init__(message)


class RoutingError(SessionError):
    """An inbound message could not be handed to a live session."""

    error_type = "routing_error"


class UnknownSessionError(RoutingError):
    """No live registry entry exists for the token."""

    http_status = 404
    error_type = "session_not_found"

    def __init__(self, token: str | None):
        super().__init__(f"Session not found: {short_token(token)}", token)


class SessionClosedError(RoutingError):
    """The session closed between lookup and handoff."""

    http_status = 404
    error_type = "session_not_found"

    def __init__(self, token: str | None):
        super().__init__(f"Session closed: {short_token(token)}", token)


class WriteError(SessionError):
    """Outbound delivery to a client failed; treat as connection loss."""

    error_type = "write_error"


class DuplicateTokenError(SessionError):
    """A token is already registered to a live session."""

    http_status = 500
    error_type = "duplicate_token"

    def __init__(self, token: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(f"Session token already registered: {short_token(token)} (attempts={attempts})", token)


class EngineBindingError(SessionError):
    """The protocol engine refused to bind to a session transport."""

    http_status = 500
    error_type = "engine_binding"


class RegistryCorruptionError(RuntimeError):
    """The session registry's internal state is inconsistent.

    Indicates a defect in concurrency control. Not a SessionError: callers
    must let it propagate to the process.
    """


__all__ = [
    "DuplicateTokenError",
    "EngineBindingError",
    "RegistryCorruptionError",
    "RoutingError",
    "SessionClosedError",
    "SessionError",
    "UnknownSessionError",
    "WriteError",
    "short_token",
]
