"""
Request context for tool calls.

The engine sets these before running a tool, so a tool function can reach
the session it is serving and the upstream access token without taking
them as arguments. Each inbound message runs in its own task, so values
never leak between sessions.
"""

from contextvars import ContextVar

# ============================================================================
# Context Variables
# ============================================================================

_session_id: ContextVar[str | None] = ContextVar("session_id", default=None)
_access_token: ContextVar[str | None] = ContextVar("access_token", default=None)


# ============================================================================
# Session Context Functions
# ============================================================================


def get_session_id() -> str | None:
    """
    Get the session token of the message being handled.

    Returns:
        Session token if set, None otherwise
    """
    return _session_id.get()


def set_session_id(session_id: str | None) -> None:
    _session_id.set(session_id)


# ============================================================================
# Credential Context Functions
# ============================================================================


def get_access_token() -> str | None:
    """Upstream API access token configured for this server, if any."""
    return _access_token.get()


def set_access_token(token: str | None) -> None:
    _access_token.set(token)


def require_access_token() -> str:
    """
    Require an upstream access token.

    Returns:
        The configured token

    Raises:
        RuntimeError: If the server was started without one
    """
    token = _access_token.get()
    if not token:
        raise RuntimeError("Access token required. Set FMP_ACCESS_TOKEN or pass --access-token.")
    return token


__all__ = [
    "get_access_token",
    "get_session_id",
    "require_access_token",
    "set_access_token",
    "set_session_id",
]
