#!/usr/bin/env python3
"""
Endpoint constants - re-exports shared constants from the top-level module
and defines endpoint-specific values (HTTP status codes, pre-computed headers,
error messages, URL paths).
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# Re-export from top-level constants (single source of truth)
# ---------------------------------------------------------------------------
from mcp_sse_server.constants import (  # noqa: F401
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_SSE,
    CORS_ALLOW_ALL,
    FRAMEWORK_DESCRIPTION,
    HEADER_CONTENT_TYPE,
    HEADER_CORS_ORIGIN,
    MCP_DEFAULT_PROTOCOL_VERSION,
    QUERY_SESSION_ID,
)


# ---------------------------------------------------------------------------
# HTTP status codes (endpoint-specific)
# ---------------------------------------------------------------------------
class HttpStatus(IntEnum):
    OK = 200
    ACCEPTED = 202
    BAD_REQUEST = 400
    NOT_FOUND = 404
    REQUEST_ENTITY_TOO_LARGE = 413
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503


# ---------------------------------------------------------------------------
# Header names (endpoint-specific extras)
# ---------------------------------------------------------------------------
HEADER_CACHE_CONTROL = "Cache-Control"
HEADER_CONTENT_LENGTH = "content-length"


# ---------------------------------------------------------------------------
# Header values
# ---------------------------------------------------------------------------
CACHE_NO_CACHE = "no-cache"
CACHE_NO_STORE = "no-cache, no-store, must-revalidate"
CACHE_LONG = "public, max-age=3600"


# ---------------------------------------------------------------------------
# Pre-computed header combinations (shared across endpoints)
# ---------------------------------------------------------------------------
HEADERS_CORS_NOCACHE: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_NO_CACHE,
    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
}

HEADERS_HEALTH: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_NO_STORE,
    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
}

HEADERS_CORS_LONG_CACHE: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_LONG,
    HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
}

HEADERS_SSE: dict[str, str] = {
    HEADER_CORS_ORIGIN: CORS_ALLOW_ALL,
    HEADER_CACHE_CONTROL: CACHE_NO_CACHE,
}


# ---------------------------------------------------------------------------
# Error messages
# ---------------------------------------------------------------------------
ERROR_BAD_REQUEST = "Bad request"
ERROR_NOT_FOUND = "Not found"
ERROR_INTERNAL = "Internal server error"
ERROR_EMPTY_BODY = "Empty request body"
ERROR_INVALID_JSON = "Invalid JSON format"
ERROR_BODY_TOO_LARGE = "Request body too large"
ERROR_MISSING_SESSION = "Bad Request: Missing sessionId query parameter"
ERROR_NO_SESSION = "SSE transport not initialized."
ERROR_SESSION_OPEN_FAILED = "Could not establish session"


# ---------------------------------------------------------------------------
# Error types (for structured error responses)
# ---------------------------------------------------------------------------
ERROR_TYPE_BAD_REQUEST = "bad_request"
ERROR_TYPE_NOT_FOUND = "not_found"
ERROR_TYPE_TOO_LARGE = "request_too_large"
ERROR_TYPE_INTERNAL = "internal_error"
ERROR_TYPE_UNAVAILABLE = "service_unavailable"


# ---------------------------------------------------------------------------
# Status strings
# ---------------------------------------------------------------------------
STATUS_OK = "ok"
STATUS_PONG = "pong"
STATUS_ACCEPTED = "accepted"


# ---------------------------------------------------------------------------
# URL paths
# ---------------------------------------------------------------------------
PATH_HEALTHCHECK = "/healthcheck"
PATH_HEALTH = "/health"
PATH_PING = "/ping"
PATH_VERSION = "/version"
PATH_SESSIONS = "/sessions"
