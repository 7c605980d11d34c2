#!/usr/bin/env python3
"""
Top-level constants shared across the mcp_sse_server package.
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION_2024_11 = "2024-11-05"
MCP_DEFAULT_PROTOCOL_VERSION = MCP_PROTOCOL_VERSION_2024_11


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    NOTIFICATIONS_CANCELLED = "notifications/cancelled"


# MCP initialize parameter keys
KEY_CLIENT_INFO = "clientInfo"
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_SSE = "text/event-stream"


# ---------------------------------------------------------------------------
# Common HTTP headers
# ---------------------------------------------------------------------------
HEADER_CORS_ORIGIN = "Access-Control-Allow-Origin"
HEADER_CONTENT_TYPE = "Content-Type"
CORS_ALLOW_ALL = "*"


# ---------------------------------------------------------------------------
# Session routing
# ---------------------------------------------------------------------------
QUERY_SESSION_ID = "sessionId"
SESSION_TOKEN_BYTES = 16
MAX_TOKEN_ATTEMPTS = 8
TOKEN_LOG_PREFIX = 8


class EngineBinding:
    """How protocol engines are bound to sessions."""

    PER_SESSION = "per_session"
    SHARED = "shared"

    ALL = (PER_SESSION, SHARED)


# Close reasons recorded on a StreamConnection
CLOSE_CLIENT_DISCONNECT = "client_disconnect"
CLOSE_WRITE_ERROR = "write_error"
CLOSE_SERVER = "server_close"
CLOSE_SERVER_SHUTDOWN = "server_shutdown"
CLOSE_BIND_FAILED = "bind_failed"


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_DEBUG = "DEBUG"
ENV_ACCESS_TOKEN = "FMP_ACCESS_TOKEN"
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_MCP_ENGINE_BINDING = "MCP_ENGINE_BINDING"
ENV_MCP_SSE_KEEPALIVE = "MCP_SSE_KEEPALIVE"
ENV_MCP_MAX_QUEUED_EVENTS = "MCP_MAX_QUEUED_EVENTS"
ENV_MCP_SERVER_NAME = "MCP_SERVER_NAME"
ENV_MCP_SERVER_VERSION = "MCP_SERVER_VERSION"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_DEBUG = "debug"
LOG_INFO = "info"
LOG_WARNING = "warning"
LOG_ERROR = "error"
LOG_CRITICAL = "critical"

LOG_LEVELS = (LOG_DEBUG, LOG_INFO, LOG_WARNING, LOG_ERROR, LOG_CRITICAL)
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# ---------------------------------------------------------------------------
# Network defaults
# ---------------------------------------------------------------------------
DEFAULT_HOST = "0.0.0.0"
DEFAULT_ENCODING = "utf-8"
DEFAULT_PORT = 8080
DEFAULT_KEEPALIVE_INTERVAL = 15.0
DEFAULT_MAX_QUEUED_EVENTS = 1000


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "Financial Modeling Prep MCP"
SERVER_VERSION = "1.0.0"
FRAMEWORK_DESCRIPTION = "MCP over HTTP with SSE"
PACKAGE_LOGGER = "mcp_sse_server"


# ---------------------------------------------------------------------------
# Request validation limits
# ---------------------------------------------------------------------------
MAX_REQUEST_BODY_BYTES = 10 * 1024 * 1024  # 10 MB
MAX_ARGUMENT_KEYS = 100
