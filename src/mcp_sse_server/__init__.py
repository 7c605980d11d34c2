#!/usr/bin/env python3
"""
mcp_sse_server - MCP over Server-Sent Events with POSTed client messages

Each ``GET /sse`` opens an isolated session; the first event tells the client
where to POST its messages (``/messages?sessionId=<token>``):

    from mcp_sse_server import SSEMCPServer, ServerConfig

    server = SSEMCPServer(ServerConfig.from_env())

    @server.tool
    def hello(name: str) -> str:
        return f"Hello, {name}!"

    if __name__ == "__main__":
        server.run()
"""

from .config import ServerConfig
from .errors import (
    DuplicateTokenError,
    EngineBindingError,
    RegistryCorruptionError,
    RoutingError,
    SessionClosedError,
    SessionError,
    UnknownSessionError,
    WriteError,
)
from .protocol import MCPProtocolEngine, ProtocolEngine, SSEServerTransport, ToolHandler, Transport
from .server import SSEMCPServer
from .session import ConnectionLifecycleManager, MessageRouter, SessionRegistry, StreamConnection

__version__ = "1.0.0"
__all__ = [
    "ConnectionLifecycleManager",
    "DuplicateTokenError",
    "EngineBindingError",
    "MCPProtocolEngine",
    "MessageRouter",
    "ProtocolEngine",
    "RegistryCorruptionError",
    "RoutingError",
    "SSEMCPServer",
    "SSEServerTransport",
    "ServerConfig",
    "SessionClosedError",
    "SessionError",
    "SessionRegistry",
    "StreamConnection",
    "ToolHandler",
    "Transport",
    "UnknownSessionError",
    "WriteError",
]
