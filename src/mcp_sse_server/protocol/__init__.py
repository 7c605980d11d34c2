#!/usr/bin/env python3
# src/mcp_sse_server/protocol/__init__.py
"""
MCP protocol package.

The engine boundary, the SSE transport that connects it to a session, and
the bundled MCP engine.
"""

from .engine import EngineFactory, ProtocolEngine, Transport
from .handler import MCPProtocolEngine
from .tools import ToolHandler
from .transport import SSEServerTransport
from .types import ServerCapabilities, ServerInfo, create_server_capabilities

__all__ = [
    "EngineFactory",
    "MCPProtocolEngine",
    "ProtocolEngine",
    "SSEServerTransport",
    "ServerCapabilities",
    "ServerInfo",
    "ToolHandler",
    "Transport",
    "create_server_capabilities",
]
