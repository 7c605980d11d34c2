#!/usr/bin/env python3
# src/mcp_sse_server/server.py
"""
SSEMCPServer - composition root for the SSE session server.

Builds the registry, lifecycle manager and router around one config, owns
the tool table the bundled MCP engine serves, and runs the Starlette app
under uvicorn:

    server = SSEMCPServer(ServerConfig.from_env())

    @server.tool
    def echo(message: str) -> str:
        return message

    server.run()
"""

import logging
from collections.abc import Callable
from typing import Any

import uvicorn
from starlette.applications import Starlette

from .app import create_app
from .config import ServerConfig
from .protocol.engine import EngineFactory, ProtocolEngine
from .protocol.handler import MCPProtocolEngine
from .protocol.tools import ToolHandler
from .protocol.types import ServerInfo, create_server_capabilities
from .session.lifecycle import ConnectionLifecycleManager
from .session.registry import SessionRegistry
from .session.router import MessageRouter

logger = logging.getLogger(__name__)


class SSEMCPServer:
    """MCP server speaking the SSE + POST transport."""

    def __init__(self, config: ServerConfig | None = None, engine_factory: EngineFactory | None = None):
        """
        Args:
            config: Server settings; defaults to ``ServerConfig()``
            engine_factory: Builds the protocol engine bound to sessions. Defaults
                to an ``MCPProtocolEngine`` serving this server's tools.
        """
        self.config = config or ServerConfig()
        self.server_info = ServerInfo(name=self.config.name, version=self.config.version)
        self.capabilities = create_server_capabilities(tools=True)
        self.tools: dict[str, ToolHandler] = {}

        self.registry = SessionRegistry()
        self.lifecycle = ConnectionLifecycleManager(
            self.registry,
            engine_factory or self.create_engine,
            engine_binding=self.config.engine_binding,
            messages_path=self.config.messages_path,
            max_queued_events=self.config.max_queued_events,
        )
        self.router = MessageRouter(self.registry)
        self._app: Starlette | None = None

        logger.debug(f"Server {self.config.name} configured ({self.config.engine_binding} engine binding)")

    @property
    def access_token(self) -> str | None:
        """Upstream API credential; tools read it with ``context.get_access_token()``."""
        return self.config.access_token

    def create_engine(self) -> ProtocolEngine:
        """Default engine factory: one MCP engine over the shared tool table."""
        return MCPProtocolEngine(
            self.server_info, self.capabilities, tools=self.tools, access_token=self.config.access_token
        )

    # ================================================================
    # Tool registration
    # ================================================================

    def tool(self, name: str | Callable[..., Any] | None = None, description: str | None = None) -> Any:
        """
        Register a function as an MCP tool.

        Usage:
            @server.tool
            def add(a: int, b: int) -> int:
                return a + b

            @server.tool("greet", description="Say hello")
            def hello(name: str) -> str:
                return f"Hello, {name}!"
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.add_tool(ToolHandler.from_function(func, name=tool_name, description=description))
            return func

        # Handle both @server.tool and @server.tool() usage
        if callable(name):
            func, tool_name = name, None
            return decorator(func)

        tool_name = name
        return decorator

    def add_tool(self, tool: ToolHandler) -> None:
        self.tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get_tools(self) -> list[ToolHandler]:
        return list(self.tools.values())

    # ================================================================
    # Application and run
    # ================================================================

    @property
    def app(self) -> Starlette:
        if self._app is None:
            self._app = create_app(self)
        return self._app

    def run(self) -> None:
        """Serve until interrupted."""
        uvicorn_config = self.config.get_uvicorn_config()
        logger.info(f"Starting {self.config.name} on {self.config.host}:{self.config.port}")
        if not self.tools:
            logger.warning("No tools registered")

        try:
            uvicorn.run(self.app, **uvicorn_config)
        except KeyboardInterrupt:
            logger.info("Server shutting down")


__all__ = ["SSEMCPServer"]
