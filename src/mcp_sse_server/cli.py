#!/usr/bin/env python3
# src/mcp_sse_server/cli.py
"""
CLI entry point for the SSE MCP server.
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from .config import ServerConfig
from .constants import LOG_FORMAT, LOG_LEVELS, PACKAGE_LOGGER, EngineBinding
from .context import get_access_token, get_session_id
from .errors import short_token
from .server import SSEMCPServer


def setup_logging(level: str = "info", stderr: bool = True) -> None:
    """Set up logging configuration."""
    stream = sys.stderr if stderr else sys.stdout
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, stream=stream)
    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)


def create_example_server(config: ServerConfig | None = None) -> SSEMCPServer:
    """Create a simple example server with basic tools."""
    server = SSEMCPServer(config)

    @server.tool("echo")
    def echo(message: str) -> str:
        """Echo back the provided message."""
        return f"Echo: {message}"

    @server.tool("add")
    def add(a: float, b: float) -> float:
        """Add two numbers together."""
        return a + b

    @server.tool("session_info")
    def session_info() -> dict:
        """Report the calling session and whether an upstream token is configured."""
        return {"session_id": short_token(get_session_id()), "has_access_token": get_access_token() is not None}

    return server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-sse-server",
        description="MCP server over Server-Sent Events with POSTed client messages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run on the default port (8080)
  mcp-sse-server

  # Run on a custom port with one engine shared by all sessions
  mcp-sse-server --port 9000 --engine-binding shared

  # Run with debug logging
  mcp-sse-server --debug

Environment Variables:
  HOST, PORT              Bind address (default: 0.0.0.0:8080)
  FMP_ACCESS_TOKEN        Upstream API access token
  MCP_LOG_LEVEL           Logging level (debug|info|warning|error|critical)
  MCP_ENGINE_BINDING      per_session|shared
  MCP_SSE_KEEPALIVE       Seconds between keepalive comments (0 disables)
  MCP_MAX_QUEUED_EVENTS   Per-session event backlog limit
  MCP_SERVER_NAME         Server name
  MCP_SERVER_VERSION      Server version
  DEBUG                   Enable debug mode
        """,
    )
    parser.add_argument("--host", default=None, help="Host to bind to (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: $PORT or 8080)")
    parser.add_argument("--access-token", default=None, help="Upstream API access token (default: $FMP_ACCESS_TOKEN)")
    parser.add_argument(
        "--engine-binding",
        default=None,
        choices=list(EngineBinding.ALL),
        help="One protocol engine per session, or one shared by all sessions",
    )
    parser.add_argument("--keepalive", type=float, default=None, help="Keepalive interval in seconds (0 disables)")
    parser.add_argument("--log-level", default=None, choices=list(LOG_LEVELS), help="Logging level (default: info)")
    parser.add_argument("--debug", action="store_true", default=None, help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ServerConfig.from_env(
            host=args.host,
            port=args.port,
            access_token=args.access_token,
            engine_binding=args.engine_binding,
            keepalive_interval=args.keepalive,
            log_level=args.log_level,
            debug=args.debug,
        )
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.effective_log_level)

    server = create_example_server(config)
    logging.getLogger(__name__).info(f"Starting {config.name} with tools: {', '.join(server.tools)}")
    server.run()


if __name__ == "__main__":
    main()
