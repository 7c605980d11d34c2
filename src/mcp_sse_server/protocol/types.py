#!/usr/bin/env python3
# src/mcp_sse_server/protocol/types.py
"""
Types - MCP server identity, capability and content types from chuk_mcp.

The engine serializes these with ``model_dump(exclude_none=True)`` into the
JSON-RPC payloads it sends; only the small helpers below are local.
"""

from typing import Any

import orjson
from chuk_mcp.protocol.messages.tools.tool import Tool as MCPTool
from chuk_mcp.protocol.messages.tools.tool_input_schema import ToolInputSchema as MCPToolInputSchema
from chuk_mcp.protocol.types import (
    LoggingCapability,
    ServerCapabilities,
    ServerInfo,
    TextContent,
    ToolsCapability,
    content_to_dict,
    create_text_content,
)
from pydantic import BaseModel


def create_server_capabilities(
    tools: bool = True,
    logging: bool = False,
    experimental: dict[str, Any] | None = None,
) -> ServerCapabilities:
    """Create server capabilities using chuk_mcp types directly."""
    capabilities: dict[str, Any] = {}

    if tools:
        capabilities["tools"] = ToolsCapability(listChanged=False)
    if logging:
        capabilities["logging"] = LoggingCapability()
    if experimental:
        capabilities["experimental"] = experimental

    return ServerCapabilities(**capabilities)


def format_content(content: Any) -> list[dict[str, Any]]:
    """Format a tool result as a list of MCP content dicts."""
    if isinstance(content, str):
        return [content_to_dict(create_text_content(content))]
    if isinstance(content, dict):
        json_str = orjson.dumps(content, option=orjson.OPT_INDENT_2).decode()
        return [content_to_dict(create_text_content(json_str))]
    if isinstance(content, TextContent):
        # MCP content types before generic BaseModel
        return [content_to_dict(content)]
    if isinstance(content, BaseModel):
        json_str = orjson.dumps(content.model_dump(), option=orjson.OPT_INDENT_2).decode()
        return [content_to_dict(create_text_content(json_str))]
    if isinstance(content, list):
        items: list[dict[str, Any]] = []
        for item in content:
            items.extend(format_content(item))
        return items
    return [content_to_dict(create_text_content(str(content)))]


__all__ = [
    "LoggingCapability",
    "MCPTool",
    "MCPToolInputSchema",
    "ServerCapabilities",
    "ServerInfo",
    "TextContent",
    "ToolsCapability",
    "create_server_capabilities",
    "format_content",
]
