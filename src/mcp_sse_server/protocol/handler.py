#!/usr/bin/env python3
# src/mcp_sse_server/protocol/handler.py
"""
MCP protocol engine - JSON-RPC request handling over a session transport.

The engine is connected to one transport per session it serves. Requests
arrive through the transport's message handler, responses go back out
through ``transport.send``. The same instance can serve many transports
(shared binding) or exactly one (per-session binding).
"""

import asyncio
import logging
from functools import partial
from typing import Any

from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_CAPABILITIES,
    KEY_CLIENT_INFO,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    MAX_ARGUMENT_KEYS,
    MCP_DEFAULT_PROTOCOL_VERSION,
    JsonRpcError,
    McpMethod,
)
from ..context import set_access_token, set_session_id
from ..errors import EngineBindingError, WriteError, short_token
from .engine import Transport
from .tools import ParameterValidationError, ToolExecutionError, ToolHandler
from .types import ServerCapabilities, ServerInfo, create_server_capabilities, format_content

logger = logging.getLogger(__name__)


class MCPProtocolEngine:
    """Core MCP protocol handler."""

    def __init__(
        self,
        server_info: ServerInfo,
        capabilities: ServerCapabilities | None = None,
        tools: dict[str, ToolHandler] | None = None,
        access_token: str | None = None,
    ):
        self.server_info = server_info
        self.capabilities = capabilities or create_server_capabilities()
        self.tools: dict[str, ToolHandler] = tools if tools is not None else {}
        self.access_token = access_token

        self._transports: dict[str, Transport] = {}
        self._clients: dict[str, dict[str, Any]] = {}
        self._closed = False

        logger.debug("MCP protocol engine initialized")

    # ================================================================
    # Engine capability: connect / close
    # ================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connected_sessions(self) -> list[str]:
        return list(self._transports)

    async def connect(self, transport: Transport) -> None:
        """Start serving ``transport``."""
        if self._closed:
            raise EngineBindingError("Protocol engine is closed", transport.session_id)
        if transport.session_id in self._transports:
            raise EngineBindingError(
                f"Session {short_token(transport.session_id)} is already connected", transport.session_id
            )

        self._transports[transport.session_id] = transport
        transport.on_message(partial(self._handle_message, transport))
        transport.on_close(partial(self._disconnect, transport.session_id))
        logger.debug(f"Engine connected to session {short_token(transport.session_id)}")

    def _disconnect(self, session_id: str) -> None:
        self._transports.pop(session_id, None)
        self._clients.pop(session_id, None)

    async def close(self) -> None:
        """Close every connected transport and refuse new ones."""
        self._closed = True
        for transport in list(self._transports.values()):
            transport.close()
        self._transports.clear()
        self._clients.clear()
        logger.debug("MCP protocol engine closed")

    # ================================================================
    # Tool registry
    # ================================================================

    def register_tool(self, tool: ToolHandler) -> None:
        self.tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get_tools_list(self) -> list[dict[str, Any]]:
        return [tool.to_mcp_format() for tool in self.tools.values()]

    def client_info(self, session_id: str) -> dict[str, Any] | None:
        return self._clients.get(session_id)

    # ================================================================
    # Message handling
    # ================================================================

    async def _handle_message(self, transport: Transport, message: Any) -> None:
        if isinstance(message, list):
            responses = [await self.handle_request(item, transport.session_id) for item in message]
            outgoing = [r for r in responses if r is not None]
        else:
            response = await self.handle_request(message, transport.session_id)
            outgoing = [response] if response is not None else []

        for response in outgoing:
            try:
                await transport.send(response)
            except WriteError:
                logger.debug(f"Dropping response for closed session {short_token(transport.session_id)}")
                return

    async def handle_request(self, message: Any, session_id: str | None = None) -> dict[str, Any] | None:
        """Handle a single JSON-RPC message; returns the response or None for notifications."""
        if not isinstance(message, dict) or message.get(JSONRPC_KEY) != JSONRPC_VERSION:
            msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
            return self._create_error_response(msg_id, JsonRpcError.INVALID_REQUEST, "Invalid JSON-RPC 2.0 message")

        method = message.get(KEY_METHOD)
        params = message.get(KEY_PARAMS) or {}
        msg_id = message.get(KEY_ID)
        is_notification = KEY_ID not in message

        try:
            logger.debug(f"Handling {method} (ID: {msg_id})")

            if not isinstance(method, str):
                return self._create_error_response(msg_id, JsonRpcError.INVALID_REQUEST, "Missing method")
            if not isinstance(params, dict):
                return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, "params must be an object")

            if method == McpMethod.INITIALIZE:
                result = self._handle_initialize(params, session_id)
            elif method == McpMethod.INITIALIZED:
                logger.debug("Initialized notification received")
                return None
            elif method == McpMethod.NOTIFICATIONS_CANCELLED:
                logger.debug(f"Cancellation notification received: {params.get('requestId')}")
                return None
            elif method == McpMethod.PING:
                result = {}
            elif method == McpMethod.TOOLS_LIST:
                result = {"tools": self.get_tools_list()}
            elif method == McpMethod.TOOLS_CALL:
                return await self._handle_tools_call(params, msg_id, session_id)
            elif is_notification:
                return None
            else:
                return self._create_error_response(msg_id, JsonRpcError.METHOD_NOT_FOUND, f"Method not found: {method}")

            if is_notification:
                return None
            return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

        except asyncio.CancelledError:
            raise
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Invalid params in request: {e}")
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, f"Invalid parameters: {e}")
        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Internal server error")

    def _handle_initialize(self, params: dict[str, Any], session_id: str | None) -> dict[str, Any]:
        client_info = params.get(KEY_CLIENT_INFO, {})
        protocol_version = params.get(KEY_PROTOCOL_VERSION, MCP_DEFAULT_PROTOCOL_VERSION)

        if session_id is not None:
            self._clients[session_id] = {
                "client_info": client_info,
                "protocol_version": protocol_version,
                "capabilities": params.get(KEY_CAPABILITIES, {}),
            }

        logger.debug(f"Initialized session {short_token(session_id)} for {client_info.get('name', 'unknown')}")
        return {
            KEY_PROTOCOL_VERSION: protocol_version,
            KEY_SERVER_INFO: self.server_info.model_dump(exclude_none=True),
            KEY_CAPABILITIES: self.capabilities.model_dump(exclude_none=True),
        }

    async def _handle_tools_call(self, params: dict[str, Any], msg_id: Any, session_id: str | None) -> dict[str, Any]:
        tool_name = params.get("name", "")
        arguments = params.get("arguments") or {}

        if not isinstance(arguments, dict):
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, f"arguments must be an object, got {type(arguments).__name__}"
            )
        if len(arguments) > MAX_ARGUMENT_KEYS:
            return self._create_error_response(
                msg_id, JsonRpcError.INVALID_PARAMS, f"Too many argument keys ({len(arguments)}, max {MAX_ARGUMENT_KEYS})"
            )
        if tool_name not in self.tools:
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, f"Unknown tool: '{tool_name}'")

        set_session_id(session_id)
        set_access_token(self.access_token)
        try:
            result = await self.tools[tool_name].execute(arguments)
        except ParameterValidationError as e:
            return self._create_error_response(msg_id, JsonRpcError.INVALID_PARAMS, str(e))
        except ToolExecutionError as e:
            logger.warning(str(e))
            content = format_content(str(e))
            return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: {"content": content, "isError": True}}

        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: {"content": format_content(result)}}

    def _create_error_response(self, msg_id: Any, code: int, message: str) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: {"code": int(code), "message": message}}


__all__ = ["MCPProtocolEngine"]
