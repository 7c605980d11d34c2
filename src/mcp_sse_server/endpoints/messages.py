#!/usr/bin/env python3
# src/mcp_sse_server/endpoints/messages.py
"""
Message endpoint - client-to-server half of the SSE channel.

``POST /messages?sessionId=<token>`` hands one JSON message to the session's
engine and answers as soon as the handoff succeeds; the engine's reply
arrives on the session's event stream, not in this response.
"""

import logging

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..constants import MAX_REQUEST_BODY_BYTES
from ..errors import RoutingError, UnknownSessionError, short_token
from ..session.registry import SessionRegistry
from ..session.router import MessageRouter
from .constants import (
    ERROR_BODY_TOO_LARGE,
    ERROR_EMPTY_BODY,
    ERROR_INVALID_JSON,
    ERROR_MISSING_SESSION,
    ERROR_NO_SESSION,
    ERROR_TYPE_BAD_REQUEST,
    ERROR_TYPE_TOO_LARGE,
    ERROR_TYPE_UNAVAILABLE,
    HEADER_CONTENT_LENGTH,
    QUERY_SESSION_ID,
    STATUS_ACCEPTED,
    HttpStatus,
)
from .utils import error_response_fast, json_response_fast

logger = logging.getLogger(__name__)


class MessagesEndpoint:
    """Route POSTed client messages to their session."""

    def __init__(self, router: MessageRouter, registry: SessionRegistry, max_body_bytes: int = MAX_REQUEST_BODY_BYTES):
        self.router = router
        self.registry = registry
        self.max_body_bytes = max_body_bytes

    async def handle_request(self, request: Request) -> Response:
        token = request.query_params.get(QUERY_SESSION_ID)
        if not token:
            if len(self.registry) == 0:
                return error_response_fast(HttpStatus.SERVICE_UNAVAILABLE, ERROR_NO_SESSION, ERROR_TYPE_UNAVAILABLE)
            return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_MISSING_SESSION, ERROR_TYPE_BAD_REQUEST)

        # Unknown sessions are rejected before the body is read
        if token not in self.registry:
            return self._routing_error(UnknownSessionError(token))

        declared_length = request.headers.get(HEADER_CONTENT_LENGTH)
        if declared_length and declared_length.isdigit() and int(declared_length) > self.max_body_bytes:
            return error_response_fast(HttpStatus.REQUEST_ENTITY_TOO_LARGE, ERROR_BODY_TOO_LARGE, ERROR_TYPE_TOO_LARGE)

        body = await request.body()
        if len(body) > self.max_body_bytes:
            return error_response_fast(HttpStatus.REQUEST_ENTITY_TOO_LARGE, ERROR_BODY_TOO_LARGE, ERROR_TYPE_TOO_LARGE)
        if not body:
            return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_EMPTY_BODY, ERROR_TYPE_BAD_REQUEST)

        try:
            message = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            logger.debug(f"Invalid JSON for session {short_token(token)}: {e}")
            return error_response_fast(HttpStatus.BAD_REQUEST, ERROR_INVALID_JSON, ERROR_TYPE_BAD_REQUEST)

        try:
            await self.router.route(token, message)
        except RoutingError as e:
            return self._routing_error(e)

        return json_response_fast({"status": STATUS_ACCEPTED}, status_code=HttpStatus.ACCEPTED)

    @staticmethod
    def _routing_error(error: RoutingError) -> Response:
        logger.debug(f"Rejected message: {error}")
        return error_response_fast(error.http_status, str(error), error.error_type)


__all__ = ["MessagesEndpoint"]
