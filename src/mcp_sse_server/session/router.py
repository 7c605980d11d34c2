#!/usr/bin/env python3
# src/mcp_sse_server/session/router.py
"""Inbound message routing by session token."""

import logging
from typing import Any

from ..errors import SessionClosedError, UnknownSessionError, short_token
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class MessageRouter:
    """Hand client messages to the session their token names."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self.messages_routed = 0
        self.messages_rejected = 0

    async def route(self, token: str, message: Any) -> None:
        """Forward ``message`` to the engine bound to ``token``'s session.

        Returns once the handoff succeeds; processing continues in the
        background and its errors belong to the engine.

        Raises:
            UnknownSessionError: no live session has this token.
            SessionClosedError: the session closed between lookup and handoff.
        """
        connection = self.registry.lookup(token)
        if connection is None:
            self.messages_rejected += 1
            logger.debug(f"No session for token {short_token(token)}")
            raise UnknownSessionError(token)

        transport = connection.transport
        if transport is None or not connection.is_open:
            self.messages_rejected += 1
            raise SessionClosedError(token)

        try:
            transport.receive(message)
        except SessionClosedError:
            self.messages_rejected += 1
            logger.debug(f"Session {short_token(token)} closed during handoff")
            raise

        self.messages_routed += 1


__all__ = ["MessageRouter"]
