#!/usr/bin/env python3
# src/mcp_sse_server/session/registry.py
"""
Session registry: the single source of truth for which sessions are live.

Maps session tokens to open ``StreamConnection`` objects. All operations run
under one lock, so a lookup never observes a half-inserted or half-removed
entry regardless of which thread or task performs it.
"""

import logging
import threading

from ..errors import DuplicateTokenError, RegistryCorruptionError, short_token
from .connection import StreamConnection

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Token -> StreamConnection mapping for live sessions."""

    def __init__(self) -> None:
        self._connections: dict[str, StreamConnection] = {}
        self._lock = threading.Lock()

    def register(self, token: str, connection: StreamConnection) -> None:
        """Insert a live session.

        Raises:
            DuplicateTokenError: the token already maps to a live session.
            ValueError: the connection is closed or carries a different token.
        """
        if connection.token != token:
            raise ValueError(f"Connection token {short_token(connection.token)} does not match {short_token(token)}")
        if not connection.is_open:
            raise ValueError(f"Cannot register closed connection {short_token(token)}")

        with self._lock:
            if token in self._connections:
                raise DuplicateTokenError(token)
            self._connections[token] = connection

        logger.debug(f"Registered session {short_token(token)}")

    def lookup(self, token: str) -> StreamConnection | None:
        with self._lock:
            return self._connections.get(token)

    def unregister(self, token: str) -> StreamConnection | None:
        """Remove and return the entry for ``token``; None if absent."""
        with self._lock:
            connection = self._connections.pop(token, None)

        if connection is not None:
            logger.debug(f"Unregistered session {short_token(token)}")
        return connection

    def tokens(self) -> list[str]:
        with self._lock:
            return list(self._connections)

    def connections(self) -> list[StreamConnection]:
        with self._lock:
            return list(self._connections.values())

    def verify(self) -> None:
        """Check that every entry is keyed by its own token and is open.

        Raises:
            RegistryCorruptionError: an inconsistency was found.
        """
        with self._lock:
            for token, connection in self._connections.items():
                if connection.token != token:
                    raise RegistryCorruptionError(
                        f"Entry {short_token(token)} holds connection {short_token(connection.token)}"
                    )
                if not connection.is_open:
                    raise RegistryCorruptionError(f"Entry {short_token(token)} holds a closed connection")

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._connections


__all__ = ["SessionRegistry"]
