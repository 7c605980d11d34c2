#!/usr/bin/env python3
# src/mcp_sse_server/session/lifecycle.py
"""
Session lifecycle management.

Creates sessions when a client opens a stream and tears them down when the
client goes away, the transport fails a write, or the server shuts down.
This is the only component that mutates the SessionRegistry.

Teardown order is fixed: unregister the token, close the connection (which
stops writes and cancels in-flight inbound work), then shut down the bound
engine. The first two steps are synchronous, so no inbound message can be
routed to a session once its disconnect has been signalled.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from ..constants import (
    CLOSE_BIND_FAILED,
    CLOSE_CLIENT_DISCONNECT,
    CLOSE_SERVER,
    CLOSE_SERVER_SHUTDOWN,
    CLOSE_WRITE_ERROR,
    DEFAULT_MAX_QUEUED_EVENTS,
    MAX_TOKEN_ATTEMPTS,
    QUERY_SESSION_ID,
    EngineBinding,
)
from ..errors import DuplicateTokenError, short_token
from ..protocol.engine import EngineFactory, ProtocolEngine
from ..protocol.transport import SSEServerTransport
from .connection import EventSink, StreamConnection
from .events import endpoint_event
from .registry import SessionRegistry
from .token import TokenFactory, mint_token

logger = logging.getLogger(__name__)


class ConnectionLifecycleManager:
    """Open, bind and tear down sessions."""

    def __init__(
        self,
        registry: SessionRegistry,
        engine_factory: EngineFactory,
        engine_binding: str = EngineBinding.PER_SESSION,
        messages_path: str = "/messages",
        token_factory: TokenFactory = mint_token,
        max_queued_events: int = DEFAULT_MAX_QUEUED_EVENTS,
        transport_factory: Callable[..., SSEServerTransport] = SSEServerTransport,
    ):
        if engine_binding not in EngineBinding.ALL:
            raise ValueError(f"Unknown engine binding: {engine_binding!r}")

        self.registry = registry
        self.engine_binding = engine_binding
        self.messages_path = messages_path
        self._engine_factory = engine_factory
        self._token_factory = token_factory
        self._transport_factory = transport_factory
        self.max_queued_events = max_queued_events

        self._shared_engine: ProtocolEngine | None = None
        self._engine_shutdowns: set[asyncio.Task[None]] = set()

        self.sessions_opened = 0
        self.sessions_closed = 0
        self.sessions_rejected = 0
        self.token_collisions = 0

    # ================================================================
    # Session creation
    # ================================================================

    @property
    def active_sessions(self) -> int:
        return len(self.registry)

    def endpoint_url(self, token: str) -> str:
        return f"{self.messages_path}?{QUERY_SESSION_ID}={token}"

    def new_sink(self) -> EventSink:
        return EventSink(max_queued_events=self.max_queued_events)

    async def open_session(self, sink: EventSink | None = None) -> StreamConnection:
        """Create, register and bind a new session.

        Raises:
            DuplicateTokenError: every minted token collided with a live session.
            EngineBindingError: the engine refused the transport (session is torn down first).
        """
        sink = sink if sink is not None else self.new_sink()
        connection = self._register_new_connection(sink)
        token = connection.token

        try:
            connection.deliver(endpoint_event(self.endpoint_url(token)))

            engine = self._engine_for_session()
            transport = self._transport_factory(connection, on_write_error=self.on_write_error)
            connection.bind(engine, transport)
            await engine.connect(transport)
        except BaseException:
            logger.warning(f"Binding session {short_token(token)} failed; tearing down")
            self.sessions_rejected += 1
            detached = self._detach(token, CLOSE_BIND_FAILED)
            if detached is not None:
                await self._shutdown_engine(detached)
            raise

        self.sessions_opened += 1
        logger.info(f"Session {short_token(token)} opened ({self.active_sessions} active)")
        return connection

    def _register_new_connection(self, sink: EventSink) -> StreamConnection:
        last_token = ""
        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            last_token = self._token_factory()
            connection = StreamConnection.open(last_token, sink)
            try:
                self.registry.register(last_token, connection)
            except DuplicateTokenError:
                self.token_collisions += 1
                logger.warning(f"Token collision on attempt {attempt}; re-minting")
                continue
            return connection

        sink.close()
        self.sessions_rejected += 1
        raise DuplicateTokenError(last_token, attempts=MAX_TOKEN_ATTEMPTS)

    def _engine_for_session(self) -> ProtocolEngine:
        if self.engine_binding == EngineBinding.SHARED:
            if self._shared_engine is None:
                self._shared_engine = self._engine_factory()
            return self._shared_engine
        return self._engine_factory()

    # ================================================================
    # Teardown
    # ================================================================

    def _detach(self, token: str, reason: str) -> StreamConnection | None:
        """Unregister and close; returns the connection only for the first caller."""
        connection = self.registry.unregister(token)
        if connection is None:
            return None
        connection.close(reason)
        self.sessions_closed += 1
        logger.info(f"Session {short_token(token)} closed: {reason} ({self.active_sessions} active)")
        return connection

    async def _shutdown_engine(self, connection: StreamConnection) -> None:
        engine = connection.engine
        try:
            if engine is not None and engine is not self._shared_engine:
                await engine.close()
            # Shared engine keeps running; closing the transport already detached this session
        except Exception as e:
            logger.error(f"Engine shutdown for {short_token(connection.token)} failed: {e}", exc_info=True)
        finally:
            connection.mark_engine_closed()

    def notify_disconnect(self, token: str, reason: str = CLOSE_CLIENT_DISCONNECT) -> bool:
        """Signal that the client's stream ended.

        Synchronous so it can run from a cancelled task or a ``finally``
        block. The engine shutdown is scheduled and tracked; ``shutdown()``
        waits for it.
        """
        connection = self._detach(token, reason)
        if connection is None:
            return False

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop left to run the engine shutdown on
            connection.mark_engine_closed()
            return True

        task = loop.create_task(self._shutdown_engine(connection), name=f"engine-close-{token[:8]}")
        self._engine_shutdowns.add(task)
        task.add_done_callback(self._engine_shutdowns.discard)
        return True

    def on_write_error(self, token: str) -> None:
        self.notify_disconnect(token, CLOSE_WRITE_ERROR)

    async def close_session(self, token: str, reason: str = CLOSE_SERVER) -> bool:
        """Tear down a session and wait for its engine to stop.

        Returns False if the session was not live (already closed or unknown).
        """
        connection = self._detach(token, reason)
        if connection is None:
            return False
        await self._shutdown_engine(connection)
        return True

    async def wait_closed(self) -> None:
        """Wait for scheduled engine shutdowns to finish."""
        while self._engine_shutdowns:
            await asyncio.gather(*list(self._engine_shutdowns), return_exceptions=True)

    async def shutdown(self) -> None:
        """Tear down every live session and the shared engine."""
        tokens = self.registry.tokens()
        if tokens:
            logger.info(f"Closing {len(tokens)} session(s) for shutdown")
        for token in tokens:
            await self.close_session(token, CLOSE_SERVER_SHUTDOWN)

        await self.wait_closed()

        if self._shared_engine is not None:
            engine, self._shared_engine = self._shared_engine, None
            try:
                await engine.close()
            except Exception as e:
                logger.error(f"Shared engine shutdown failed: {e}", exc_info=True)

    def stats(self) -> dict[str, Any]:
        return {
            "active_sessions": self.active_sessions,
            "sessions_opened": self.sessions_opened,
            "sessions_closed": self.sessions_closed,
            "sessions_rejected": self.sessions_rejected,
            "token_collisions": self.token_collisions,
            "engine_binding": self.engine_binding,
        }


__all__ = ["ConnectionLifecycleManager"]
