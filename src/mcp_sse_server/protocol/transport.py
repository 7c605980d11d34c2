#!/usr/bin/env python3
# src/mcp_sse_server/protocol/transport.py
"""SSE transport - bridges a StreamConnection to a protocol engine."""

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..errors import SessionClosedError, WriteError, short_token
from .engine import CloseCallback, MessageHandler

if TYPE_CHECKING:
    from ..session.connection import StreamConnection

logger = logging.getLogger(__name__)


class SSEServerTransport:
    """Engine-facing transport for one session.

    Outbound messages go to the connection's event stream in the order the
    engine sends them. Each inbound message is processed in its own task;
    closing the transport cancels whatever is still running.
    """

    def __init__(self, connection: "StreamConnection", on_write_error: Callable[[str], Any] | None = None):
        self.connection = connection
        self.session_id = connection.token
        self._on_write_error = on_write_error
        self._handler: MessageHandler | None = None
        self._close_callbacks: list[CloseCallback] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def on_message(self, handler: MessageHandler) -> None:
        self._handler = handler

    def on_close(self, callback: CloseCallback) -> None:
        self._close_callbacks.append(callback)

    async def send(self, message: dict[str, Any]) -> None:
        if self._closed:
            raise WriteError(f"Transport for {short_token(self.session_id)} is closed", self.session_id)
        try:
            self.connection.deliver_message(message)
        except WriteError:
            logger.warning(f"Write to session {short_token(self.session_id)} failed; treating as disconnect")
            if self._on_write_error is not None:
                self._on_write_error(self.session_id)
            raise

    def receive(self, message: Any) -> asyncio.Task[None]:
        """Schedule ``message`` for processing by the bound engine.

        Raises:
            SessionClosedError: the transport is closed or no engine is bound.
        """
        if self._closed or not self.connection.is_open or self._handler is None:
            raise SessionClosedError(self.session_id)

        task = asyncio.get_running_loop().create_task(
            self._dispatch(self._handler, message), name=f"session-{self.session_id[:8]}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _dispatch(self, handler: MessageHandler, message: Any) -> None:
        try:
            await handler(message)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Contained to this session
            logger.error(f"Unhandled error processing message for {short_token(self.session_id)}: {e}", exc_info=True)

    async def drain(self) -> None:
        """Wait for every in-flight inbound message to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        """Stop accepting messages and cancel in-flight processing. Idempotent."""
        if self._closed:
            return
        self._closed = True

        for task in list(self._tasks):
            task.cancel()

        for callback in self._close_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Transport close callback failed for {short_token(self.session_id)}: {e}", exc_info=True)
        self._close_callbacks.clear()


__all__ = ["SSEServerTransport"]
