#!/usr/bin/env python3
# src/mcp_sse_server/session/connection.py
"""
Server half of one client's persistent SSE stream.

``EventSink`` is the outbound channel the HTTP response drains.
``StreamConnection`` owns a sink for exactly one session and moves through
``open -> closed`` exactly once.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..constants import DEFAULT_MAX_QUEUED_EVENTS
from ..errors import WriteError, short_token
from .events import ServerSentEvent, message_event

if TYPE_CHECKING:
    from ..protocol.engine import ProtocolEngine, Transport

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class EventSink:
    """Ordered, bounded in-memory queue of outbound SSE events.

    Writers never block: a full or closed sink rejects the write with
    ``WriteError``. A single reader, the ``EventSourceResponse`` streaming
    the session, iterates ``events()`` until the sink is closed and drained.
    """

    def __init__(self, max_queued_events: int = DEFAULT_MAX_QUEUED_EVENTS):
        # Unbounded underneath so the close sentinel always fits; the bound is enforced in write().
        self._queue: asyncio.Queue[ServerSentEvent | None] = asyncio.Queue()
        self.max_queued_events = max_queued_events
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, event: ServerSentEvent) -> None:
        if self._closed:
            raise WriteError("Event sink is closed")
        if self.max_queued_events and self._queue.qsize() >= self.max_queued_events:
            raise WriteError(f"Event sink is full ({self.max_queued_events} events pending)")
        self._queue.put_nowait(event)

    def close(self) -> bool:
        """Stop accepting writes and wake the reader. Returns False if already closed."""
        if self._closed:
            return False
        self._closed = True
        self._queue.put_nowait(None)
        return True

    async def events(self) -> AsyncIterator[ServerSentEvent]:
        """Yield events in write order until the sink is closed."""
        while True:
            event = await self._queue.get()
            if event is None:
                return
            yield event


class StreamConnection:
    """One session's server-to-client stream plus its engine binding."""

    def __init__(self, token: str, sink: EventSink):
        self.token = token
        self.sink = sink
        self.state = ConnectionState.OPEN
        self.engine: "ProtocolEngine | None" = None
        self.transport: "Transport | None" = None
        self.engine_closed = False
        self.close_reason: str | None = None
        self.created_at = time.time()
        self.closed_at: float | None = None
        self.events_delivered = 0
        self._event_counter = 0

    @classmethod
    def open(cls, token: str, sink: EventSink | None = None) -> "StreamConnection":
        """Bind a new connection to an outbound sink; it starts open."""
        return cls(token, sink if sink is not None else EventSink())

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def deliver(self, event: ServerSentEvent) -> None:
        """Push one event to the client.

        Raises:
            WriteError: the connection is closed or the sink rejected the write.
        """
        if self.state is ConnectionState.CLOSED:
            raise WriteError(f"Connection {short_token(self.token)} is closed", self.token)
        try:
            self.sink.write(event)
        except WriteError as e:
            raise WriteError(f"Connection {short_token(self.token)}: {e}", self.token) from e
        self.events_delivered += 1

    def deliver_message(self, message: dict[str, Any]) -> None:
        """Deliver a protocol message as a numbered ``message`` event.

        Ids advance only on successful delivery, so a rejected write leaves no gap.
        """
        event_id = self._event_counter + 1
        self.deliver(message_event(message, event_id=event_id))
        self._event_counter = event_id

    def bind(self, engine: "ProtocolEngine", transport: "Transport") -> None:
        self.engine = engine
        self.transport = transport

    def mark_engine_closed(self) -> None:
        self.engine_closed = True

    def close(self, reason: str | None = None) -> bool:
        """Transition to closed and release the sink.

        Idempotent: returns True only for the call that performed the
        transition.
        """
        if self.state is ConnectionState.CLOSED:
            return False

        self.state = ConnectionState.CLOSED
        self.close_reason = reason
        self.closed_at = time.time()

        # Stop inbound work before the sink goes away
        if self.transport is not None:
            self.transport.close()
        self.sink.close()

        logger.debug(f"Connection {short_token(self.token)} closed ({reason or 'unspecified'})")
        return True

    def age(self) -> float:
        end = self.closed_at if self.closed_at is not None else time.time()
        return end - self.created_at

    def info(self) -> dict[str, Any]:
        """Summary for monitoring endpoints (token truncated)."""
        return {
            "session_id": short_token(self.token),
            "state": self.state.value,
            "age_seconds": round(self.age(), 2),
            "events_delivered": self.events_delivered,
            "engine_closed": self.engine_closed,
        }


__all__ = ["ConnectionState", "EventSink", "StreamConnection"]
