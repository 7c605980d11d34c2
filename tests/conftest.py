"""Shared fixtures: an echoing protocol engine and session-layer wiring."""

import asyncio
from functools import partial
from typing import Any

import pytest

from mcp_sse_server.errors import EngineBindingError
from mcp_sse_server.session import ConnectionLifecycleManager, MessageRouter, SessionRegistry
from mcp_sse_server.testing import ReceivedEvent, SSEStreamClient


class EchoEngine:
    """Protocol engine that answers every message with ``{"echo": message}``.

    ``hold`` makes handlers wait on an event before answering, so tests can
    observe in-flight work being cancelled.
    """

    def __init__(self, hold: asyncio.Event | None = None, refuse: bool = False):
        self.hold = hold
        self.refuse = refuse
        self.transports: list[Any] = []
        self.received: list[tuple[str, Any]] = []
        self.cancelled = 0
        self.close_calls = 0

    async def connect(self, transport: Any) -> None:
        if self.refuse:
            raise EngineBindingError("engine refused transport", transport.session_id)
        self.transports.append(transport)
        transport.on_message(partial(self._handle, transport))

    async def _handle(self, transport: Any, message: Any) -> None:
        self.received.append((transport.session_id, message))
        if self.hold is not None:
            try:
                await self.hold.wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        await transport.send({"echo": message})

    async def close(self) -> None:
        self.close_calls += 1


def _drain(connection: Any) -> list[ReceivedEvent]:
    """Pop every event currently queued on a connection's sink, parsed from its wire form."""
    events = []
    queue = connection.sink._queue
    while not queue.empty():
        queued = queue.get_nowait()
        if queued is None:
            break
        event = SSEStreamClient._parse_block(queued.encode().decode())
        if event is not None:
            events.append(event)
    return events


@pytest.fixture
def engines() -> list[EchoEngine]:
    return []


@pytest.fixture
def engine_factory(engines):
    def factory() -> EchoEngine:
        engine = EchoEngine()
        engines.append(engine)
        return engine

    return factory


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def lifecycle(registry, engine_factory) -> ConnectionLifecycleManager:
    return ConnectionLifecycleManager(registry, engine_factory)


@pytest.fixture
def router(registry) -> MessageRouter:
    return MessageRouter(registry)


@pytest.fixture
def drain_events():
    return _drain


@pytest.fixture
def echo_engine_cls():
    return EchoEngine
