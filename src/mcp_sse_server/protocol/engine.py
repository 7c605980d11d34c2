#!/usr/bin/env python3
# src/mcp_sse_server/protocol/engine.py
"""
The boundary between session routing and the protocol engine.

The session layer only knows that an engine can be connected to a
transport and closed; the transport only knows how to push a message to
its client and hand inbound messages to whichever handler the engine
installed.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

MessageHandler = Callable[[Any], Awaitable[None]]
CloseCallback = Callable[[], None]


@runtime_checkable
class Transport(Protocol):
    """One session's bidirectional channel as seen by an engine."""

    session_id: str

    @property
    def closed(self) -> bool: ...

    async def send(self, message: dict[str, Any]) -> None:
        """Deliver a message to the client. Raises WriteError on connection loss."""
        ...

    def on_message(self, handler: MessageHandler) -> None:
        """Install the handler invoked for each inbound client message."""
        ...

    def on_close(self, callback: CloseCallback) -> None: ...

    def receive(self, message: Any) -> Any:
        """Hand off an inbound message; processing continues asynchronously."""
        ...

    def close(self) -> None: ...


@runtime_checkable
class ProtocolEngine(Protocol):
    """Capability ``{connect(transport), close()}`` the session layer drives."""

    async def connect(self, transport: Transport) -> None: ...

    async def close(self) -> None: ...


EngineFactory = Callable[[], ProtocolEngine]


__all__ = ["CloseCallback", "EngineFactory", "MessageHandler", "ProtocolEngine", "Transport"]
