"""
Stream testing utilities for the SSE server.

Request/response endpoints are easy to test with an HTTP client, but an SSE
stream never finishes on its own, so most clients block forever waiting for
the body. ``SSEStreamClient`` drives the ASGI app directly instead: it opens
the stream as a background task, parses events as they are written, and
can simulate the client going away.
"""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

import orjson

from .constants import DEFAULT_ENCODING, QUERY_SESSION_ID
from .session.events import SSE_EVENT_ENDPOINT, SSE_EVENT_MESSAGE, SSE_LINE_END

_EVENT_SEPARATOR = SSE_LINE_END * 2


@dataclass
class ReceivedEvent:
    """One parsed SSE event."""

    event: str
    data: str
    id: str | None = None

    def json(self) -> Any:
        return orjson.loads(self.data)


class SSEStreamClient:
    """Test harness holding one ``GET /sse`` stream open against an ASGI app.

    Usage:
        async with SSEStreamClient(server.app) as stream:
            token = await stream.wait_for_session()
            ...  # POST /messages?sessionId=<token> with httpx
            event = await stream.read_event()
            assert event.json()["id"] == 1
        # leaving the block simulates a client disconnect
    """

    def __init__(self, app: Any, path: str = "/sse", timeout: float = 5.0):
        self.app = app
        self.path = path
        self.timeout = timeout

        self.status: int | None = None
        self.headers: dict[str, str] = {}
        self.endpoint_url: str | None = None
        self.session_id: str | None = None
        self.keepalives = 0
        self.ended = False

        self._events: asyncio.Queue[ReceivedEvent | None] = asyncio.Queue()
        self._buffer = ""
        self._started = asyncio.Event()
        self._disconnect = asyncio.Event()
        self._request_sent = False
        self._task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> "SSEStreamClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.disconnect()

    # ================================================================
    # ASGI plumbing
    # ================================================================

    def _scope(self) -> dict[str, Any]:
        return {
            "type": "http",
            "asgi": {"version": "3.0", "spec_version": "2.3"},
            "http_version": "1.1",
            "method": "GET",
            "scheme": "http",
            "path": self.path,
            "raw_path": self.path.encode(DEFAULT_ENCODING),
            "query_string": b"",
            "root_path": "",
            "headers": [(b"host", b"testserver"), (b"accept", b"text/event-stream")],
            "client": ("testclient", 50000),
            "server": ("testserver", 80),
        }

    async def _receive(self) -> dict[str, Any]:
        if not self._request_sent:
            self._request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await self._disconnect.wait()
        return {"type": "http.disconnect"}

    async def _send(self, message: dict[str, Any]) -> None:
        if message["type"] == "http.response.start":
            self.status = message["status"]
            self.headers = {k.decode().lower(): v.decode() for k, v in message.get("headers", [])}
            self._started.set()
        elif message["type"] == "http.response.body":
            self._feed(message.get("body", b"").decode(DEFAULT_ENCODING))
            if not message.get("more_body", False):
                self._finish()

    async def _run(self) -> None:
        try:
            await self.app(self._scope(), self._receive, self._send)
        finally:
            self._started.set()
            self._finish()

    def _finish(self) -> None:
        if not self.ended:
            self.ended = True
            self._events.put_nowait(None)

    # ================================================================
    # Event parsing
    # ================================================================

    def _feed(self, text: str) -> None:
        self._buffer += text
        while _EVENT_SEPARATOR in self._buffer:
            block, self._buffer = self._buffer.split(_EVENT_SEPARATOR, 1)
            event = self._parse_block(block)
            if event is None:
                self.keepalives += 1
                continue
            if event.event == SSE_EVENT_ENDPOINT:
                self._record_endpoint(event.data)
            self._events.put_nowait(event)

    @staticmethod
    def _parse_block(block: str) -> ReceivedEvent | None:
        event_type = SSE_EVENT_MESSAGE
        event_id = None
        data_lines: list[str] = []
        for line in block.split(SSE_LINE_END):
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            value = value[1:] if value.startswith(" ") else value
            if field == "event":
                event_type = value
            elif field == "data":
                data_lines.append(value)
            elif field == "id":
                event_id = value
        if not data_lines:
            return None
        return ReceivedEvent(event=event_type, data="\n".join(data_lines), id=event_id)

    def _record_endpoint(self, url: str) -> None:
        self.endpoint_url = url
        self.session_id = parse_qs(urlsplit(url).query).get(QUERY_SESSION_ID, [None])[0]

    # ================================================================
    # Public API
    # ================================================================

    async def connect(self) -> None:
        """Start the request and wait for the response headers."""
        self._task = asyncio.create_task(self._run())
        await asyncio.wait_for(self._started.wait(), timeout=self.timeout)

    async def read_event(self, timeout: float | None = None) -> ReceivedEvent:
        """Next event in stream order.

        Raises:
            EOFError: the server ended the stream.
            asyncio.TimeoutError: nothing arrived in time.
        """
        event = await asyncio.wait_for(self._events.get(), timeout=timeout or self.timeout)
        if event is None:
            # Keep reporting end-of-stream to later readers
            self._events.put_nowait(None)
            raise EOFError("SSE stream ended")
        return event

    async def wait_for_session(self) -> str:
        """Read the ``endpoint`` event and return the session token it carries."""
        event = await self.read_event()
        if event.event != SSE_EVENT_ENDPOINT or self.session_id is None:
            raise AssertionError(f"Expected endpoint event first, got {event!r}")
        return self.session_id

    async def wait_ended(self, timeout: float | None = None) -> None:
        """Wait until the server finishes the response."""
        if self._task is not None:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout or self.timeout)

    async def disconnect(self) -> None:
        """Simulate the client closing the connection and wait for the handler to return."""
        self._disconnect.set()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._task, timeout=self.timeout)
        except asyncio.TimeoutError:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            raise

    async def abort(self) -> None:
        """Cancel the request task outright, as a server shutting down would."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task


__all__ = ["ReceivedEvent", "SSEStreamClient"]
