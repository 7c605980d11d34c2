#!/usr/bin/env python3
"""Randomized open/route/disconnect interleavings checked against a simple model.

The model is a set of live tokens plus, per token, the messages routed to it.
After every step the registry must match the model exactly, and every
routed message must have been answered on its own session's stream only.
"""

import random

import pytest

from mcp_sse_server.constants import EngineBinding
from mcp_sse_server.errors import RoutingError
from mcp_sse_server.session import ConnectionLifecycleManager, MessageRouter, SessionRegistry


async def _run_interleaving(seed: int, binding: str, engine_factory, drain_events) -> None:
    rng = random.Random(seed)
    registry = SessionRegistry()
    lifecycle = ConnectionLifecycleManager(registry, engine_factory, engine_binding=binding)
    router = MessageRouter(registry)

    live: dict[str, object] = {}
    dead: set[str] = set()
    sent: dict[str, list[int]] = {}
    answered: dict[str, list[int]] = {}
    counter = 0

    for _ in range(300):
        action = rng.choices(["open", "route", "route_dead", "disconnect", "close"], weights=[3, 6, 1, 2, 1])[0]

        if action == "open" or not live:
            connection = await lifecycle.open_session()
            drain_events(connection)
            assert connection.token not in live and connection.token not in dead
            live[connection.token] = connection
            sent[connection.token] = []
            answered[connection.token] = []

        elif action == "route":
            token = rng.choice(sorted(live))
            counter += 1
            await router.route(token, {"n": counter})
            sent[token].append(counter)

        elif action == "route_dead":
            token = rng.choice(sorted(dead)) if dead else "never-issued"
            with pytest.raises(RoutingError):
                await router.route(token, {"n": -1})

        elif action == "disconnect":
            token = rng.choice(sorted(live))
            connection = live.pop(token)
            await connection.transport.drain()
            answered[token].extend(event.json()["echo"]["n"] for event in drain_events(connection))
            assert lifecycle.notify_disconnect(token) is True
            dead.add(token)

        else:
            token = rng.choice(sorted(live))
            connection = live.pop(token)
            await connection.transport.drain()
            answered[token].extend(event.json()["echo"]["n"] for event in drain_events(connection))
            assert await lifecycle.close_session(token) is True
            dead.add(token)

        assert set(registry.tokens()) == set(live)
        registry.verify()

    for token, connection in live.items():
        await connection.transport.drain()
        answered[token].extend(event.json()["echo"]["n"] for event in drain_events(connection))

    await lifecycle.shutdown()

    # Every message routed to a session was answered on that session, in order
    assert answered == sent
    assert len(registry) == 0
    assert lifecycle.sessions_closed == lifecycle.sessions_opened


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", range(10))
async def test_per_session_interleavings(seed, engine_factory, drain_events):
    await _run_interleaving(seed, EngineBinding.PER_SESSION, engine_factory, drain_events)


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", range(5))
async def test_shared_engine_interleavings(seed, engine_factory, drain_events):
    await _run_interleaving(seed, EngineBinding.SHARED, engine_factory, drain_events)
