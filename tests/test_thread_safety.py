#!/usr/bin/env python3
"""Tests for thread safety of the session registry."""

import threading

from mcp_sse_server.errors import DuplicateTokenError
from mcp_sse_server.session import SessionRegistry, StreamConnection


class TestRegistryLock:
    """Verify the registry lock protects the token map."""

    def test_registry_lock_exists(self):
        registry = SessionRegistry()
        assert isinstance(registry._lock, type(threading.Lock()))

    def test_concurrent_register_and_unregister(self):
        """Threads registering and removing disjoint tokens should not corrupt the map."""
        registry = SessionRegistry()
        errors: list[Exception] = []

        def churn(worker: int) -> None:
            try:
                for i in range(500):
                    token = f"w{worker}-{i}"
                    registry.register(token, StreamConnection.open(token))
                    if i % 2:
                        assert registry.unregister(token) is not None
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=churn, args=(w,)) for w in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry) == 8 * 250
        registry.verify()

    def test_same_token_registered_once_under_contention(self):
        """Exactly one of many racing registrations of a token wins."""
        registry = SessionRegistry()
        barrier = threading.Barrier(8)
        winners: list[StreamConnection] = []
        duplicates: list[DuplicateTokenError] = []
        lock = threading.Lock()

        def race() -> None:
            connection = StreamConnection.open("contested")
            barrier.wait()
            try:
                registry.register("contested", connection)
            except DuplicateTokenError as e:
                with lock:
                    duplicates.append(e)
            else:
                with lock:
                    winners.append(connection)

        threads = [threading.Thread(target=race) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(winners) == 1
        assert len(duplicates) == 7
        assert registry.lookup("contested") is winners[0]

    def test_lookup_never_sees_partial_entries(self):
        """Readers only ever observe None or a fully registered open connection."""
        registry = SessionRegistry()
        stop = threading.Event()
        bad: list[object] = []

        def writer() -> None:
            for i in range(2000):
                registry.register("hot", StreamConnection.open("hot"))
                registry.unregister("hot")
            stop.set()

        def reader() -> None:
            while not stop.is_set():
                found = registry.lookup("hot")
                if found is not None and found.token != "hot":
                    bad.append(found)

        threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert bad == []
        assert len(registry) == 0
