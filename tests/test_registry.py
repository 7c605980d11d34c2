#!/usr/bin/env python3
"""Tests for SessionRegistry semantics."""

import pytest

from mcp_sse_server.errors import DuplicateTokenError, RegistryCorruptionError
from mcp_sse_server.session import SessionRegistry, StreamConnection


def _register(registry: SessionRegistry, token: str) -> StreamConnection:
    connection = StreamConnection.open(token)
    registry.register(token, connection)
    return connection


class TestRegistry:
    def test_register_and_lookup(self, registry):
        connection = _register(registry, "t1")
        assert registry.lookup("t1") is connection
        assert "t1" in registry
        assert len(registry) == 1
        assert registry.tokens() == ["t1"]
        assert registry.connections() == [connection]

    def test_lookup_missing_returns_none(self, registry):
        assert registry.lookup("doesnotexist") is None
        assert "doesnotexist" not in registry

    def test_duplicate_token_rejected_and_original_kept(self, registry):
        original = _register(registry, "dup")

        with pytest.raises(DuplicateTokenError) as exc_info:
            registry.register("dup", StreamConnection.open("dup"))

        assert exc_info.value.token == "dup"
        assert registry.lookup("dup") is original
        assert len(registry) == 1

    def test_register_mismatched_token_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register("t1", StreamConnection.open("t2"))
        assert len(registry) == 0

    def test_register_closed_connection_rejected(self, registry):
        connection = StreamConnection.open("t1")
        connection.close()
        with pytest.raises(ValueError):
            registry.register("t1", connection)

    def test_unregister_returns_entry_once(self, registry):
        connection = _register(registry, "t1")
        assert registry.unregister("t1") is connection
        assert registry.unregister("t1") is None
        assert registry.lookup("t1") is None

    def test_unregister_missing_is_noop(self, registry):
        _register(registry, "t1")
        assert registry.unregister("other") is None
        assert len(registry) == 1

    def test_token_reusable_after_unregister(self, registry):
        _register(registry, "t1")
        registry.unregister("t1")
        replacement = _register(registry, "t1")
        assert registry.lookup("t1") is replacement

    def test_verify_passes_for_consistent_registry(self, registry):
        for i in range(5):
            _register(registry, f"t{i}")
        registry.verify()

    def test_verify_detects_closed_entry(self, registry):
        connection = _register(registry, "t1")
        # Closing without unregistering breaks the registry invariant
        connection.close()
        with pytest.raises(RegistryCorruptionError):
            registry.verify()
