#!/usr/bin/env python3
"""Tests for session token minting and uniqueness."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from mcp_sse_server.session import mint_token


class TestMintToken:
    def test_token_is_128_bit_hex(self):
        token = mint_token()
        assert len(token) == 32
        int(token, 16)

    def test_tokens_unique_across_many_mints(self):
        tokens = {mint_token() for _ in range(10_000)}
        assert len(tokens) == 10_000

    def test_tokens_unique_across_threads(self):
        minted: list[str] = []
        lock = threading.Lock()

        def mint_batch() -> None:
            batch = [mint_token() for _ in range(1000)]
            with lock:
                minted.extend(batch)

        with ThreadPoolExecutor(max_workers=8) as pool:
            for future in [pool.submit(mint_batch) for _ in range(8)]:
                future.result()

        assert len(minted) == 8000
        assert len(set(minted)) == 8000


class TestConcurrentSessions:
    @pytest.mark.asyncio
    async def test_concurrent_opens_get_distinct_tokens(self, lifecycle, registry):
        connections = await asyncio.gather(*(lifecycle.open_session() for _ in range(2000)))

        tokens = {connection.token for connection in connections}
        assert len(tokens) == 2000
        assert len(registry) == 2000
        registry.verify()

        await lifecycle.shutdown()
