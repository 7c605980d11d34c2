#!/usr/bin/env python3
# src/mcp_sse_server/session/token.py
"""Session token minting."""

import secrets
from collections.abc import Callable

from ..constants import SESSION_TOKEN_BYTES

TokenFactory = Callable[[], str]


def mint_token() -> str:
    """Mint an unguessable session token (128 random bits, 32 hex chars)."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)


__all__ = ["TokenFactory", "mint_token"]
