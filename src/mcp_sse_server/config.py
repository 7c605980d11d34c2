#!/usr/bin/env python3
# src/mcp_sse_server/config.py
"""
Server configuration.

Values come from constructor arguments, or from the environment via
``ServerConfig.from_env()``; CLI flags override both.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .constants import (
    DEFAULT_HOST,
    DEFAULT_KEEPALIVE_INTERVAL,
    DEFAULT_MAX_QUEUED_EVENTS,
    DEFAULT_PORT,
    ENV_ACCESS_TOKEN,
    ENV_DEBUG,
    ENV_HOST,
    ENV_MCP_ENGINE_BINDING,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_MAX_QUEUED_EVENTS,
    ENV_MCP_SERVER_NAME,
    ENV_MCP_SERVER_VERSION,
    ENV_MCP_SSE_KEEPALIVE,
    ENV_PORT,
    LOG_INFO,
    LOG_LEVELS,
    MAX_REQUEST_BODY_BYTES,
    SERVER_NAME,
    SERVER_VERSION,
    EngineBinding,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class ServerConfig:
    """Process-level settings for the SSE server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    access_token: str | None = field(default=None, repr=False)
    debug: bool = False
    log_level: str = LOG_INFO
    engine_binding: str = EngineBinding.PER_SESSION
    keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL
    max_queued_events: int = DEFAULT_MAX_QUEUED_EVENTS
    max_body_bytes: int = MAX_REQUEST_BODY_BYTES
    sse_path: str = "/sse"
    messages_path: str = "/messages"

    def __post_init__(self) -> None:
        self.log_level = self.log_level.lower()
        self.engine_binding = self.engine_binding.lower()

        if not 0 < self.port < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")
        if self.engine_binding not in EngineBinding.ALL:
            raise ValueError(
                f"engine_binding must be one of {', '.join(EngineBinding.ALL)}, got {self.engine_binding!r}"
            )
        if self.keepalive_interval < 0:
            raise ValueError(f"keepalive_interval must be >= 0, got {self.keepalive_interval}")
        if self.max_queued_events < 1:
            raise ValueError(f"max_queued_events must be >= 1, got {self.max_queued_events}")
        for path in (self.sse_path, self.messages_path):
            if not path.startswith("/"):
                raise ValueError(f"Route paths must start with '/', got {path!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "ServerConfig":
        """Build a config from environment variables; ``overrides`` win over the environment."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if env.get(ENV_HOST):
            values["host"] = env[ENV_HOST]
        if env.get(ENV_PORT):
            values["port"] = _parse_int(ENV_PORT, env[ENV_PORT])
        if env.get(ENV_MCP_SERVER_NAME):
            values["name"] = env[ENV_MCP_SERVER_NAME]
        if env.get(ENV_MCP_SERVER_VERSION):
            values["version"] = env[ENV_MCP_SERVER_VERSION]
        if env.get(ENV_ACCESS_TOKEN):
            values["access_token"] = env[ENV_ACCESS_TOKEN]
        if env.get(ENV_DEBUG):
            values["debug"] = env[ENV_DEBUG].strip().lower() in _TRUE_VALUES
        if env.get(ENV_MCP_LOG_LEVEL):
            values["log_level"] = env[ENV_MCP_LOG_LEVEL]
        if env.get(ENV_MCP_ENGINE_BINDING):
            values["engine_binding"] = env[ENV_MCP_ENGINE_BINDING]
        if env.get(ENV_MCP_SSE_KEEPALIVE):
            values["keepalive_interval"] = _parse_float(ENV_MCP_SSE_KEEPALIVE, env[ENV_MCP_SSE_KEEPALIVE])
        if env.get(ENV_MCP_MAX_QUEUED_EVENTS):
            values["max_queued_events"] = _parse_int(ENV_MCP_MAX_QUEUED_EVENTS, env[ENV_MCP_MAX_QUEUED_EVENTS])

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    @property
    def effective_log_level(self) -> str:
        return "debug" if self.debug else self.log_level

    def get_uvicorn_config(self) -> dict[str, Any]:
        """Keyword arguments for ``uvicorn.run``."""
        return {
            "host": self.host,
            "port": self.port,
            "log_level": self.effective_log_level,
            "access_log": self.debug,
            # SSE streams never finish on their own
            "timeout_graceful_shutdown": 5,
        }


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


__all__ = ["ServerConfig"]
