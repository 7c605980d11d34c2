#!/usr/bin/env python3
"""
Endpoint utilities with pre-computed headers and pre-serialized error bodies
"""

from typing import Any

import orjson
from starlette.responses import Response

from .constants import (
    CONTENT_TYPE_JSON,
    ERROR_BAD_REQUEST,
    ERROR_INTERNAL,
    ERROR_NOT_FOUND,
    ERROR_TYPE_BAD_REQUEST,
    ERROR_TYPE_INTERNAL,
    ERROR_TYPE_NOT_FOUND,
    HEADERS_CORS_LONG_CACHE,
    HEADERS_CORS_NOCACHE,
    HEADERS_HEALTH,
    HttpStatus,
)

# Pre-built common error bodies
_ERROR_RESPONSES = {
    HttpStatus.BAD_REQUEST: orjson.dumps(
        {"error": ERROR_BAD_REQUEST, "code": HttpStatus.BAD_REQUEST, "type": ERROR_TYPE_BAD_REQUEST}
    ),
    HttpStatus.NOT_FOUND: orjson.dumps(
        {"error": ERROR_NOT_FOUND, "code": HttpStatus.NOT_FOUND, "type": ERROR_TYPE_NOT_FOUND}
    ),
    HttpStatus.INTERNAL_SERVER_ERROR: orjson.dumps(
        {"error": ERROR_INTERNAL, "code": HttpStatus.INTERNAL_SERVER_ERROR, "type": ERROR_TYPE_INTERNAL}
    ),
}

_HEADERS_BY_CACHE_LEVEL = {
    "none": HEADERS_CORS_NOCACHE,
    "health": HEADERS_HEALTH,
    "long": HEADERS_CORS_LONG_CACHE,
}


def json_response_fast(
    data: dict[str, Any] | list[Any],
    status_code: int = HttpStatus.OK,
    cache_level: str = "none",
) -> Response:
    """
    JSON response using pre-computed headers.

    Args:
        data: Data to serialize to JSON
        status_code: HTTP status code
        cache_level: "none", "health" or "long"
    """
    headers = _HEADERS_BY_CACHE_LEVEL.get(cache_level, HEADERS_CORS_NOCACHE)
    return Response(orjson.dumps(data), status_code=status_code, media_type=CONTENT_TYPE_JSON, headers=headers)


def error_response_fast(code: int, message: str | None = None, error_type: str | None = None) -> Response:
    """
    Error response ``{"error", "code", "type"}``.

    Common codes without a custom message reuse pre-serialized bodies.
    """
    if message is None and error_type is None and code in _ERROR_RESPONSES:
        body = _ERROR_RESPONSES[code]
    else:
        error_data: dict[str, Any] = {"error": message or "Error", "code": int(code)}
        if error_type:
            error_data["type"] = error_type
        body = orjson.dumps(error_data)

    return Response(body, status_code=code, media_type=CONTENT_TYPE_JSON, headers=HEADERS_CORS_NOCACHE)


def not_found_response() -> Response:
    return error_response_fast(HttpStatus.NOT_FOUND)


def internal_error_response() -> Response:
    return error_response_fast(HttpStatus.INTERNAL_SERVER_ERROR)


__all__ = ["error_response_fast", "internal_error_response", "json_response_fast", "not_found_response"]
