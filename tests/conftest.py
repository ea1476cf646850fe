"""Shared pytest fixtures for fastapi-request-basics tests."""

from __future__ import annotations

from typing import Any

import pytest
from starlette.requests import Request
from starlette.responses import Response

from fastapi_request_basics.config import BasicsSettings


@pytest.fixture
def make_request() -> Any:
    """Factory for Starlette Request objects with an optional streamed body."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        query_string: str = "",
        body: bytes | list[bytes] = b"",
        disconnect: bool = False,
        state: dict[str, Any] | None = None,
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "root_path": "",
            "state": dict(state or {}),
        }
        chunks = body if isinstance(body, list) else [body]
        messages: list[dict[str, Any]] = [
            {"type": "http.request", "body": chunk, "more_body": i < len(chunks) - 1}
            for i, chunk in enumerate(chunks)
        ]
        if disconnect:
            messages = messages[:-1] + [{"type": "http.disconnect"}]

        async def receive() -> dict[str, Any]:
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        return Request(scope, receive)

    return _make


@pytest.fixture
def make_response() -> Any:
    """Factory for temporal responses like the ones FastAPI hands to endpoints."""

    def _make() -> Response:
        response = Response()
        del response.headers["content-length"]
        return response

    return _make


@pytest.fixture
def settings() -> BasicsSettings:
    return BasicsSettings(body_limit=64)


@pytest.fixture
def catalogs() -> dict[str, dict[str, str]]:
    """Sample translation catalogs."""
    return {
        "en": {"hello": "Hello", "a": "A", "b": "B", "greet": "Hello %s"},
        "es": {"hello": "Hola", "greet": "Hola %s"},
    }
