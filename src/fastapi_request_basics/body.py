"""read_json_body() — stream a request body into a JSON value."""

from __future__ import annotations

import json
import logging
from typing import Any

from starlette.requests import ClientDisconnect, Request

from fastapi_request_basics.exceptions import (
    BodyStreamError,
    BodyTooLarge,
    MalformedBody,
)

logger = logging.getLogger(__name__)


async def read_json_body(request: Request, *, limit: int) -> Any:
    """Consume the request stream and decode it as JSON.

    The content type is not inspected. The stream can only be read once, so a
    second call on the same request raises ``BodyStreamError``.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        logger.debug("Rejecting body: content-length=%s limit=%d", declared, limit)
        raise BodyTooLarge(limit=limit)

    payload = bytearray()
    try:
        async for chunk in request.stream():
            payload.extend(chunk)
            if len(payload) > limit:
                logger.debug("Rejecting body: streamed past limit=%d", limit)
                raise BodyTooLarge(limit=limit)
    except ClientDisconnect as exc:
        raise BodyStreamError(
            "Client disconnected before the body was read", cause=exc
        ) from exc
    except RuntimeError as exc:
        # Starlette refuses to stream a body twice
        raise BodyStreamError("Request body was already consumed", cause=exc) from exc

    try:
        return json.loads(bytes(payload))
    except ValueError as exc:
        raise MalformedBody(cause=exc) from exc
