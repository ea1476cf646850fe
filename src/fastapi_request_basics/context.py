"""HttpBasics and build_handler() — fold (request, response, next) into one object."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from fastapi_request_basics._types import ApplicationHandler, Next, RawHandler
from fastapi_request_basics.body import read_json_body
from fastapi_request_basics.config import BasicsSettings, get_settings
from fastapi_request_basics.exceptions import MalformedBody
from fastapi_request_basics.translation import Translator

logger = logging.getLogger(__name__)

I18n = Callable[..., "str | list[str]"]


@dataclass
class HttpBasics:
    """Per-request context handed to application handlers.

    Built fresh for every invocation and never reused across requests.

    Attributes:
        request: The incoming Starlette request.
        response: Temporal response; status and headers set here are applied
            to whatever the handler returns.
        next: Continuation running the remaining handlers of the chain.
        use: Runs a raw ``(request, response, next)`` handler inline and
            returns its result.
        body: Returns a future resolving to the parsed JSON body. Call it once
            per request: the stream path consumes the request stream.
        i18n: Translation shorthand, ``None`` unless a translator is attached
            to ``request.state.i18n``. One key returns a string, several keys
            return a list in argument order: ``i18n("a", "b") == ["A", "B"]``.
    """

    request: Request
    response: Response
    next: Next
    use: Callable[[RawHandler], Any]
    body: Callable[[], asyncio.Future[Any]]
    i18n: I18n | None = None


def build_handler(
    handler: ApplicationHandler, *, config: BasicsSettings | None = None
) -> RawHandler:
    """Return a raw ``(request, response, next)`` callback invoking ``handler``."""
    settings = config or get_settings()

    def raw_handler(request: Request, response: Response, call_next: Next) -> Any:
        def use(middleware: RawHandler) -> Any:
            return middleware(request, response, call_next)

        def body() -> asyncio.Future[Any]:
            return parse_body(request, settings)

        translator = getattr(request.state, "i18n", None)
        ctx = HttpBasics(
            request=request,
            response=response,
            next=call_next,
            use=use,
            body=body,
            i18n=_bind_i18n(translator) if translator is not None else None,
        )
        return handler(ctx)

    raw_handler.__name__ = getattr(handler, "__name__", raw_handler.__name__)
    return raw_handler


def parse_body(request: Request, config: BasicsSettings) -> asyncio.Future[Any]:
    """Start parsing the body and return the pending result.

    A GET request carrying the payload in the reserved query key is decoded
    right away without touching the stream; anything else streams the body.
    """
    payload = request.query_params.get(config.query_body_key)
    if request.method == "GET" and payload:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        try:
            future.set_result(json.loads(payload))
        except ValueError as exc:
            logger.debug(
                "Malformed JSON in ?%s= for %s",
                config.query_body_key,
                request.url.path,
            )
            future.set_exception(
                MalformedBody("Malformed JSON in query string body", cause=exc)
            )
        return future

    return asyncio.ensure_future(read_json_body(request, limit=config.body_limit))


def _bind_i18n(translator: Translator) -> I18n:
    def i18n(*keys: Any) -> str | list[str]:
        translated = [
            translator(*key) if isinstance(key, (list, tuple)) else translator(key)
            for key in keys
        ]
        if len(translated) == 1:
            return translated[0]
        return translated

    return i18n
