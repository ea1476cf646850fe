"""Dispatcher — Express-style registration surface over a FastAPI application.

Raw handlers take ``(request, response, next)``. ``response`` is a temporal
response (as in FastAPI's ``response: Response`` parameter) whose status and
headers are applied to the value the chain returns; ``next`` is awaited to
run the rest of the chain. Routing, serialization, and the ASGI surface are
FastAPI's own.
"""

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send

from fastapi_request_basics._types import RawHandler
from fastapi_request_basics.config import BasicsSettings, get_settings
from fastapi_request_basics.logging_config import configure as configure_logging

logger = logging.getLogger(__name__)

_PARAM_RE = re.compile(r":(\w+)")


@dataclass(frozen=True)
class _Layer:
    """Middleware registered with ``use``, mounted at a path prefix."""

    path: str
    handler: RawHandler

    def matches(self, path: str) -> bool:
        prefix = self.path.rstrip("/")
        return not prefix or path == prefix or path.startswith(prefix + "/")


def _route_path(path: str) -> str:
    """Translate ``/users/:id`` placeholders into ``/users/{id}``."""
    return _PARAM_RE.sub(r"{\1}", path)


def _temporal_response() -> Response:
    response = Response()
    del response.headers["content-length"]
    response.status_code = None  # type: ignore[assignment]
    return response


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


async def run_chain(
    handlers: Sequence[RawHandler],
    request: Request,
    response: Response,
    tail: Callable[[], Awaitable[Any]],
) -> Any:
    """Run ``handlers`` in order; ``next()`` past the last one awaits ``tail``."""

    async def step(index: int) -> Any:
        if index == len(handlers):
            return await tail()

        async def call_next(error: BaseException | None = None) -> Any:
            if error is not None:
                raise error
            return await step(index + 1)

        return await _resolve(handlers[index](request, response, call_next))

    return await step(0)


async def _not_found() -> Any:
    raise HTTPException(status_code=404)


class Dispatcher:
    """Registers raw handlers on a FastAPI app, Express style.

    ``use`` layers run in registration order ahead of routing, for every
    request under their path prefix. Route registrations (``get``, ``post``,
    ...) become one FastAPI route each, running their handlers as a chain.
    """

    def __init__(
        self, app: FastAPI | None = None, *, config: BasicsSettings | None = None
    ) -> None:
        self.app = app if app is not None else FastAPI()
        self.config = config or get_settings()
        self._layers: list[_Layer] = []
        self._settings: dict[str, Any] = {}
        self.app.add_middleware(BaseHTTPMiddleware, dispatch=self._dispatch_layers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)

    def use(self, *args: Any) -> Dispatcher:
        path = "/"
        if args and isinstance(args[0], str):
            path, args = args[0], args[1:]
        if not args:
            raise TypeError("use() requires at least one handler")
        for handler in args:
            self._layers.append(_Layer(path=path, handler=handler))
        return self

    def route(self, method: str, path: str, *handlers: RawHandler) -> Dispatcher:
        if not handlers:
            raise TypeError(f"{method} {path} requires at least one handler")
        self.app.add_api_route(
            _route_path(path),
            self._endpoint(tuple(handlers)),
            methods=[method.upper()],
            name=f"{method.upper()} {path}",
        )
        logger.debug(
            "Route %s %s with %d handler(s)", method.upper(), path, len(handlers)
        )
        return self

    def get(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("GET", path, *handlers)

    def post(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("POST", path, *handlers)

    def put(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("PUT", path, *handlers)

    def patch(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("PATCH", path, *handlers)

    def delete(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("DELETE", path, *handlers)

    def options(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("OPTIONS", path, *handlers)

    def head(self, path: str, *handlers: RawHandler) -> Dispatcher:
        return self.route("HEAD", path, *handlers)

    def set(self, name: str, value: Any) -> Dispatcher:
        self._settings[name] = value
        return self

    def setting(self, name: str, default: Any = None) -> Any:
        return self._settings.get(name, default)

    def listen(
        self, port: int | None = None, host: str | None = None, **options: Any
    ) -> None:
        """Serve the app with uvicorn. Blocks until the server shuts down."""
        configure_logging(self.config)
        host = host or self.config.host
        port = port if port is not None else self.config.port
        options.setdefault("log_config", None)
        logger.info("Listening on http://%s:%s", host, port)
        uvicorn.run(self.app, host=host, port=port, **options)

    @staticmethod
    def _endpoint(handlers: tuple[RawHandler, ...]) -> Callable[..., Awaitable[Any]]:
        # Left unannotated so FastAPI does not derive a response model
        async def endpoint(request: Request, response: Response):
            return await run_chain(handlers, request, response, _not_found)

        return endpoint

    async def _dispatch_layers(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        handlers = [
            layer.handler for layer in self._layers if layer.matches(request.url.path)
        ]
        if not handlers:
            return await call_next(request)

        response = _temporal_response()
        downstream: list[Response] = []

        async def proceed() -> Response:
            result = await call_next(request)
            downstream.append(result)
            return result

        try:
            result = await run_chain(handlers, request, response, proceed)
        except StarletteHTTPException as exc:
            return JSONResponse(
                {"detail": exc.detail},
                status_code=exc.status_code,
                headers=exc.headers,
            )

        if isinstance(result, Response):
            final = result
        elif result is None and downstream:
            final = downstream[0]
        else:
            final = JSONResponse(
                jsonable_encoder(result), status_code=response.status_code or 200
            )
        if response.raw_headers:
            final.raw_headers = [*final.raw_headers, *response.raw_headers]
        return final
