"""Basics — registration interceptor wrapping a dispatcher."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from fastapi_request_basics._types import ApplicationHandler
from fastapi_request_basics.config import BasicsSettings, get_settings
from fastapi_request_basics.context import build_handler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    """Arguments of one registration call, split into passthrough and handler.

    ``path_patterns`` holds everything ahead of the handler (paths, raw
    middleware) and is handed to the dispatcher untouched.
    """

    path_patterns: tuple[Any, ...]
    handler: ApplicationHandler

    @classmethod
    def from_args(cls, args: Sequence[Any]) -> Registration:
        # A leading None stands for an omitted path
        if args and args[0] is None:
            args = args[1:]
        if not args:
            raise TypeError("registration requires a handler")
        *leading, handler = args
        return cls(path_patterns=tuple(leading), handler=handler)


class Basics:
    """Dispatcher wrapper whose handlers receive a single HttpBasics object.

    Registration methods replace the trailing handler with a raw
    ``(request, response, next)`` callback and delegate to the dispatcher
    method of the same name, returning its result. Any other public method
    of the dispatcher is reachable on the wrapper as well; callable data
    attributes (such as a wrapped ASGI app) are not forwarded.

    Without an explicit ``config`` the dispatcher's own ``config`` is used,
    falling back to the environment settings.
    """

    def __init__(
        self, dispatcher: Any, *, config: BasicsSettings | None = None
    ) -> None:
        self.dispatcher = dispatcher
        self.config = config or getattr(dispatcher, "config", None) or get_settings()
        self._forward_dispatcher_members()

    def _forward_dispatcher_members(self) -> None:
        forwarded: list[str] = []
        for name in dir(self.dispatcher):
            if name.startswith("_") or hasattr(self, name):
                continue
            member = getattr(self.dispatcher, name)
            # Bound methods keep the dispatcher as receiver
            if inspect.ismethod(member):
                setattr(self, name, member)
                forwarded.append(name)
        logger.debug(
            "Forwarding %s members to %s",
            forwarded,
            type(self.dispatcher).__name__,
        )

    def register(self, verb: str, *args: Any) -> Any:
        """Wrap the trailing handler and delegate to ``dispatcher.<verb>``.

        The dispatcher's result is returned as is, so a chained call such as
        ``app.get(...).post(...)`` runs on the dispatcher and takes raw
        ``(request, response, next)`` handlers.
        """
        registration = Registration.from_args(args)
        raw_handler = build_handler(registration.handler, config=self.config)
        logger.debug("Registering %s %r", verb, registration.path_patterns)
        return getattr(self.dispatcher, verb)(
            *registration.path_patterns, raw_handler
        )

    def use(self, *args: Any) -> Any:
        return self.register("use", *args)

    def get(self, *args: Any) -> Any:
        return self.register("get", *args)

    def post(self, *args: Any) -> Any:
        return self.register("post", *args)

    def put(self, *args: Any) -> Any:
        return self.register("put", *args)

    def patch(self, *args: Any) -> Any:
        return self.register("patch", *args)

    def delete(self, *args: Any) -> Any:
        return self.register("delete", *args)

    def options(self, *args: Any) -> Any:
        return self.register("options", *args)

    def head(self, *args: Any) -> Any:
        return self.register("head", *args)

    def listen(self, *args: Any, **kwargs: Any) -> Any:
        """Start the dispatcher; arguments and result pass through unchanged."""
        return self.dispatcher.listen(*args, **kwargs)
