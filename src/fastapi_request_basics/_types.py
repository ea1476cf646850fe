"""Shared type aliases for handlers and continuations."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi_request_basics.context import HttpBasics

# Continuation handed to raw handlers; awaiting it runs the rest of the chain
Next = Callable[..., Awaitable[Any]]

# Dispatcher-native handler: (request, response, next)
RawHandler = Callable[..., Any]

# Handler taking the single HttpBasics context object
ApplicationHandler = Callable[["HttpBasics"], Any]
