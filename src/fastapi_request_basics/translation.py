"""Translation collaborator — catalog lookup and locale negotiation middleware.

The translator is attached to ``request.state.i18n``; ``HttpBasics.i18n`` is
only available for requests that went through ``TranslationMiddleware`` (or
any other middleware setting that attribute).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

Catalogs = Mapping[str, Mapping[str, str]]


@runtime_checkable
class Translator(Protocol):
    """Looks up ``key`` and applies positional format arguments."""

    def __call__(self, key: str, *args: object) -> str: ...


class CatalogTranslator:
    """Dict-backed translator with default-locale and key fallback."""

    def __init__(
        self, catalogs: Catalogs, locale: str, *, default_locale: str = "en"
    ) -> None:
        self._catalogs = catalogs
        self.locale = locale
        self.default_locale = default_locale

    def __call__(self, key: str, *args: object) -> str:
        message = self._lookup(key)
        if args:
            return message % args
        return message

    def _lookup(self, key: str) -> str:
        for locale in (self.locale, self.default_locale):
            catalog = self._catalogs.get(locale)
            if catalog is not None and key in catalog:
                return catalog[key]
        return key


def negotiate_locale(header: str, available: Mapping[str, object]) -> str | None:
    """Pick the best locale in ``available`` for an Accept-Language header."""
    candidates: list[tuple[float, int, str]] = []
    for position, part in enumerate(header.split(",")):
        tag, _, params = part.strip().partition(";")
        if not tag or tag == "*":
            continue
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                continue
        if quality > 0:
            candidates.append((-quality, position, tag))

    for _, _, tag in sorted(candidates):
        if tag in available:
            return tag
        primary = tag.split("-")[0]
        if primary in available:
            return primary
    return None


class TranslationMiddleware(BaseHTTPMiddleware):
    """Resolves a locale per request and attaches a translator to its state.

    Locale order: ``?lang=`` query parameter, ``Accept-Language``, default.
    """

    def __init__(
        self,
        app: ASGIApp,
        catalogs: Catalogs,
        *,
        default_locale: str = "en",
        query_key: str = "lang",
    ) -> None:
        super().__init__(app)
        self._catalogs = catalogs
        self._default_locale = default_locale
        self._query_key = query_key

    def resolve_locale(self, request: Request) -> str:
        requested = request.query_params.get(self._query_key)
        if requested and requested in self._catalogs:
            return requested
        header = request.headers.get("accept-language")
        if header:
            negotiated = negotiate_locale(header, self._catalogs)
            if negotiated is not None:
                return negotiated
        return self._default_locale

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        locale = self.resolve_locale(request)
        logger.debug("Resolved locale %s for %s", locale, request.url.path)
        request.state.i18n = CatalogTranslator(
            self._catalogs, locale, default_locale=self._default_locale
        )
        return await call_next(request)
