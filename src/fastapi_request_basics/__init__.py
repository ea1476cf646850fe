"""FastAPI Request Basics - one context object per request for route handlers."""

from fastapi_request_basics.body import read_json_body
from fastapi_request_basics.config import BasicsSettings, get_settings
from fastapi_request_basics.context import HttpBasics, build_handler
from fastapi_request_basics.dispatcher import Dispatcher
from fastapi_request_basics.exceptions import (
    BasicsException,
    BodyError,
    BodyStreamError,
    BodyTooLarge,
    MalformedBody,
)
from fastapi_request_basics.logging_config import configure as configure_logging
from fastapi_request_basics.registration import Basics, Registration
from fastapi_request_basics.translation import (
    CatalogTranslator,
    TranslationMiddleware,
    Translator,
)

__all__ = [
    "Basics",
    "BasicsException",
    "BasicsSettings",
    "BodyError",
    "BodyStreamError",
    "BodyTooLarge",
    "CatalogTranslator",
    "Dispatcher",
    "HttpBasics",
    "MalformedBody",
    "Registration",
    "TranslationMiddleware",
    "Translator",
    "build_handler",
    "configure_logging",
    "get_settings",
    "read_json_body",
]
