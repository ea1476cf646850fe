"""Route package and uvicorn log records through structlog.

``Dispatcher.listen`` calls :func:`configure` before starting uvicorn, so the
server's own loggers and ``fastapi_request_basics.*`` share one handler.
"""

from __future__ import annotations

import logging
import sys

import structlog

from fastapi_request_basics.config import BasicsSettings, get_settings

# uvicorn is started with log_config=None, so these keep no handlers of their own
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_PRE_CHAIN: list = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def _renderer(config: BasicsSettings) -> structlog.typing.Processor:
    if config.log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _level(config: BasicsSettings) -> int:
    level = logging.getLevelName(config.log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def configure(config: BasicsSettings | None = None) -> None:
    """Install a single stderr handler on the root logger.

    ``config.log_json`` selects JSON lines over console output and
    ``config.log_level`` sets the root level; unknown level names mean INFO.
    """
    config = config or get_settings()

    structlog.configure(
        processors=[
            *_PRE_CHAIN,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(config),
            ],
            foreign_pre_chain=_PRE_CHAIN,
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(_level(config))

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
