import logging
import sys

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)

from eli5.config.settings import Environment, settings

_configured = False


def configure_logging(level: str = settings.LOG_LEVEL, *, json: bool | None = None) -> None:
    """
    Configure structlog once per process.
    Production renders JSON lines; development renders readable console output.
    """
    global _configured
    if _configured:
        return

    if json is None:
        json = settings.APP_ENV == Environment.PRODUCTION

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Attach key/values (e.g. user_id) to every log line emitted afterwards."""
    bind_contextvars(**kwargs)


def clear_context() -> None:
    clear_contextvars()

