"""
Logging setup shared by the API server and the CLI.

Core modules log through ``logging.getLogger(__name__)``; the API and CLI
layers use structlog directly. Context bound with ``bind_context`` (request
id, caller, refresh scope) is merged into every structlog event until
``clear_context`` is called.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from dividend_tracker.config.settings import get_settings

SERVICE_NAME = "dividend-tracker"

_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "uvicorn.access")


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Overrides LOG_LEVEL from settings (the CLI passes DEBUG for --debug)
        json_output: Force JSON rendering; defaults to on in production
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_output is None:
        json_output = settings.is_production

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_context(**kwargs) -> None:
    """Bind key-value pairs to all subsequent structlog events."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
