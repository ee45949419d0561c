"""
Structured logging for the stock ledger.

Events are snake_case names with keyword context. Logs go to stderr so that
command output on stdout stays machine-readable. Writes and reconciliations
run inside ``ledger_context``, which binds the product, shop and movement ids
to every event emitted in the block, storage layer included.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from stockledger.config.settings import get_settings

# Driver and event loop chatter at INFO is per statement
QUIET_LOGGERS = ("aiosqlite", "asyncio")


def service_tagger(service: str, environment: str) -> Processor:
    """Processor stamping every event with where it came from."""

    def tag(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return tag


def configure_logging(log_level: str | None = None) -> None:
    """Configure structlog over stdlib logging; ``log_level`` overrides settings."""
    settings = get_settings()
    level = getattr(logging, log_level or settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if settings.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors += [
            service_tagger(settings.app_name, settings.environment),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


@contextmanager
def ledger_context(**ids: Any) -> Iterator[None]:
    """Bind non-None ids to every event logged inside the block."""
    bound = {key: value for key, value in ids.items() if value is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
