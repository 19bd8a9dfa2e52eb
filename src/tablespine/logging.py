"""
Structured logging for tablespine.

Call :func:`configure_logging` (or :func:`configure_from_settings`) once at
start-up; library modules only ever call :func:`get_logger` and emit
key/value events::

    logger = get_logger(__name__)
    logger.debug("statement_built", table="users", operation="get", param_count=1)

Events emitted by the package:

==================  =======  ==============================================
event               level    keys
==================  =======  ==============================================
statement_built     debug    table, operation, param_count
filter_ignored      debug    key, reason
row_created         debug    table
row_updated         debug    table, primary_key
row_removed         debug    table, primary_key
storage_fault       warning  error, error_type, sql
rollback_failed     warning  table, error
connection_created  info     backend, persistent
==================  =======  ==============================================

Architecture:
    ::

        configure_logging(level, json_format, service)
            │
            ├── [timestamp]            ISO, optional
            ├── contextvars            keys from bind_context / LogContext
            ├── level + logger name
            ├── service.name
            ├── [ECS renames]          JSON only: @timestamp, log.level
            └── JSONRenderer | ConsoleRenderer

Tags:
    logging, structlog, observability, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from tablespine.settings import TableSpineSettings

_service = "tablespine"

# ECS names for the keys structlog produces
_ECS_RENAMES = {"timestamp": "@timestamp", "level": "log.level"}


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service.name", _service)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key, ecs_key in _ECS_RENAMES.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def _processor_chain(json_format: bool, add_timestamp: bool) -> list[Processor]:
    chain: list[Processor] = []
    if add_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))
    chain += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]
    if json_format:
        chain += [_elasticsearch_compatible, structlog.processors.JSONRenderer()]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return chain


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "tablespine",
    add_timestamp: bool = True,
) -> None:
    """Install the structlog configuration for the process.

    Args:
        level: Minimum level name (``DEBUG``, ``INFO``, ...).
        json_format: JSON lines when True, console output when False; when
            None, JSON unless stdout is a terminal.
        service: Value of ``service.name`` on every record.
        add_timestamp: Prefix records with an ISO timestamp.
    """
    global _service
    _service = service

    if json_format is None:
        json_format = not sys.stdout.isatty()
    numeric_level = logging.getLevelName(level.upper())

    structlog.configure(
        processors=_processor_chain(json_format, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: TableSpineSettings) -> None:
    """Apply ``log_level`` / ``log_format`` / ``service_name`` from settings."""
    configure_logging(
        level=settings.log_level,
        json_format=settings.log_format == "json",
        service=settings.service_name,
    )


def get_logger(name: str | None = None) -> Any:
    """Structured logger, normally ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach keys to every record logged from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind keys for the duration of a ``with`` / ``async with`` block.

    Example:
        with LogContext(request_id="abc123", table="users"):
            accessor.update("ann", {"status": "active"})
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context)

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *args) -> None:
        self.__exit__(*args)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
