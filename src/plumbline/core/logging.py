# src/plumbline/core/logging.py
"""Structured logging configuration for plumbline.

Engine events (connections opened, scripts run, views dropped) and
stdlib records from SQLAlchemy share one structlog processor chain and
render either as JSON lines or for the console. Pre/post scripts can be
whole migration files, so SQL carried on an event is collapsed to one
line and cut at SQL_LOG_MAX_CHARS.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

# Event keys whose values are user SQL
SQL_FIELDS: frozenset[str] = frozenset({"script", "sql", "view_sql"})

SQL_LOG_MAX_CHARS = 200

# Per-statement echo and pool checkout chatter; kept at WARNING or above
_SQLALCHEMY_LOGGERS: tuple[str, ...] = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.pool",
    "sqlalchemy.dialects",
    "sqlalchemy.orm",
)


def _shorten_sql(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Collapse whitespace in SQL fields and truncate long statements."""
    for key in SQL_FIELDS & event_dict.keys():
        value = event_dict[key]
        if not isinstance(value, str):
            continue
        flat = " ".join(value.split())
        if len(flat) > SQL_LOG_MAX_CHARS:
            flat = f"{flat[:SQL_LOG_MAX_CHARS]}... ({len(flat)} chars)"
        event_dict[key] = flat
    return event_dict


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    # ProcessorFormatter always adds both keys
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _clamp_sqlalchemy_loggers(root_level: int) -> None:
    level = max(root_level, logging.WARNING)
    for name in _SQLALCHEMY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog and stdlib logging to stdout for a plumbline run.

    Called once by the CLI callback. ``--verbose`` maps to DEBUG, which
    shows per-transform and per-sink events but never SQLAlchemy's
    statement echo.

    Args:
        json_output: Emit one JSON object per line (``--json-logs``).
        level: Root level name (DEBUG, INFO, WARNING, ERROR).
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        _shorten_sql,
    ]

    if json_output:
        final_processors: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfigured between CLI invocations in one process
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)

    _clamp_sqlalchemy_loggers(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for a plumbline module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
