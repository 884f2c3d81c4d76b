"""Structured logging with structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from delayq.config import settings

# stdlib logging has no NOTICE level; notice events go out at INFO and carry
# this severity so log pipelines can still tell them apart.
NOTICE = "notice"


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog for the worker and the API."""
    level = (level or settings.log_level).upper()
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    fmt = fmt or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if fmt == "json":
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
        )
    else:
        formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        )

    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str = "delayq", **initial_values: Any) -> Any:
    return structlog.get_logger(name, **initial_values)


def log_notice(logger: Any, event: str, **fields: Any) -> None:
    logger.info(event, severity=NOTICE, **fields)
