"""
Logging setup for applications embedding cloudwatch-query-core.

The library only emits structlog events; call configure_logging() from the
application to render them as JSON through the standard logging module.
"""

import logging
from typing import Any

import structlog


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure the structlog/standard logging bridge with JSON output."""

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")


def bind_datasource(datasource_id: int, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Return a logger bound to a datasource id and any extra context."""

    return structlog.get_logger().bind(datasource_id=datasource_id, **kwargs)
