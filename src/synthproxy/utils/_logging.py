"""Logging utilities for synthproxy.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to a file or to stderr. Each logger
is self-contained and does not modify global structlog configuration.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog

from synthproxy.config import LogFormat, LoggingConfig

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


def _get_log_level(level: str | None = None) -> int:
    """Resolve the effective log level.

    SYNTHPROXY_DEBUG wins over everything, then the configured level, then
    SYNTHPROXY_LOG_LEVEL. Defaults to INFO.

    Returns:
        The logging level as an integer.
    """
    if getenv("SYNTHPROXY_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    if level is None:
        level = getenv("SYNTHPROXY_LOG_LEVEL", "info")
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    config: LoggingConfig | None = None,
    *,
    name: str = "synthproxy",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger for a generator.

    Args:
        config: Logging section; defaults to text output on stderr at INFO.
        name: Logger name bound to every entry.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    config = config if config is not None else LoggingConfig()
    effective_level = _get_log_level(config.level.value if config.level is not None else None)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        raw_logger = structlog.WriteLoggerFactory(file=log_path.open("a"))()
    else:
        raw_logger = structlog.PrintLoggerFactory(file=sys.stderr)()

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.format == LogFormat.JSON:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(effective_level),
            context_class=dict,
        ),
    )
    return logger.bind(logger=name)
