"""Logging utilities for ReqSmith.

This module provides standalone structlog logger factories that write
JSON-formatted or text-formatted logs to a file or to stderr. Each logger is
self-contained and does not modify global structlog configuration, so an
embedding application keeps control of its own logging setup.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from reqsmith.config import LoggingConfig

LogFormatType = Literal["json", "text"]

# Library code stays quiet unless asked.
_DEFAULT_LEVEL = "warning"


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    The level is determined by (in order of precedence):
    1. REQSMITH_DEBUG environment variable (if set and respect_env, DEBUG)
    2. REQSMITH_LOG_LEVEL environment variable (if set and respect_env)
    3. The `level` argument

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, environment variables override `level`.

    Returns:
        The logging level as an integer.
    """
    if respect_env:
        if getenv("REQSMITH_DEBUG", None):
            return logging.DEBUG
        level = getenv("REQSMITH_LOG_LEVEL", level)

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    *,
    level: str = _DEFAULT_LEVEL,
    log_format: LogFormatType = "json",
    log_file: str = "",
    respect_env: bool = True,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger.

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to a log file opened in append mode. Logs go to stderr
            when empty.
        respect_env: If True, REQSMITH_DEBUG and REQSMITH_LOG_LEVEL override
            `level`.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    effective_level = _log_level_from_string(level, respect_env=respect_env)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(effective_level)

    # wrap_logger leaves the global structlog configuration untouched
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def create_logger_from_config(
    config: "LoggingConfig",  # noqa: UP037
    *,
    component: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger from a logging configuration section.

    Args:
        config: The logging configuration.
        component: Component name bound to every entry when non-empty.

    Returns:
        A FilteringBoundLogger instance.
    """
    logger = create_logger(
        level=str(config.level),
        log_format=cast("LogFormatType", str(config.format)),
        log_file=config.file,
    )
    if component:
        return logger.bind(component=component)
    return logger
