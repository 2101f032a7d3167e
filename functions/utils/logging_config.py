"""
functions/utils/logging_config.py

Process-wide structlog configuration shared by both services.

Modules keep using `structlog.get_logger(__name__)` and event-style
messages (`logger.info("settings_loaded", key=value)`); this module only
decides level filtering and rendering (console for local runs, JSON for
deployments).
"""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """
    Configure structlog for the current process.

    Args:
        level: standard logging level name (DEBUG, INFO, WARNING, ...).
        fmt: "console" for human-readable output, "json" for one JSON
             object per line.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if fmt == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=False,
    )
