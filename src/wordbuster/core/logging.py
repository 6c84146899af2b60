"""Structured logging configuration for wordbuster.

Diagnostic logs go to stderr through structlog so they never interleave
with result lines printed on stdout.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

_installed_handlers: list[logging.Handler] = []


def get_utc_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add UTC timestamp to log events."""
    event_dict["timestamp"] = get_utc_timestamp()
    return event_dict


def add_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add default context fields to log events."""
    event_dict.setdefault("service", "wordbuster")
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: str | None = None,
) -> Any:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: If True, output JSON logs for machine parsing
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    processors = [
        structlog.stdlib.filter_by_level,
        add_timestamp,
        add_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_level = getattr(logging, level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Reconfiguring replaces the handlers installed by an earlier call
    for installed in _installed_handlers:
        root_logger.removeHandler(installed)
        installed.close()
    _installed_handlers.clear()

    # Results own stdout, diagnostics go to stderr
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(log_level)
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)

    return structlog.get_logger("wordbuster")


def get_logger(name: str = "wordbuster") -> Any:
    """Get a logger instance."""
    return structlog.get_logger(name)


def log_run_event(
    event: str,
    mode: str,
    target: str | None = None,
    **kwargs: Any,
) -> None:
    """Log a run-level event with standard fields.

    Args:
        event: Event name (e.g., "run_started", "wildcard_detected")
        mode: Enumeration mode name
        target: Target URL, domain or server (optional)
        **kwargs: Additional event data
    """
    logger = get_logger("wordbuster.run")

    event_data = {
        "mode": mode,
        **kwargs,
    }
    if target:
        event_data["target"] = target

    logger.info(event, **event_data)
