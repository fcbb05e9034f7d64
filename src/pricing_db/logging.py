"""Logging utilities for the pricing database.

This module provides standardized logging functionality for catalog and
calculation events. The library only emits records; configuring handlers and
levels is left to the application (the CLI does this from its flags).
"""

import logging
from enum import Enum
from typing import Any, Dict

LOGGER_NAMESPACE = "pricing_db"


class LogLevel(int, Enum):
    """Log levels for the pricing database."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for pricing database logging."""

    CATALOG_BUILD = "catalog_build"
    CATALOG_VALIDATION = "catalog_validation"
    DATA_SOURCE = "data_source"
    PRICE_RESOLUTION = "price_resolution"
    COST_CALCULATION = "cost_calculation"
    DEFAULT_INSTANCE = "default_instance"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Module or component name. Names already inside the package
            namespace (e.g. ``__name__``) are used as-is.

    Returns:
        The logger instance
    """
    if name == LOGGER_NAMESPACE or name.startswith(f"{LOGGER_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_event_logger = get_logger("events")


def _log(level: LogLevel, event: LogEvent, message: str, data: Dict[str, Any]) -> None:
    """Log an event with structured data attached.

    Args:
        level: Severity level
        event: Event type
        message: Human-readable message
        data: Dictionary of event data, attached as ``extra``
    """
    if not _event_logger.isEnabledFor(level):
        return
    _event_logger.log(level, message, extra={"event": event.value, "data": data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level event."""
    _log(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level event."""
    _log(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level event."""
    _log(LogLevel.WARNING, event, message, data)
