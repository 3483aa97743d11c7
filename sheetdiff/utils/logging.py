"""Structured logging utilities for the comparison service.

This module provides:
- A thin structured logger that appends key=value pairs to messages
- Timing of operations with automatic duration logging
- Root logger configuration for the transports

Usage:
    from sheetdiff.utils.logging import get_logger, timed_operation

    logger = get_logger(__name__)
    logger.info("Comparison finished", mode="keyed", added=3)

    with timed_operation(logger, "keyed_comparison"):
        ...
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any


class StructuredLogger:
    """Wraps a standard Python logger and formats keyword context.

    ``logger.info("Read workbook", sheets=2)`` logs
    ``Read workbook | sheets=2``.
    """

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        """The underlying standard logger."""
        return self._logger

    def _build_message(self, message: str, **kwargs: Any) -> str:
        if not kwargs:
            return message
        parts = [f"{k}={v}" for k, v in kwargs.items()]
        return f"{message} | {', '.join(parts)}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._logger.debug(self._build_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._logger.info(self._build_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._logger.warning(self._build_message(message, **kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log an error message.

        Args:
            message: Log message.
            exc_info: Whether to include exception info.
            **kwargs: Additional structured data.
        """
        self._logger.error(self._build_message(message, **kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an exception with traceback."""
        self._logger.exception(self._build_message(message, **kwargs))


@dataclass
class OperationTiming:
    """Duration and extra metrics of a timed operation."""

    operation: str
    start: float = field(default_factory=time.perf_counter)
    duration_ms: float = 0.0
    metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        """Record the elapsed time since the operation started."""
        self.duration_ms = round((time.perf_counter() - self.start) * 1000, 2)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[OperationTiming, None, None]:
    """Time a block and log its duration and any metrics set on it.

    Usage:
        with timed_operation(logger, "grid_comparison") as timing:
            timing.metrics["changed_cells"] = 12

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        OperationTiming instance for recording metrics.
    """
    timing = OperationTiming(operation=operation)
    try:
        yield timing
    finally:
        timing.finish()
        logger.info(
            f"Performance: {operation}",
            duration_ms=timing.duration_ms,
            **timing.metrics,
        )


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
) -> None:
    """Configure the root logger for the application.

    Args:
        level: Log level (int or string like "INFO").
        format_string: Custom format string (uses default if None).
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.
    """
    return StructuredLogger(name)
