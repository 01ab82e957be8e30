"""Structured logging utilities for the xlsx reader.

This module provides:
- Package/worksheet tracking using contextvars for correlation across decodes
- Structured logging with consistent format and metadata
- Performance metrics logging helpers

Usage:
    from xlsx_reader.utils.logging import get_logger, LogContext

    logger = get_logger(__name__)

    with LogContext(package="book.xlsx", worksheet="Sheet1"):
        logger.info("Decoding worksheet")

    with timed_operation(logger, "decode_worksheet") as metrics:
        metrics.rows_decoded = 10
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from xlsx_reader.config import settings as default_settings

# Context variables for decode tracking
_package_var: ContextVar[str | None] = ContextVar("package", default=None)
_worksheet_var: ContextVar[str | None] = ContextVar("worksheet", default=None)
_extra_context_var: ContextVar[dict[str, Any] | None] = ContextVar(
    "extra_context", default=None
)


def get_package() -> str | None:
    """Get the package path currently being read.

    Returns:
        The package path or None if not set.
    """
    return _package_var.get()


def set_package(package: str | None) -> None:
    """Set the package path in context.

    Args:
        package: The package path to set, or None to clear.
    """
    _package_var.set(package)


def get_worksheet() -> str | None:
    """Get the worksheet currently being decoded.

    Returns:
        The worksheet name or None if not set.
    """
    return _worksheet_var.get()


def set_worksheet(worksheet: str | None) -> None:
    """Set the worksheet name in context.

    Args:
        worksheet: The worksheet name to set, or None to clear.
    """
    _worksheet_var.set(worksheet)


def get_extra_context() -> dict[str, Any]:
    """Get additional context from context vars.

    Returns:
        Dictionary of extra context values.
    """
    ctx = _extra_context_var.get()
    return ctx if ctx is not None else {}


def set_extra_context(context: dict[str, Any]) -> None:
    """Set additional context in context vars.

    Args:
        context: Dictionary of extra context values.
    """
    _extra_context_var.set(context)


def clear_context() -> None:
    """Clear all context variables."""
    _package_var.set(None)
    _worksheet_var.set(None)
    _extra_context_var.set(None)


@dataclass
class PerformanceMetrics:
    """Container for performance metrics during a decode.

    Attributes:
        operation: Name of the operation being measured.
        start_time: When the operation started.
        end_time: When the operation ended.
        duration_seconds: Duration in seconds.
        bytes_read: Decompressed bytes consumed.
        rows_decoded: Number of rows decoded.
        cells_decoded: Number of cells decoded.
    """

    operation: str
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    duration_seconds: float = 0.0
    bytes_read: int = 0
    rows_decoded: int = 0
    cells_decoded: int = 0

    def finish(self) -> None:
        """Mark the operation as complete and calculate duration."""
        self.end_time = datetime.now(UTC)
        self.duration_seconds = (self.end_time - self.start_time).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging.

        Returns:
            Dictionary with all non-zero metrics.
        """
        result: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": f"{self.duration_seconds:.4f}",
        }
        if self.bytes_read > 0:
            result["bytes_read"] = self.bytes_read
        if self.rows_decoded > 0:
            result["rows_decoded"] = self.rows_decoded
        if self.cells_decoded > 0:
            result["cells_decoded"] = self.cells_decoded
        return result


class StructuredLogFormatter(logging.Formatter):
    """Log formatter that prefixes records with the current decode context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with context information.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        prefix_parts = []
        package = get_package()
        if package:
            prefix_parts.append(f"package={package}")
        worksheet = get_worksheet()
        if worksheet:
            prefix_parts.append(f"worksheet={worksheet}")
        for key, value in get_extra_context().items():
            prefix_parts.append(f"{key}={value}")

        prefix = f"[{' '.join(prefix_parts)}] " if prefix_parts else ""

        original_msg = record.msg
        record.msg = f"{prefix}{original_msg}"
        result = super().format(record)
        record.msg = original_msg

        return result


class StructuredLogger:
    """Thin wrapper around a standard logger that renders key=value pairs."""

    def __init__(self, name: str) -> None:
        """Initialize the structured logger.

        Args:
            name: Logger name (typically __name__ of the module).
        """
        self._logger = logging.getLogger(name)
        self._name = name

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying Python logger."""
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

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        """Log performance metrics at debug level.

        Args:
            metrics: Performance metrics to log.
        """
        self.debug(f"Performance: {metrics.operation}", **metrics.to_dict())


class LogContext:
    """Context manager for adding temporary context to logs.

    Usage:
        with LogContext(package="book.xlsx", part="xl/worksheets/sheet1.xml"):
            logger.info("Decoding...")
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize with context values.

        Args:
            **kwargs: Key-value pairs to add to log context. ``package`` and
                ``worksheet`` populate their dedicated context variables.
        """
        self._new_context = dict(kwargs)
        self._old_context: dict[str, Any] = {}
        self._old_package: str | None = None
        self._old_worksheet: str | None = None

    def __enter__(self) -> "LogContext":
        """Enter the context, saving old values and setting new ones."""
        self._old_context = get_extra_context().copy()
        self._old_package = get_package()
        self._old_worksheet = get_worksheet()

        new_context = dict(self._new_context)
        package = new_context.pop("package", None)
        worksheet = new_context.pop("worksheet", None)

        if package is not None:
            set_package(str(package))
        if worksheet is not None:
            set_worksheet(str(worksheet))

        merged = self._old_context.copy()
        merged.update(new_context)
        set_extra_context(merged)

        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring old values."""
        set_extra_context(self._old_context)
        set_package(self._old_package)
        set_worksheet(self._old_worksheet)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Context manager for timing operations.

    Usage:
        with timed_operation(logger, "decode_worksheet") as metrics:
            metrics.rows_decoded = 100

    Args:
        logger: Logger to use for output.
        operation: Name of the operation.

    Yields:
        PerformanceMetrics instance for tracking.
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str | None = None,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Configure logging for applications embedding the reader.

    Args:
        level: Log level (int or string like "INFO"). Defaults to the
            configured ``log_level``, or DEBUG when ``debug`` is enabled.
        format_string: Custom format string (uses default if None).
        use_structured_formatter: Whether to use the structured formatter.
    """
    if level is None:
        level = logging.DEBUG if default_settings.debug else default_settings.log_level_int
    elif isinstance(level, str):
        level = getattr(logging, level.upper())

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)

    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(format_string)
    else:
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.

    Example:
        logger = get_logger(__name__)
        logger.info("Opened package", worksheets=3)
    """
    return StructuredLogger(name)
