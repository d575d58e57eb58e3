"""Structured JSON logging for the Deta client.

Every event is one JSON object on one line:
``{"timestamp", "level", "message", <fields>..., "correlation_id"?}``.
The message is a snake_case event name (``query_page_fetched``), the
details travel as keyword fields.

Until ``configure_logging`` is called the package logger only carries a
``NullHandler``, so a library user sees nothing unless they opt in.
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from threading import local
from typing import Any, Dict, Optional

LOGGER_NAME = "deta_client"

# Thread-local storage for correlation IDs
_thread_local = local()

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


class StructuredLogger:
    """JSON logger with correlation IDs and performance tracking."""

    def __init__(self, name: str = LOGGER_NAME):
        self.logger = logging.getLogger(name)

    def _get_correlation_id(self) -> Optional[str]:
        """Get current correlation ID from thread-local storage."""
        return getattr(_thread_local, 'correlation_id', None)

    def set_correlation_id(self, correlation_id: Optional[str] = None) -> str:
        """Set correlation ID for current thread/request.

        Args:
            correlation_id: ID to use, or None to generate new one

        Returns:
            The correlation ID that was set
        """
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())
        _thread_local.correlation_id = correlation_id
        return correlation_id

    def clear_correlation_id(self):
        """Clear correlation ID for current thread."""
        if hasattr(_thread_local, 'correlation_id'):
            delattr(_thread_local, 'correlation_id')

    def _build_entry(self, level: int, message: str, **kwargs) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": logging.getLevelName(level),
            "message": message,
            **kwargs
        }
        correlation_id = self._get_correlation_id()
        if correlation_id:
            entry["correlation_id"] = correlation_id
        return entry

    def _log(self, level: int, message: str, **kwargs):
        """Internal logging method with JSON formatting."""
        if not self.logger.isEnabledFor(level):
            return
        entry = self._build_entry(level, message, **kwargs)
        self.logger.log(level, json.dumps(entry, default=str))

    def isEnabledFor(self, level: int) -> bool:
        return self.logger.isEnabledFor(level)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._log(logging.CRITICAL, message, **kwargs)

    @contextmanager
    def track_performance(self, operation: str, **context):
        """Context manager for tracking operation performance.

        Usage:
            with logger.track_performance("query_run", base="users"):
                builder.run_until_end()
        """
        start_time = time.time()
        self.info(f"{operation}_started", operation=operation, **context)
        try:
            yield
        finally:
            duration = time.time() - start_time
            self.info(
                f"{operation}_completed",
                operation=operation,
                duration_seconds=round(duration, 3),
                **context
            )


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get the global logger instance (singleton)."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger


def set_logger(instance: StructuredLogger) -> None:
    """Replace the global logger instance."""
    global _logger
    _logger = instance
