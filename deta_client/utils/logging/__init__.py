"""Structured logging for the Deta client."""

from .logger import LOGGER_NAME, StructuredLogger, get_logger
from .multi_file_logger import MultiFileLogger, configure_logging
from .framework import SmartLogger, get_smart_logger, log_operation

__all__ = [
    "LOGGER_NAME",
    "StructuredLogger",
    "MultiFileLogger",
    "SmartLogger",
    "configure_logging",
    "get_logger",
    "get_smart_logger",
    "log_operation",
]
