"""Component-based log files.

Each component gets its own rotating file, and an additional error log
captures every ERROR level message across components.

Log Files:
- query.log: query builder and cursor loop
- update.log: update builder
- transport.log: HTTP requests and failures
- base.log: Base facade operations
- drive.log: Drive facade operations and uploads
- system.log: configuration and anything without a component
- errors.log: all ERROR level messages (cross-component)
"""

import json
import logging
import logging.handlers
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Union

from ..config.constants import (
    COMPONENT_BASE,
    COMPONENT_CONFIG,
    COMPONENT_DRIVE,
    COMPONENT_QUERY,
    COMPONENT_SYSTEM,
    COMPONENT_TRANSPORT,
    COMPONENT_UPDATE,
)
from .logger import LOGGER_NAME, StructuredLogger, get_logger, set_logger


class MultiFileLogger(StructuredLogger):
    """Logger that routes messages to different files based on component."""

    COMPONENT_FILES = {
        COMPONENT_QUERY: 'query.log',
        COMPONENT_UPDATE: 'update.log',
        COMPONENT_TRANSPORT: 'transport.log',
        COMPONENT_BASE: 'base.log',
        COMPONENT_DRIVE: 'drive.log',
        COMPONENT_SYSTEM: 'system.log',
        COMPONENT_CONFIG: 'system.log',
    }

    def __init__(self, log_dir: Union[str, Path] = "logs", level: int = logging.INFO,
                 max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5):
        """Initialize multi-file logger.

        Args:
            log_dir: Directory for log files
            level: Logging level (default: INFO)
            max_bytes: Rotation size per file
            backup_count: Rotated files kept per component
        """
        super().__init__(LOGGER_NAME)
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.level = level
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.handlers: Dict[str, logging.Handler] = {}
        self.lock = Lock()

        self._setup_handlers()
        self._setup_error_handler()

    def _rotating_handler(self, filename: str, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        handler.setFormatter(logging.Formatter('%(message)s'))
        handler.setLevel(level)
        return handler

    def _setup_handlers(self):
        """Create one handler per log file; aliases share a handler."""
        by_file: Dict[str, logging.Handler] = {}
        for component, filename in self.COMPONENT_FILES.items():
            if filename not in by_file:
                by_file[filename] = self._rotating_handler(filename, self.level)
            self.handlers[component] = by_file[filename]

    def _setup_error_handler(self):
        """Create special handler for all ERROR level messages."""
        self.handlers['_errors'] = self._rotating_handler('errors.log', logging.ERROR)

    def _get_handler(self, component: Optional[str]) -> logging.Handler:
        """Get the appropriate handler for a component."""
        if component and component in self.handlers and component != '_errors':
            return self.handlers[component]
        return self.handlers[COMPONENT_SYSTEM]

    def isEnabledFor(self, level: int) -> bool:
        return level >= self.level

    def _log(self, level: int, message: str, **kwargs):
        """Internal logging method that routes to appropriate file."""
        if level < self.level:
            return
        entry = self._build_entry(level, message, **kwargs)
        record = logging.LogRecord(
            name=self.logger.name,
            level=level,
            pathname="",
            lineno=0,
            msg=json.dumps(entry, default=str),
            args=(),
            exc_info=None
        )

        with self.lock:
            handler = self._get_handler(kwargs.get('component'))
            if level >= handler.level:
                handler.emit(record)
            if level >= logging.ERROR:
                self.handlers['_errors'].emit(record)

    def close(self):
        """Flush and close every file handler."""
        with self.lock:
            for handler in set(self.handlers.values()):
                handler.close()


def _parse_level(level: Union[int, str, None]) -> int:
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(log_dir: Union[str, Path, None] = None,
                      level: Union[int, str, None] = None) -> StructuredLogger:
    """Install the global logger.

    With a ``log_dir`` events are written to per-component rotating files;
    without one the package logger keeps its ``NullHandler`` and only the
    level changes. Missing arguments are read from the ``logging`` config
    section.

    Returns:
        The logger now used by every component
    """
    from ..config import get_config

    config = get_config()
    if log_dir is None:
        log_dir = config.get('logging.log_dir')
    resolved_level = _parse_level(level if level is not None else config.get('logging.level'))

    previous = get_logger()
    if isinstance(previous, MultiFileLogger):
        previous.close()

    if log_dir:
        instance: StructuredLogger = MultiFileLogger(log_dir, resolved_level)
    else:
        instance = StructuredLogger(LOGGER_NAME)
    logging.getLogger(LOGGER_NAME).setLevel(resolved_level)
    set_logger(instance)

    instance.info("logging_configured",
                  component=COMPONENT_SYSTEM,
                  operation="configure_logging",
                  log_dir=str(log_dir) if log_dir else None,
                  log_level=logging.getLevelName(resolved_level))
    return instance
