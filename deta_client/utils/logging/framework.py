"""Component-bound loggers.

``SmartLogger`` stamps every event with its component and forwards to
whichever global logger is installed at call time, so loggers created at
import time follow a later ``configure_logging``.
"""

import inspect
import time
import uuid
from contextlib import contextmanager
from typing import Optional

from .logger import get_logger


def _get_component_from_module(module_name: str) -> str:
    """Auto-detect component from module path."""
    component_map = {
        'deta_client.query': 'query',
        'deta_client.update': 'update',
        'deta_client.transport': 'transport',
        'deta_client.drive': 'drive',
        'deta_client.base': 'base',
        'deta_client.utils.config': 'config',
    }
    for pattern, component in component_map.items():
        if module_name.startswith(pattern):
            return component
    return 'system'


class SmartLogger:
    """Logger that injects its component into every event."""

    def __init__(self, component: Optional[str] = None, auto_detect: bool = True):
        """Initialize smart logger.

        Args:
            component: Explicit component name
            auto_detect: Whether to auto-detect component from caller
        """
        if component:
            self._component = component
        elif auto_detect:
            frame = inspect.currentframe()
            try:
                caller_frame = frame.f_back
                module_name = caller_frame.f_globals.get('__name__', 'unknown')
                self._component = _get_component_from_module(module_name)
            finally:
                del frame
        else:
            self._component = 'system'

    @property
    def component(self) -> str:
        return self._component

    def _log(self, level: str, message: str, **kwargs):
        kwargs.setdefault('component', self._component)
        getattr(get_logger(), level)(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with component."""
        self._log('info', message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with component."""
        self._log('error', message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with component."""
        self._log('warning', message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with component."""
        self._log('debug', message, **kwargs)

    def isEnabledFor(self, level: int) -> bool:
        return get_logger().isEnabledFor(level)


def get_smart_logger(component: Optional[str] = None) -> SmartLogger:
    """Get a smart logger instance with optional component override.

    Args:
        component: Component name (auto-detected if not provided)
    """
    if component:
        return SmartLogger(component)
    frame = inspect.currentframe()
    try:
        module_name = frame.f_back.f_globals.get('__name__', 'unknown')
    finally:
        del frame
    return SmartLogger(_get_component_from_module(module_name))


@contextmanager
def log_operation(component: str, operation: str,
                  correlation_id: Optional[str] = None, **context):
    """Scope a multi-request operation under one correlation ID.

    Every event logged inside the block carries the ID. An enclosing
    operation's ID is reused, so nested operations stay correlated.
    Logs ``<operation>_started`` and then ``<operation>_completed`` or
    ``<operation>_failed`` (at WARNING; the failure itself is logged where
    it was raised).

    Yields:
        The correlation ID in effect
    """
    structured = get_logger()
    previous = structured._get_correlation_id()
    correlation_id = correlation_id or previous or str(uuid.uuid4())[:8]
    structured.set_correlation_id(correlation_id)
    op_logger = SmartLogger(component)
    start_time = time.time()

    try:
        op_logger.info(f"{operation}_started", operation=operation, **context)
        yield correlation_id
    except Exception as e:
        op_logger.warning(f"{operation}_failed",
                          operation=operation,
                          duration_seconds=round(time.time() - start_time, 3),
                          error_type=type(e).__name__,
                          **context)
        raise
    else:
        op_logger.info(f"{operation}_completed",
                       operation=operation,
                       duration_seconds=round(time.time() - start_time, 3),
                       **context)
    finally:
        if previous:
            structured.set_correlation_id(previous)
        else:
            structured.clear_correlation_id()
