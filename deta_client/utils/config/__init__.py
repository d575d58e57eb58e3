"""Layered configuration for the Deta client."""

from ...errors import ConfigError
from .unified_config import UnifiedConfig, get_config, set_config

# Import all constants (star import acceptable for config constants)
from .constants import *  # noqa: F403

__all__ = [
    'UnifiedConfig',
    'ConfigError',
    'get_config',
    'set_config',
]
