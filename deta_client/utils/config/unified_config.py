"""Unified configuration system with clear precedence and secrets handling."""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ...errors import ConfigError
from .constants import (
    COMPONENT_CONFIG,
    CONFIG_FILE_NAME,
    DEFAULT_BASE_URL,
    DEFAULT_DRIVE_URL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_QUERY_LIMIT,
    DEFAULT_USER_AGENT,
    DRIVE_CHUNK_SIZE,
    ENV_BASE_URL,
    ENV_DRIVE_URL,
    ENV_HTTP_TIMEOUT,
    ENV_LOG_DIR,
    ENV_LOG_LEVEL,
    ENV_PROJECT_KEY,
    MAX_QUERY_LIMIT,
)

# Import logger lazily to avoid circular imports
logger = None


def _get_logger():
    """Lazy logger initialization to avoid circular imports."""
    global logger
    if logger is None:
        from ..logging import get_smart_logger
        logger = get_smart_logger(COMPONENT_CONFIG)
    return logger


class UnifiedConfig:
    """Unified configuration with clear precedence:

    Precedence (highest to lowest):
    1. Environment variables
    2. deta_config.json
    3. Code defaults

    Secrets are handled separately and only come from environment variables.
    """

    def __init__(self, config_file: Union[str, Path] = CONFIG_FILE_NAME):
        self._config_file = config_file
        self._config: Dict[str, Any] = {}
        self._secrets: Dict[str, str] = {}
        self._defaults = self._get_code_defaults()

        self._load_json_config()
        self._load_secrets()
        self._apply_env_overrides()

        _get_logger().debug("unified_config_loaded",
                            config_file=str(config_file),
                            secrets_loaded=len(self._secrets),
                            config_sections=list(self._config.keys()))

    def _get_code_defaults(self) -> Dict[str, Any]:
        """Code defaults as fallback."""
        return {
            "http": {
                "timeout": DEFAULT_HTTP_TIMEOUT,
                "base_url": DEFAULT_BASE_URL,
                "drive_url": DEFAULT_DRIVE_URL,
                "user_agent": DEFAULT_USER_AGENT,
            },
            "query": {
                "default_limit": DEFAULT_QUERY_LIMIT,
                "max_limit": MAX_QUERY_LIMIT,
            },
            "drive": {
                "chunk_size": DRIVE_CHUNK_SIZE,
            },
            "logging": {
                "level": "INFO",
                "log_dir": None,
            },
        }

    def _load_json_config(self):
        """Load configuration from JSON file."""
        config_path = Path(self._config_file)
        if not config_path.exists():
            _get_logger().debug("config_file_not_found",
                                path=str(config_path),
                                using_defaults=True)
            self._config = copy.deepcopy(self._defaults)
            return

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = json.load(f)
        except (OSError, ValueError) as e:
            _get_logger().error("config_file_load_error",
                                path=str(config_path),
                                error=str(e),
                                error_type=type(e).__name__)
            raise ConfigError(f"Cannot load config file {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")

        self._config = self._deep_merge(self._defaults, file_config)
        _get_logger().info("config_file_loaded",
                           path=str(config_path),
                           sections=list(file_config.keys()))

    def _load_secrets(self):
        """Load sensitive values from environment only."""
        secret_mappings = {
            'project_key': ENV_PROJECT_KEY,
        }

        for key, env_var in secret_mappings.items():
            value = os.getenv(env_var)
            if value:
                self._secrets[key] = value

    def _apply_env_overrides(self):
        """Apply environment variable overrides for non-sensitive config."""
        env_mappings = {
            ENV_HTTP_TIMEOUT: 'http.timeout',
            ENV_BASE_URL: 'http.base_url',
            ENV_DRIVE_URL: 'http.drive_url',
            ENV_LOG_LEVEL: 'logging.level',
            ENV_LOG_DIR: 'logging.log_dir',
        }

        for env_var, config_path in env_mappings.items():
            value = os.getenv(env_var)
            if value is not None:
                converted_value = self._convert_env_value(value)
                self._set_nested_value(self._config, config_path, converted_value)
                _get_logger().debug("env_override_applied",
                                    env_var=env_var,
                                    config_path=config_path)

    def _convert_env_value(self, value: str) -> Union[str, int, float, bool]:
        """Convert environment variable string to appropriate type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'

        try:
            if '.' not in value:
                return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries."""
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _set_nested_value(self, config: Dict, path: str, value: Any):
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            path: Dot-separated path like 'http.timeout'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = path.split('.')
        current = self._config

        try:
            for key in keys:
                current = current[key]
            return current
        except (KeyError, TypeError):
            return default

    def get_secret(self, key: str, required: bool = True) -> Optional[str]:
        """Get secret value from environment.

        Raises:
            ConfigError: If required secret is missing
        """
        value = self._secrets.get(key)

        if value is None and required:
            raise ConfigError(f"Required secret '{key}' not found in environment variables")

        return value

    def has_secret(self, key: str) -> bool:
        """Check if secret exists without exposing value."""
        return key in self._secrets

    # Property shortcuts for common values
    @property
    def http_timeout(self) -> float:
        return self.get('http.timeout', DEFAULT_HTTP_TIMEOUT)

    @property
    def base_url(self) -> str:
        return self.get('http.base_url', DEFAULT_BASE_URL)

    @property
    def drive_url(self) -> str:
        return self.get('http.drive_url', DEFAULT_DRIVE_URL)

    @property
    def user_agent(self) -> str:
        return self.get('http.user_agent', DEFAULT_USER_AGENT)

    @property
    def default_limit(self) -> int:
        return self.get('query.default_limit', DEFAULT_QUERY_LIMIT)

    @property
    def max_limit(self) -> int:
        return self.get('query.max_limit', MAX_QUERY_LIMIT)

    @property
    def chunk_size(self) -> int:
        return self.get('drive.chunk_size', DRIVE_CHUNK_SIZE)

    @property
    def log_level(self) -> str:
        return self.get('logging.level', 'INFO')

    @property
    def log_dir(self) -> Optional[str]:
        return self.get('logging.log_dir')


# Singleton instance, created on first use
_config: Optional[UnifiedConfig] = None


def get_config(reload: bool = False) -> UnifiedConfig:
    """Get the process-wide configuration.

    Args:
        reload: Re-read the config file and environment
    """
    global _config
    if _config is None or reload:
        _config = UnifiedConfig()
    return _config


def set_config(instance: Optional[UnifiedConfig]) -> None:
    """Replace (or with None, drop) the process-wide configuration."""
    global _config
    _config = instance
