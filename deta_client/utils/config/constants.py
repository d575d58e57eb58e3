"""
Central constants for the Deta client.

Single source of truth for service endpoints, wire limits, environment
variable names and logging component names.
"""

# Service endpoints
DEFAULT_BASE_URL = "https://database.deta.sh/v1"
DEFAULT_DRIVE_URL = "https://drive.deta.sh/v1"
DEFAULT_USER_AGENT = "deta-client-python"
API_KEY_HEADER = "X-API-Key"

# Numeric constants
DEFAULT_HTTP_TIMEOUT = 30
MAX_QUERY_LIMIT = 1000
DEFAULT_QUERY_LIMIT = MAX_QUERY_LIMIT
MAX_PUT_ITEMS = 25
MAX_DELETE_FILES = 1000
DRIVE_CHUNK_SIZE = 10 * 1024 * 1024  # 10 MiB
ERROR_BODY_EXCERPT = 500

# Wire values
SORT_DESCENDING = "desc"

# Configuration
CONFIG_FILE_NAME = "deta_config.json"
ENV_PROJECT_KEY = "DETA_PROJECT_KEY"
ENV_HTTP_TIMEOUT = "DETA_HTTP_TIMEOUT"
ENV_BASE_URL = "DETA_BASE_URL"
ENV_DRIVE_URL = "DETA_DRIVE_URL"
ENV_LOG_LEVEL = "DETA_LOG_LEVEL"
ENV_LOG_DIR = "DETA_LOG_DIR"

# Logging components
COMPONENT_QUERY = "query"
COMPONENT_UPDATE = "update"
COMPONENT_TRANSPORT = "transport"
COMPONENT_BASE = "base"
COMPONENT_DRIVE = "drive"
COMPONENT_SYSTEM = "system"
COMPONENT_CONFIG = "config"
