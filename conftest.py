"""
Global pytest configuration and fixtures for the Deta client tests.

Fixtures are organized by purpose: isolation of process-wide state
(configuration and logger singletons) and a scripted transport that
stands in for the HTTP layer.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from deta_client.utils.config import set_config
from deta_client.utils.logging import logger as logger_module


# ============================================================================
# Isolation Fixtures
# ============================================================================

DETA_ENV_VARS = [
    "DETA_PROJECT_KEY",
    "DETA_HTTP_TIMEOUT",
    "DETA_BASE_URL",
    "DETA_DRIVE_URL",
    "DETA_LOG_LEVEL",
    "DETA_LOG_DIR",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Run every test without DETA_* variables, config file or configured logger."""
    for var in DETA_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    set_config(None)
    previous_logger = logger_module._logger
    package_logger = logging.getLogger(logger_module.LOGGER_NAME)
    previous_level = package_logger.level
    yield
    package_logger.setLevel(previous_level)
    current = logger_module._logger
    if current is not previous_logger and hasattr(current, "close"):
        current.close()
    logger_module._logger = previous_logger
    set_config(None)


# ============================================================================
# Transport Fixtures
# ============================================================================

class FakeTransport:
    """Transport double that replays scripted responses in order.

    A scripted response that is an exception instance is raised instead of
    returned. Every call is recorded in ``calls``.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *responses: Any) -> "FakeTransport":
        self.responses.extend(responses)
        return self

    def _next(self) -> Any:
        if not self.responses:
            raise AssertionError("FakeTransport ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def send(self, method, path, body=None, *, params=None, content=None, headers=None):
        self.calls.append({
            "method": method,
            "path": path,
            "body": body,
            "params": dict(params) if params else None,
            "content": content,
            "headers": headers,
        })
        return self._next()

    def download(self, path, *, params=None):
        self.calls.append({
            "method": "GET",
            "path": path,
            "body": None,
            "params": dict(params) if params else None,
            "content": None,
            "headers": None,
        })
        return self._next()


@pytest.fixture
def fake_transport():
    """Empty scripted transport; queue responses with ``.queue(...)``."""
    return FakeTransport()


def query_page(items, last=None):
    """Build a ``POST /query`` response body."""
    paging = {"size": len(items)}
    if last is not None:
        paging["last"] = last
    return {"items": list(items), "paging": paging}


def drive_page(names, last=None):
    """Build a ``GET /files`` response body."""
    paging = {"size": len(names)}
    if last is not None:
        paging["last"] = last
    return {"names": list(names), "paging": paging}


@pytest.fixture
def make_query_page():
    return query_page


@pytest.fixture
def make_drive_page():
    return drive_page
