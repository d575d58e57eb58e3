"""Project entry point."""

from typing import Optional

from dotenv import load_dotenv

from .base import Base
from .drive import Drive
from .errors import ConfigError
from .transport import RequestsTransport
from .utils.config import COMPONENT_SYSTEM, get_config
from .utils.logging import get_smart_logger

logger = get_smart_logger(COMPONENT_SYSTEM)


def parse_project_key(project_key: str) -> str:
    """Return the project id of a ``<project_id>_<secret>`` key."""
    if not isinstance(project_key, str):
        raise ConfigError("Project key must be a string")
    project_id, sep, secret = project_key.partition("_")
    if not sep or not project_id or not secret:
        raise ConfigError("Project key must look like '<project_id>_<secret>'")
    return project_id


class Deta:
    """Creates Base and Drive clients for one project."""

    def __init__(self, project_key: str, timeout: Optional[float] = None):
        self.project_id = parse_project_key(project_key)
        self._project_key = project_key
        self._timeout = timeout
        logger.info("deta_client_created", project_id=self.project_id)

    def __repr__(self) -> str:
        return f"Deta(project_id={self.project_id!r})"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **kwargs) -> "Deta":
        """Build from ``DETA_PROJECT_KEY``, reading a ``.env`` file first."""
        load_dotenv(dotenv_path)
        config = get_config(reload=True)
        return cls(config.get_secret('project_key'), **kwargs)

    def _transport(self, root_url: str, name: str) -> RequestsTransport:
        return RequestsTransport(f"{root_url.rstrip('/')}/{self.project_id}/{name}",
                                 self._project_key, timeout=self._timeout)

    def base(self, name: str) -> Base:
        return Base(name, self._transport(get_config().base_url, name))

    def drive(self, name: str) -> Drive:
        return Drive(name, self._transport(get_config().drive_url, name))
