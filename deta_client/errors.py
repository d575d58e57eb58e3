"""Deta client exceptions"""

from typing import Any, Optional


class DetaError(Exception):
    """Base exception for all client errors"""
    pass


class BuilderValidationError(DetaError):
    """Invalid builder input, raised before any request is sent"""
    pass


class EncodingError(DetaError):
    """Value that cannot be represented in the JSON wire grammar"""

    def __init__(self, message: str, path: str = "$"):
        self.path = path
        super().__init__(f"{message} (at {path})")


class TransportError(DetaError):
    """Failure reported by the HTTP collaborator"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Any = None, method: Optional[str] = None,
                 path: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        super().__init__(message)


class PaginationProtocolError(DetaError):
    """Response does not match the expected page shape"""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class ConfigError(DetaError):
    """Configuration-related errors."""
    pass
