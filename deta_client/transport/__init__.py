"""HTTP transports."""

from .base import Transport
from .requests_transport import RequestsTransport

__all__ = ["Transport", "RequestsTransport"]
