"""Transport protocol the builders and facades talk to."""

from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Sends one HTTP request relative to a service base URL.

    Implementations raise ``TransportError`` for network failures, non-2xx
    statuses and undecodable response bodies. They never retry.
    """

    def send(self, method: str, path: str, body: Any = None, *,
             params: Optional[Mapping[str, Any]] = None,
             content: Optional[bytes] = None,
             headers: Optional[Dict[str, str]] = None) -> Any:
        """Send a request and return the decoded JSON response (or None)."""
        ...

    def download(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """GET ``path`` and return the raw response body."""
        ...
