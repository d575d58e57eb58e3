"""Records stored with put/insert."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from .errors import BuilderValidationError
from .values import to_wire

Expiry = Union[datetime, int]


def _epoch_seconds(expires_at: Expiry) -> int:
    if isinstance(expires_at, datetime):
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return int(expires_at.timestamp())
    if isinstance(expires_at, bool) or not isinstance(expires_at, int):
        raise BuilderValidationError(
            f"expires_at must be a datetime or epoch seconds, got {expires_at!r}")
    return expires_at


@dataclass(frozen=True)
class Record:
    """An item to store.

    ``key`` is generated by the service when omitted. ``expires_at`` (a
    datetime, naive meaning UTC, or epoch seconds) and ``expires_in``
    (seconds from now) are mutually exclusive.
    """
    value: Any = None
    key: Optional[str] = None
    expires_at: Optional[Expiry] = None
    expires_in: Optional[int] = None

    def __post_init__(self):
        if self.key is not None and (not isinstance(self.key, str) or not self.key):
            raise BuilderValidationError(f"Record key must be a non-empty string, got {self.key!r}")
        if self.expires_at is not None and self.expires_in is not None:
            raise BuilderValidationError("expires_at and expires_in are mutually exclusive")
        if self.expires_at is not None:
            _epoch_seconds(self.expires_at)
        if self.expires_in is not None:
            if isinstance(self.expires_in, bool) or not isinstance(self.expires_in, int) \
                    or self.expires_in <= 0:
                raise BuilderValidationError(
                    f"expires_in must be a positive number of seconds, got {self.expires_in!r}")

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.key is not None:
            body["key"] = self.key
        if self.value is not None:
            body["value"] = to_wire(self.value, "$.value")
        if self.expires_at is not None:
            body["expires_at"] = _epoch_seconds(self.expires_at)
        if self.expires_in is not None:
            body["expires_in"] = self.expires_in
        return body
