"""Fluent builder for partial record updates.

Accumulation rules per field:

- ``set``: last write wins
- ``delete``: deduplicated, first-call order kept
- ``increment``: deltas are summed
- ``append``: values accumulate in call order
- ``prepend``: each call goes in front of the previous ones

A field can only be used with one kind per builder.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..errors import BuilderValidationError
from ..query.conditions import validate_field
from ..utils.config import COMPONENT_UPDATE
from ..utils.logging import get_smart_logger
from ..values import is_number, to_wire
from .operations import UpdateKind, UpdateOperation, UpdateSpec

logger = get_smart_logger(COMPONENT_UPDATE)


def _elements(value: Any, path: str) -> List[Any]:
    """Sequence values contribute their elements, anything else itself."""
    encoded = to_wire(value, path)
    if isinstance(value, (list, tuple)):
        return list(encoded)
    return [encoded]


class UpdateBuilder:
    """Accumulates mutations for one record key."""

    def __init__(self, key: str, transport=None):
        if not isinstance(key, str) or not key:
            raise BuilderValidationError(f"Update key must be a non-empty string, got {key!r}")
        self.key = key
        self._transport = transport
        self._kinds: Dict[str, UpdateKind] = {}
        self._values: Dict[str, Any] = {}

    def _claim(self, name: str, kind: UpdateKind) -> bool:
        """Register ``name`` under ``kind``; True if it was already there."""
        validate_field(name)
        existing = self._kinds.get(name)
        if existing is None:
            self._kinds[name] = kind
            return False
        if existing is not kind:
            raise BuilderValidationError(
                f"Field '{name}' already has a '{existing.value}' operation; "
                f"cannot also '{kind.value}' it")
        return True

    def set(self, field: str, value: Any) -> "UpdateBuilder":
        """Overwrite ``field`` with ``value``."""
        encoded = to_wire(value, f"$.{field}")
        self._claim(field, UpdateKind.SET)
        self._values[field] = encoded
        return self

    def delete(self, *fields: str) -> "UpdateBuilder":
        """Remove ``fields`` from the record."""
        if not fields:
            raise BuilderValidationError("delete() needs at least one field")
        for name in fields:
            validate_field(name)
            existing = self._kinds.get(name)
            if existing is not None and existing is not UpdateKind.DELETE:
                raise BuilderValidationError(
                    f"Field '{name}' already has a '{existing.value}' operation; cannot also delete it")
        for name in fields:
            self._claim(name, UpdateKind.DELETE)
        return self

    def increment(self, field: str, delta: Any = 1) -> "UpdateBuilder":
        """Add ``delta`` (negative to decrement) to a numeric field."""
        if not is_number(delta):
            raise BuilderValidationError(f"Increment delta must be a number, got {delta!r}")
        to_wire(delta, f"$.{field}")
        if self._claim(field, UpdateKind.INCREMENT):
            self._values[field] = to_wire(self._values[field] + delta, f"$.{field}")
        else:
            self._values[field] = delta
        return self

    def append(self, field: str, value: Any) -> "UpdateBuilder":
        """Add ``value`` (or its elements) to the end of a list field."""
        elements = _elements(value, f"$.{field}")
        if self._claim(field, UpdateKind.APPEND):
            self._values[field] = self._values[field] + elements
        else:
            self._values[field] = elements
        return self

    def prepend(self, field: str, value: Any) -> "UpdateBuilder":
        """Add ``value`` (or its elements) to the front of a list field."""
        elements = _elements(value, f"$.{field}")
        if self._claim(field, UpdateKind.PREPEND):
            self._values[field] = elements + self._values[field]
        else:
            self._values[field] = elements
        return self

    def build(self) -> UpdateSpec:
        """Snapshot the accumulated operations."""
        if not self._kinds:
            raise BuilderValidationError(f"Update for key {self.key!r} has no operations")
        operations = tuple(
            UpdateOperation(kind, name, None if kind is UpdateKind.DELETE else _copy(self._values[name]))
            for name, kind in self._kinds.items()
        )
        spec = UpdateSpec(self.key, operations)
        logger.debug("update_built",
                     key=self.key,
                     operations={kind.value: len(spec.fields(kind)) for kind in UpdateKind})
        return spec

    def run(self) -> Optional[Any]:
        """Send the update as ``PATCH /items/{key}``."""
        spec = self.build()
        if self._transport is None:
            raise BuilderValidationError("Update builder is not bound to a transport")
        path = f"/items/{quote(self.key, safe='')}"
        result = self._transport.send("PATCH", path, spec.to_wire())
        logger.info("update_applied", key=self.key, fields=len(spec.operations))
        return result


def _copy(value: Any) -> Any:
    if isinstance(value, list):
        return [_copy(v) for v in value]
    if isinstance(value, dict):
        return {k: _copy(v) for k, v in value.items()}
    return value
