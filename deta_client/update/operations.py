"""Update operation kinds and the immutable update snapshot."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from ..errors import BuilderValidationError
from ..values import JsonValue


class UpdateKind(Enum):
    """Field mutation kinds, valued by their wire key."""
    SET = "set"
    INCREMENT = "increment"
    APPEND = "append"
    PREPEND = "prepend"
    DELETE = "delete"


@dataclass(frozen=True)
class UpdateOperation:
    """One field mutation. ``value`` is None for deletes."""
    kind: UpdateKind
    field: str
    value: JsonValue = None


@dataclass(frozen=True)
class UpdateSpec:
    """Immutable set of mutations for one record key."""
    key: str
    operations: Tuple[UpdateOperation, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not isinstance(self.key, str) or not self.key:
            raise BuilderValidationError(f"Update key must be a non-empty string, got {self.key!r}")
        object.__setattr__(self, "operations", tuple(self.operations))
        if not self.operations:
            raise BuilderValidationError(f"Update for key {self.key!r} has no operations")

    def fields(self, kind: UpdateKind) -> List[str]:
        return [op.field for op in self.operations if op.kind is kind]

    def to_wire(self) -> Dict[str, Any]:
        """Encode as the ``PATCH /items/{key}`` request body.

        Kinds without operations are omitted.
        """
        body: Dict[str, Any] = {}
        for kind in UpdateKind:
            ops = [op for op in self.operations if op.kind is kind]
            if not ops:
                continue
            if kind is UpdateKind.DELETE:
                body[kind.value] = [op.field for op in ops]
            else:
                body[kind.value] = {op.field: op.value for op in ops}
        return body
