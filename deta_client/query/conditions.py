"""Filter predicates and condition groups.

A ``Predicate`` is one ``field <operator> operand`` test. A
``ConditionGroup`` ANDs its predicates and encodes to a single JSON object
whose keys are ``<field>`` or ``<field>?<suffix>``. Groups are ORed by the
query builder.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

from ..errors import BuilderValidationError
from ..values import JsonObject, JsonValue, ensure_encodable, is_number, to_wire

SUFFIX_SEPARATOR = "?"


class Operator(Enum):
    """Filter operators and their wire suffixes."""
    EQUALS = ""
    NOT_EQUALS = "ne"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    RANGE = "range"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    PREFIX = "pfx"

    @property
    def suffix(self) -> str:
        return self.value

    @classmethod
    def from_suffix(cls, suffix: str) -> "Operator":
        for op in cls:
            if op.value == suffix:
                return op
        raise BuilderValidationError(f"Unknown operator suffix: {suffix!r}")


ORDERING_OPERATORS = frozenset({
    Operator.GREATER_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN,
    Operator.LESS_THAN_OR_EQUAL,
})


def _is_orderable(value: Any) -> bool:
    return is_number(value) or isinstance(value, str)


def validate_field(name: Any) -> str:
    """Return ``name`` if it is a non-empty string."""
    if not isinstance(name, str) or not name:
        raise BuilderValidationError(f"Field name must be a non-empty string, got {name!r}")
    return name


def _validate_range(operand: Any) -> Tuple[Any, Any]:
    if not isinstance(operand, (list, tuple)) or len(operand) != 2:
        raise BuilderValidationError(
            f"Range operand must be a pair [low, high], got {operand!r}")
    low, high = operand
    both_numbers = is_number(low) and is_number(high)
    both_strings = isinstance(low, str) and isinstance(high, str)
    if not (both_numbers or both_strings):
        raise BuilderValidationError(
            f"Range bounds must both be numbers or both be strings, got {low!r}, {high!r}")
    ensure_encodable(low)
    ensure_encodable(high)
    if low > high:
        raise BuilderValidationError(f"Range low bound {low!r} exceeds high bound {high!r}")
    return low, high


def validate_operand(operator: Operator, operand: Any) -> Any:
    """Check ``operand`` against ``operator`` and return its stored form.

    Range operands are stored as a ``(low, high)`` tuple; every other
    operand is stored as given.

    Raises:
        BuilderValidationError: operand shape does not fit the operator
        EncodingError: operand is outside the value model
    """
    if not isinstance(operator, Operator):
        raise BuilderValidationError(f"Unknown operator: {operator!r}")

    if operator is Operator.RANGE:
        return _validate_range(operand)

    if isinstance(operand, tuple):
        raise BuilderValidationError(
            f"Operator '{operator.name.lower()}' takes a single value, got tuple {operand!r}")
    if operator in ORDERING_OPERATORS and not _is_orderable(operand):
        raise BuilderValidationError(
            f"Operator '{operator.name.lower()}' needs a number or string, got {operand!r}")
    if operator is Operator.PREFIX and not isinstance(operand, str):
        raise BuilderValidationError(f"Prefix operand must be a string, got {operand!r}")

    ensure_encodable(operand)
    return operand


@dataclass(frozen=True)
class Predicate:
    """A single ``field <operator> operand`` test."""
    field: str
    operator: Operator
    operand: Any

    def __post_init__(self):
        validate_field(self.field)
        if self.split_wire_key(self.field)[1] is not Operator.EQUALS:
            raise BuilderValidationError(
                f"Field '{self.field}' ends in an operator suffix and would be misread")
        object.__setattr__(self, "operand", validate_operand(self.operator, self.operand))

    @property
    def wire_key(self) -> str:
        if self.operator is Operator.EQUALS:
            return self.field
        return f"{self.field}{SUFFIX_SEPARATOR}{self.operator.suffix}"

    def wire_value(self) -> JsonValue:
        if self.operator is Operator.RANGE:
            low, high = self.operand
            return [low, high]
        return to_wire(self.operand)

    @staticmethod
    def split_wire_key(key: str) -> Tuple[str, Operator]:
        """Split ``field?suffix`` into its field and operator.

        The last ``?`` separates the suffix, and only when what follows is
        a known suffix; otherwise the whole key is an equality field.
        """
        head, sep, tail = key.rpartition(SUFFIX_SEPARATOR)
        if sep and head and tail:
            for op in Operator:
                if op is not Operator.EQUALS and op.suffix == tail:
                    return head, op
        return key, Operator.EQUALS

    @classmethod
    def from_wire_key(cls, key: str, value: Any) -> "Predicate":
        name, op = cls.split_wire_key(key)
        if op is Operator.RANGE and isinstance(value, list):
            value = tuple(value)
        return cls(name, op, value)


@dataclass(frozen=True)
class ConditionGroup:
    """Predicates joined by AND."""
    predicates: Tuple[Predicate, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "predicates", tuple(self.predicates))
        seen = set()
        for predicate in self.predicates:
            if predicate.wire_key in seen:
                raise BuilderValidationError(
                    f"Duplicate condition '{predicate.wire_key}' in one group")
            seen.add(predicate.wire_key)

    def __len__(self) -> int:
        return len(self.predicates)

    def is_empty(self) -> bool:
        return not self.predicates

    def to_wire(self) -> JsonObject:
        return {p.wire_key: p.wire_value() for p in self.predicates}

    @classmethod
    def from_wire(cls, obj: Dict[str, Any]) -> "ConditionGroup":
        if not isinstance(obj, dict):
            raise BuilderValidationError(f"Condition group must be an object, got {obj!r}")
        return cls(tuple(Predicate.from_wire_key(k, v) for k, v in obj.items()))


class GroupAccumulator:
    """Mutable predicate list for the group currently being built."""

    def __init__(self):
        self._predicates: List[Predicate] = []
        self._keys = set()

    def add(self, predicate: Predicate) -> None:
        if predicate.wire_key in self._keys:
            raise BuilderValidationError(
                f"Duplicate condition '{predicate.wire_key}' in one group")
        self._keys.add(predicate.wire_key)
        self._predicates.append(predicate)

    def is_empty(self) -> bool:
        return not self._predicates

    def freeze(self) -> ConditionGroup:
        return ConditionGroup(tuple(self._predicates))
