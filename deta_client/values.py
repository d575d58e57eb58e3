"""JSON-like value model shared by records, operands and update payloads.

Values are plain Python objects: ``None``, ``bool``, ``int``, ``float``,
``str``, lists (or tuples) of values and string-keyed dicts of values.
``to_wire`` checks a value and returns a fresh JSON-ready copy; it never
coerces unsupported input.
"""

import math
from typing import Any, Dict, List, Union

from .errors import EncodingError

JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, List["JsonValue"], Dict[str, "JsonValue"]]
JsonObject = Dict[str, JsonValue]


def is_number(value: Any) -> bool:
    """True for int/float values, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_wire(value: Any, path: str = "$") -> JsonValue:
    """Validate ``value`` and return its JSON representation.

    Raises:
        EncodingError: on NaN/Infinity, non-string mapping keys or any
            type outside the value model.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise EncodingError(f"non-finite number {value!r} is not representable", path)
        return value
    if isinstance(value, (list, tuple)):
        return [to_wire(item, f"{path}[{i}]") for i, item in enumerate(value)]
    if isinstance(value, dict):
        out: Dict[str, JsonValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodingError(f"mapping key {key!r} is not a string", path)
            out[key] = to_wire(item, f"{path}.{key}")
        return out
    raise EncodingError(f"unsupported type {type(value).__name__}", path)


def ensure_encodable(value: Any, path: str = "$") -> None:
    """Raise EncodingError if ``value`` is outside the value model."""
    to_wire(value, path)
