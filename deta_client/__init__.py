"""Client for Deta Base and Drive.

Builders turn filter predicates and field mutations into the service's
JSON grammar; the cursor loop follows result pages to the end.
"""

from .base import Base
from .deta import Deta
from .drive import Drive
from .errors import (
    BuilderValidationError,
    ConfigError,
    DetaError,
    EncodingError,
    PaginationProtocolError,
    TransportError,
)
from .query import ConditionGroup, Operator, Predicate, QueryBuilder, QueryPage, QuerySpec
from .records import Record
from .transport import RequestsTransport, Transport
from .update import UpdateBuilder, UpdateKind, UpdateOperation, UpdateSpec
from .utils.logging import configure_logging

__version__ = "0.1.0"

__all__ = [
    "Base",
    "Deta",
    "Drive",
    "Record",
    "QueryBuilder",
    "QuerySpec",
    "QueryPage",
    "ConditionGroup",
    "Operator",
    "Predicate",
    "UpdateBuilder",
    "UpdateSpec",
    "UpdateKind",
    "UpdateOperation",
    "Transport",
    "RequestsTransport",
    "configure_logging",
    "DetaError",
    "BuilderValidationError",
    "EncodingError",
    "TransportError",
    "PaginationProtocolError",
    "ConfigError",
]
