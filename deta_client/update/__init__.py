"""Update builder and operations."""

from .builder import UpdateBuilder
from .operations import UpdateKind, UpdateOperation, UpdateSpec

__all__ = ["UpdateBuilder", "UpdateKind", "UpdateOperation", "UpdateSpec"]
