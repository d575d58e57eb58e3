"""Base: a named key-value/document collection."""

from typing import Any, Iterable, List, Mapping, Optional, Union
from urllib.parse import quote

from .errors import BuilderValidationError
from .query import QueryBuilder, collect_items
from .query.pagination import parse_query_page
from .records import Record
from .update import UpdateBuilder
from .utils.config import COMPONENT_BASE, MAX_PUT_ITEMS
from .utils.logging import get_smart_logger

logger = get_smart_logger(COMPONENT_BASE)


def _item_path(key: str) -> str:
    if not isinstance(key, str) or not key:
        raise BuilderValidationError(f"Item key must be a non-empty string, got {key!r}")
    return f"/items/{quote(key, safe='')}"


def _as_record(item: Union[Record, Any]) -> Record:
    return item if isinstance(item, Record) else Record(value=item)


class Base:
    """Item operations against one Base.

    ``transport`` is rooted at ``<base_url>/<project_id>/<name>``.
    """

    def __init__(self, name: str, transport):
        if not isinstance(name, str) or not name:
            raise BuilderValidationError(f"Base name must be a non-empty string, got {name!r}")
        self.name = name
        self.transport = transport

    def __repr__(self) -> str:
        return f"Base(name={self.name!r})"

    def get(self, key: str) -> Any:
        """Fetch one item by key."""
        path = _item_path(key)
        return self.transport.send("GET", path)

    def put(self, records: Union[Record, Iterable[Record]]) -> Any:
        """Upsert up to 25 records in one request.

        Plain values are wrapped in a ``Record`` without key. A single
        ``Record``, mapping or string is one item, never a sequence of items.
        """
        if isinstance(records, (Record, Mapping, str, bytes)) or not isinstance(records, Iterable):
            records = [records]
        items = [_as_record(r).to_wire() for r in records]
        if not items:
            raise BuilderValidationError("put() needs at least one record")
        if len(items) > MAX_PUT_ITEMS:
            raise BuilderValidationError(
                f"put() accepts at most {MAX_PUT_ITEMS} records, got {len(items)}")
        result = self.transport.send("PUT", "/items", {"items": items})
        logger.info("base_put", base=self.name, items=len(items))
        return result

    def insert(self, record: Union[Record, Any]) -> Any:
        """Create a record; the service rejects an existing key."""
        item = _as_record(record).to_wire()
        result = self.transport.send("POST", "/items", {"item": item})
        logger.info("base_insert", base=self.name, has_key="key" in item)
        return result

    def delete(self, key: str) -> Any:
        """Delete one item by key."""
        path = _item_path(key)
        result = self.transport.send("DELETE", path)
        logger.info("base_delete", base=self.name)
        return result

    def update(self, key: str) -> UpdateBuilder:
        """Return an update builder for ``key`` bound to this Base."""
        return UpdateBuilder(key, transport=self.transport)

    def query(self) -> QueryBuilder:
        """Return a query builder bound to this Base."""
        return QueryBuilder(transport=self.transport)

    def fetch_all(self, builder: Optional[QueryBuilder] = None) -> List[Any]:
        """Run ``builder`` (match-all when omitted) through every page."""
        spec = (builder or QueryBuilder()).build()

        def fetch(cursor):
            payload = self.transport.send("POST", "/query", spec.with_cursor(cursor).to_wire())
            return parse_query_page(payload)

        items = collect_items(fetch, spec.last)
        logger.info("base_fetch_all", base=self.name, total_items=len(items))
        return items
