"""Fluent query builder.

Predicates added with ``where`` (or one of the named operator methods) are
ANDed into the current group; ``or_`` / ``new_group`` start another group
that is ORed with the previous ones::

    spec = (QueryBuilder()
            .equals("name", "John Doe")
            .greater_than("age", 21)
            .or_()
            .prefix("email", "admin@")
            .limit(50)
            .sort(descending=True)
            .build())

    spec.to_wire()
    # {"query": [{"name": "John Doe", "age?gt": 21}, {"email?pfx": "admin@"}],
    #  "limit": 50, "sort": "desc"}
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..errors import BuilderValidationError, ConfigError
from ..utils.config import COMPONENT_QUERY, MAX_QUERY_LIMIT, SORT_DESCENDING, get_config
from ..utils.logging import get_smart_logger
from .conditions import ConditionGroup, GroupAccumulator, Operator, Predicate
from .pagination import QueryPage, collect_items, iterate_pages, parse_query_page

logger = get_smart_logger(COMPONENT_QUERY)

QUERY_PATH = "/query"


def max_limit() -> int:
    """Configured page size cap, never above the service maximum of 1000."""
    configured = get_config().max_limit
    if isinstance(configured, bool) or not isinstance(configured, int) or configured < 1:
        raise ConfigError(f"query.max_limit must be a positive integer, got {configured!r}")
    return min(configured, MAX_QUERY_LIMIT)


def validate_limit(limit: Any) -> int:
    """Return ``limit`` if it is an int in ``1..max_limit()``."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise BuilderValidationError(f"Limit must be an integer, got {limit!r}")
    cap = max_limit()
    if not 1 <= limit <= cap:
        raise BuilderValidationError(f"Limit must be between 1 and {cap}, got {limit}")
    return limit


def default_limit() -> int:
    """Configured default page size, clamped to ``max_limit()``."""
    configured = get_config().default_limit
    if isinstance(configured, int) and not isinstance(configured, bool):
        configured = min(configured, max_limit())
    return validate_limit(configured)


def validate_cursor(cursor: Any) -> Optional[str]:
    if cursor is not None and not isinstance(cursor, str):
        raise BuilderValidationError(f"Cursor must be a string, got {cursor!r}")
    return cursor or None


@dataclass(frozen=True)
class QuerySpec:
    """Immutable snapshot of a query."""
    groups: Tuple[ConditionGroup, ...] = field(default_factory=tuple)
    limit: int = MAX_QUERY_LIMIT
    sort_descending: bool = False
    last: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "groups", tuple(self.groups))
        validate_limit(self.limit)
        validate_cursor(self.last)

    @property
    def matches_all(self) -> bool:
        return all(group.is_empty() for group in self.groups)

    def with_cursor(self, cursor: Optional[str]) -> "QuerySpec":
        return replace(self, last=cursor)

    def to_wire(self) -> Dict[str, Any]:
        """Encode as the ``POST /query`` request body.

        Empty groups are left out; with no non-empty group the ``query``
        key is omitted and every item matches.
        """
        body: Dict[str, Any] = {}
        groups = [group.to_wire() for group in self.groups if not group.is_empty()]
        if groups:
            body["query"] = groups
        body["limit"] = self.limit
        if self.last is not None:
            body["last"] = self.last
        if self.sort_descending:
            body["sort"] = SORT_DESCENDING
        return body

    @classmethod
    def from_wire(cls, body: Dict[str, Any]) -> "QuerySpec":
        """Decode a request body produced by ``to_wire``."""
        if not isinstance(body, dict):
            raise BuilderValidationError(f"Query body must be an object, got {body!r}")
        query = body.get("query", [])
        if not isinstance(query, list):
            raise BuilderValidationError(f"'query' must be a list, got {query!r}")
        sort = body.get("sort")
        if sort not in (None, SORT_DESCENDING):
            raise BuilderValidationError(f"Unknown sort order: {sort!r}")
        return cls(
            groups=tuple(ConditionGroup.from_wire(obj) for obj in query),
            limit=body.get("limit", MAX_QUERY_LIMIT),
            sort_descending=sort == SORT_DESCENDING,
            last=body.get("last"),
        )


class QueryBuilder:
    """Accumulates condition groups and query options."""

    def __init__(self, transport=None, path: str = QUERY_PATH):
        self._transport = transport
        self._path = path
        self._groups: List[GroupAccumulator] = [GroupAccumulator()]
        self._limit = default_limit()
        self._sort_descending = False
        self._last: Optional[str] = None

    # Predicates

    def where(self, field: str, operator: Union[Operator, str], operand: Any) -> "QueryBuilder":
        """Add ``field <operator> operand`` to the current group.

        ``operator`` is an ``Operator`` or its name (``"greater_than"``).
        """
        if isinstance(operator, str):
            try:
                operator = Operator[operator.upper()]
            except KeyError:
                raise BuilderValidationError(f"Unknown operator: {operator!r}") from None
        self._groups[-1].add(Predicate(field, operator, operand))
        return self

    def equals(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.EQUALS, value)

    def not_equals(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.NOT_EQUALS, value)

    def contains(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.CONTAINS, value)

    def not_contains(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.NOT_CONTAINS, value)

    def range(self, field: str, low: Any, high: Any) -> "QueryBuilder":
        """Match ``low <= field <= high``."""
        return self.where(field, Operator.RANGE, (low, high))

    def greater_than(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.GREATER_THAN, value)

    def greater_than_or_equal(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.GREATER_THAN_OR_EQUAL, value)

    def less_than(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.LESS_THAN, value)

    def less_than_or_equal(self, field: str, value: Any) -> "QueryBuilder":
        return self.where(field, Operator.LESS_THAN_OR_EQUAL, value)

    def prefix(self, field: str, value: str) -> "QueryBuilder":
        return self.where(field, Operator.PREFIX, value)

    # Groups

    def new_group(self) -> "QueryBuilder":
        """Start a new group, ORed with the previous ones."""
        self._groups.append(GroupAccumulator())
        return self

    def or_(self, other: Union["QueryBuilder", ConditionGroup, None] = None) -> "QueryBuilder":
        """OR with a new group, or with the groups of ``other``.

        ``other`` may be another builder (each of its groups becomes its own
        branch) or a single ``ConditionGroup``. A fresh current group is
        opened afterwards.
        """
        if other is None:
            return self.new_group()

        if isinstance(other, QueryBuilder):
            groups = [acc.freeze() for acc in other._groups]
        elif isinstance(other, ConditionGroup):
            groups = [other]
        else:
            raise BuilderValidationError(
                f"Cannot OR with {type(other).__name__}; expected QueryBuilder or ConditionGroup")

        for group in groups:
            if group.is_empty():
                continue
            acc = GroupAccumulator()
            for predicate in group.predicates:
                acc.add(predicate)
            self._groups.append(acc)
        return self.new_group()

    # Options

    def limit(self, n: int) -> "QueryBuilder":
        """Page size, 1..1000."""
        self._limit = validate_limit(n)
        return self

    def sort(self, descending: bool = True) -> "QueryBuilder":
        self._sort_descending = bool(descending)
        return self

    def last(self, cursor: Optional[str]) -> "QueryBuilder":
        """Resume from an opaque cursor returned by an earlier page."""
        self._last = validate_cursor(cursor)
        return self

    def build(self) -> QuerySpec:
        """Snapshot the builder; later changes do not affect the result."""
        spec = QuerySpec(
            groups=tuple(acc.freeze() for acc in self._groups),
            limit=self._limit,
            sort_descending=self._sort_descending,
            last=self._last,
        )
        logger.debug("query_built",
                     groups=sum(1 for g in spec.groups if not g.is_empty()),
                     limit=spec.limit,
                     sort_descending=spec.sort_descending,
                     has_cursor=spec.last is not None)
        return spec

    # Execution

    def _require_transport(self):
        if self._transport is None:
            raise BuilderValidationError("Query builder is not bound to a transport")
        return self._transport

    def _fetch(self, spec: QuerySpec) -> QueryPage:
        transport = self._require_transport()
        payload = transport.send("POST", self._path, spec.to_wire())
        return parse_query_page(payload)

    def run(self) -> QueryPage:
        """Fetch one page."""
        spec = self.build()
        self._require_transport()
        page = self._fetch(spec)
        logger.info("query_page_fetched", size=page.size, has_more=page.has_more)
        return page

    def iter_pages(self) -> Iterator[QueryPage]:
        """Lazily fetch pages until the cursor is exhausted."""
        spec = self.build()
        self._require_transport()
        return iterate_pages(lambda cursor: self._fetch(spec.with_cursor(cursor)), spec.last)

    def run_until_end(self) -> List[Any]:
        """Fetch every page and return all items in order."""
        spec = self.build()
        self._require_transport()
        return collect_items(lambda cursor: self._fetch(spec.with_cursor(cursor)), spec.last)
