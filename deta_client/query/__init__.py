"""Query builder, predicates and the page loop."""

from .builder import QueryBuilder, QuerySpec
from .conditions import ConditionGroup, Operator, Predicate
from .pagination import QueryPage, collect_items, iterate_pages

__all__ = [
    "QueryBuilder",
    "QuerySpec",
    "ConditionGroup",
    "Operator",
    "Predicate",
    "QueryPage",
    "collect_items",
    "iterate_pages",
]
