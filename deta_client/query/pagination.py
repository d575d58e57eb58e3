"""Cursor-driven page loop shared by Base queries and Drive listings."""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Tuple

from ..errors import PaginationProtocolError
from ..schemas import DriveListResponse, QueryResponse, validate_payload
from ..utils.config import COMPONENT_QUERY
from ..utils.logging import get_smart_logger, log_operation

logger = get_smart_logger(COMPONENT_QUERY)


@dataclass(frozen=True)
class QueryPage:
    """One page of results and the cursor for the next one."""
    items: Tuple[Any, ...] = field(default_factory=tuple)
    last: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.last is not None


def parse_query_page(payload: Any) -> QueryPage:
    """Build a QueryPage from a ``POST /query`` response."""
    response = validate_payload(QueryResponse, payload)
    return QueryPage(items=tuple(response.items), last=response.paging.last)


def parse_drive_page(payload: Any) -> QueryPage:
    """Build a QueryPage of file names from a ``GET /files`` response."""
    response = validate_payload(DriveListResponse, payload)
    return QueryPage(items=tuple(response.names), last=response.paging.last)


def iterate_pages(fetch: Callable[[Optional[str]], QueryPage],
                  start: Optional[str] = None,
                  operation: str = "query") -> Iterator[QueryPage]:
    """Yield pages until the service stops returning a cursor.

    ``fetch`` is called with the cursor to resume from (``start`` for the
    first request) and returns one page. Requests are strictly sequential.

    Raises:
        PaginationProtocolError: the service returned the cursor it was
            just given, which would never terminate
    """
    cursor = start
    page_number = 0
    while True:
        page = fetch(cursor)
        page_number += 1
        logger.debug("page_fetched",
                     operation=operation,
                     page=page_number,
                     size=page.size,
                     has_more=page.has_more)
        yield page
        if page.last is None:
            return
        if page.last == cursor:
            logger.error("pagination_cursor_repeated",
                         operation=operation,
                         page=page_number,
                         cursor=cursor)
            raise PaginationProtocolError(
                f"Service returned the same cursor {cursor!r} twice")
        cursor = page.last


def collect_items(fetch: Callable[[Optional[str]], QueryPage],
                  start: Optional[str] = None,
                  operation: str = "query") -> List[Any]:
    """Run the page loop to the end and concatenate every page's items."""
    items: List[Any] = []
    pages = 0
    with log_operation(COMPONENT_QUERY, f"{operation}_fetch_all"):
        for page in iterate_pages(fetch, start, operation):
            items.extend(page.items)
            pages += 1
    logger.info("pagination_exhausted",
                operation=operation,
                pages=pages,
                total_items=len(items))
    return items
