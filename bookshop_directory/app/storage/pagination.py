"""
Paging loop for backends that cap the number of rows per request.

``paginate`` asks for page 0, 1, 2, ... with a fixed page size and an
offset of ``page * page_size`` until a page comes back short (end of
data) or ``max_pages`` pages have been fetched.  It keeps no state
between calls other than the offset and the accumulated rows, so it can
be exercised with a plain fake ``fetch_page`` coroutine.
"""

import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchPage = Callable[[int, int], Awaitable[Sequence[T]]]


async def paginate(fetch_page: FetchPage, page_size: int, max_pages: int) -> List[T]:
    """Fetch every page and return the rows concatenated in order.

    Parameters
    ----------
    fetch_page : Callable[[int, int], Awaitable[Sequence]]
        Called as ``fetch_page(offset, limit)``.
    page_size : int
        Rows requested per call.  Must be positive.
    max_pages : int
        Upper bound on the number of calls.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    if max_pages <= 0:
        raise ValueError("max_pages must be positive")

    rows: List[T] = []
    for page in range(max_pages):
        batch = await fetch_page(page * page_size, page_size)
        rows.extend(batch)
        if len(batch) < page_size:
            return rows
    logger.warning(
        "Stopped paging after %d pages of %d rows; results may be truncated",
        max_pages,
        page_size,
    )
    return rows
