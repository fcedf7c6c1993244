"""Page-number pagination over GitHub listing endpoints.

GitHub listings take ``page`` and ``per_page`` query parameters and signal
the end of data with an empty page or a page shorter than requested. Every
paged collection the mirror reads goes through :func:`iter_pages` or
:func:`paginate`.

Usage:
    endpoint = Endpoint("/repos/acme/widget/pulls", {"state": "all"})
    pulls = await paginate(client.fetch_page, endpoint, per_page=100)
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

PageFetcher = Callable[["Endpoint", int, int], Awaitable[list[Any]]]
StopPredicate = Callable[[list[Any]], bool]


@dataclass(frozen=True)
class Endpoint:
    """A listing endpoint: path plus the static query parameters."""

    path: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def with_page(self, page: int, per_page: int) -> dict[str, Any]:
        """Build the query parameters for one page."""
        return {**self.params, "per_page": per_page, "page": page}


async def iter_pages(
    fetch_page: PageFetcher,
    endpoint: Endpoint,
    *,
    per_page: int = 100,
    max_items: int | None = None,
    max_pages: int | None = None,
    stop_when: StopPredicate | None = None,
) -> AsyncIterator[list[Any]]:
    """Yield successive pages starting at page 1.

    Stops after an empty page, a short page, once ``max_items`` items have
    been yielded (the last page is truncated), after ``max_pages`` pages, or
    when ``stop_when`` returns True for a page. A failing page request
    propagates and ends the iteration.

    Args:
        fetch_page: Callable returning the items of one page
        endpoint: Endpoint to list
        per_page: Requested page size
        max_items: Optional cap on total items
        max_pages: Optional cap on pages requested
        stop_when: Optional predicate evaluated on each yielded page

    Yields:
        Lists of raw items, in upstream order
    """
    if per_page < 1:
        raise ValueError("per_page must be at least 1")

    page = 1
    collected = 0
    while max_pages is None or page <= max_pages:
        items = await fetch_page(endpoint, page, per_page)
        if not items:
            return

        if max_items is not None and collected + len(items) >= max_items:
            yield items[: max_items - collected]
            return

        yield items
        collected += len(items)

        if len(items) < per_page:
            return
        if stop_when is not None and stop_when(items):
            return
        page += 1


async def paginate(
    fetch_page: PageFetcher,
    endpoint: Endpoint,
    *,
    per_page: int = 100,
    max_items: int | None = None,
    max_pages: int | None = None,
    stop_when: StopPredicate | None = None,
) -> list[Any]:
    """Return the ordered concatenation of every page of ``endpoint``.

    See :func:`iter_pages` for the termination rules.
    """
    results: list[Any] = []
    async for items in iter_pages(
        fetch_page,
        endpoint,
        per_page=per_page,
        max_items=max_items,
        max_pages=max_pages,
        stop_when=stop_when,
    ):
        results.extend(items)
    return results
