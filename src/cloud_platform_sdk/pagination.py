"""Generic paging over collection results.

A resource client supplies the first page and a ``fetch_next`` callable
that turns a ``next_url`` into the following page; the helpers here only
walk the chain.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from .models import Link, Page

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Iterator

T = TypeVar("T")


def next_link(links: Iterable[Link | dict[str, Any]] | None) -> str | None:
    """Return the ``href`` of the ``rel="next"`` link, if present."""
    for link in links or ():
        if isinstance(link, dict):
            link = Link.model_validate(link)
        if link.rel == "next":
            return link.href
    return None


def iter_pages(
    first: Page[T],
    fetch_next: Callable[[str], Page[T]],
) -> Iterator[Page[T]]:
    """Yield ``first`` and every page that follows it."""
    page = first
    yield page
    while page.next_url:
        page = fetch_next(page.next_url)
        yield page


def iter_items(
    first: Page[T],
    fetch_next: Callable[[str], Page[T]],
) -> Iterator[T]:
    """Yield every item across all pages."""
    for page in iter_pages(first, fetch_next):
        yield from page.items


async def aiter_pages(
    first: Page[T],
    fetch_next: Callable[[str], Awaitable[Page[T]]],
) -> AsyncIterator[Page[T]]:
    """Yield ``first`` and every page that follows it."""
    page = first
    yield page
    while page.next_url:
        page = await fetch_next(page.next_url)
        yield page


async def aiter_items(
    first: Page[T],
    fetch_next: Callable[[str], Awaitable[Page[T]]],
) -> AsyncIterator[T]:
    """Yield every item across all pages."""
    async for page in aiter_pages(first, fetch_next):
        for item in page.items:
            yield item
