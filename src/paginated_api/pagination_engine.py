"""
PaginationEngine module driving a PageFetcher through cursor pagination

A stream fetches nothing until the first item is pulled, then requests one page
at a time as its buffer drains. Streams are single-pass: call stream() again to
restart from the beginning.

Adjacent pages may both contain the boundary item whose id became the cursor.
Those duplicates are passed through unless unique_by is set.
"""

import logging
from collections import deque
from enum import Enum
from typing import Dict, Any, Deque, Hashable, Iterable, Iterator, Optional, Set
from dataclasses import dataclass, field

from .api_errors import APIError, PaginationError
from .page_fetcher import Page, PageFetcher, PageParams

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100


@dataclass(frozen=True)
class PaginationOptions:
    """Options controlling a single traversal"""
    limit: int = DEFAULT_LIMIT
    starting_after: Optional[str] = None
    unique_by: Optional[str] = None
    cursor_field: str = 'id'

    def __post_init__(self):
        if not isinstance(self.limit, int) or self.limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {self.limit!r}")


class StreamState(Enum):
    """Lifecycle states of a page stream"""
    INIT = "init"
    BUFFERED = "buffered"
    FETCHING = "fetching"
    HALTED_EMPTY = "halted_empty"
    HALTED_ERROR = "halted_error"


@dataclass
class PaginationState:
    """Mutable traversal state owned by exactly one PageStream"""
    buffer: Deque[Dict[str, Any]] = field(default_factory=deque)
    cursor: Optional[str] = None
    halted: bool = False
    status: StreamState = StreamState.INIT
    pages_fetched: int = 0

    def halt(self, status: StreamState) -> None:
        self.halted = True
        self.status = status
        self.buffer.clear()
        self.cursor = None


class PullKind(Enum):
    ITEM = "item"
    ERROR = "error"
    END = "end"


@dataclass(frozen=True)
class Pull:
    """Tagged outcome of pulling one value from a PageStream"""
    kind: PullKind
    item: Optional[Dict[str, Any]] = None
    error: Optional[APIError] = None


END = Pull(kind=PullKind.END)


class PageStream:
    """Lazy, single-pass iterator over the items of successive pages"""

    def __init__(self, fetch_page: PageFetcher, options: Optional[PaginationOptions] = None):
        self.fetch_page = fetch_page
        self.options = options or PaginationOptions()
        self._state: Optional[PaginationState] = None

    @property
    def state(self) -> Optional[PaginationState]:
        """Current traversal state, None until the first pull"""
        return self._state

    def pull(self) -> Pull:
        """
        Produce the next value of the traversal

        Returns:
            Pull tagged ITEM with the next item, ERROR exactly once when a page
            fetch fails, or END once the traversal is over
        """
        if self._state is None:
            self._state = PaginationState()
        state = self._state

        while True:
            if state.halted:
                return END

            if state.buffer:
                return Pull(kind=PullKind.ITEM, item=state.buffer.popleft())

            if state.status is StreamState.INIT:
                error = self._fetch(state, self.options.starting_after)
            elif state.cursor is None:
                state.halt(StreamState.HALTED_EMPTY)
                return END
            else:
                error = self._fetch(state, state.cursor)

            if error is not None:
                return Pull(kind=PullKind.ERROR, error=error)

    def _fetch(self, state: PaginationState, after: Optional[str]) -> Optional[APIError]:
        state.status = StreamState.FETCHING
        result = self.fetch_page(PageParams(limit=self.options.limit, starting_after=after))

        if not result.ok:
            logger.warning(
                f"Page fetch failed after {state.pages_fetched} pages "
                f"(starting_after={after!r}): {result.error}"
            )
            state.halt(StreamState.HALTED_ERROR)
            return result.error

        page: Page = result.value
        state.pages_fetched += 1
        logger.debug(
            f"Fetched page {state.pages_fetched} with {len(page.items)} items "
            f"(starting_after={after!r})"
        )

        if not page.items and page.cursor is None:
            state.halt(StreamState.HALTED_EMPTY)
            return None

        next_cursor = self._next_cursor(page)
        if next_cursor is not None and next_cursor == after:
            logger.warning(f"Cursor {after!r} did not advance, ending pagination")
            next_cursor = None

        state.buffer.extend(page.items)
        state.cursor = next_cursor
        state.status = StreamState.BUFFERED
        return None

    def _next_cursor(self, page: Page) -> Optional[str]:
        if page.cursor is not None:
            return page.cursor
        if not page.derive_cursor or not page.items:
            return None
        last_item = page.items[-1]
        if isinstance(last_item, dict):
            return last_item.get(self.options.cursor_field)
        return None

    def __iter__(self) -> 'PageStream':
        return self

    def __next__(self) -> Dict[str, Any]:
        pulled = self.pull()
        if pulled.kind is PullKind.ITEM:
            return pulled.item
        if pulled.kind is PullKind.ERROR:
            raise PaginationError(pulled.error)
        raise StopIteration


def deduplicate(items: Iterable[Dict[str, Any]], key: str) -> Iterator[Dict[str, Any]]:
    """
    Drop items whose key value was already yielded earlier in the sequence

    The seen-set grows with every unique key for the life of the sequence.
    Items without the key are passed through.

    Args:
        items: Source sequence
        key: Field name identifying an item

    Yields:
        First occurrence of every key value, in source order
    """
    seen: Set[Hashable] = set()
    for item in items:
        value = item.get(key) if isinstance(item, dict) else None
        if value is None:
            yield item
            continue
        if value in seen:
            continue
        seen.add(value)
        yield item


def stream(fetch_page: PageFetcher,
           options: Optional[PaginationOptions] = None) -> Iterator[Dict[str, Any]]:
    """
    Create a lazy sequence over every item a PageFetcher can produce

    Args:
        fetch_page: Capability returning one page per call
        options: Page size, starting cursor and optional dedup key

    Returns:
        Iterator yielding items in page order; raises PaginationError when a
        page fetch fails, after every earlier item has been yielded
    """
    options = options or PaginationOptions()
    base = PageStream(fetch_page, options)
    if options.unique_by:
        return deduplicate(base, options.unique_by)
    return base
