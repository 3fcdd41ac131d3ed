"""
Collector module eagerly draining a page stream into a single result
"""

import logging
from typing import Optional

from .api_errors import PaginationError
from .page_fetcher import PageFetcher
from .pagination_engine import PaginationOptions, stream
from .result import Result

logger = logging.getLogger(__name__)


def list_all(fetch_page: PageFetcher, options: Optional[PaginationOptions] = None) -> Result:
    """
    Fetch every page and return all items at once

    Prefer stream() for large result sets; this holds every item in memory.

    Args:
        fetch_page: Capability returning one page per call
        options: Same options accepted by stream()

    Returns:
        Result holding the complete ordered item list, or the APIError that
        ended the traversal (no partial list is returned)
    """
    items = []
    try:
        for item in stream(fetch_page, options):
            items.append(item)
    except PaginationError as e:
        logger.error(f"Pagination aborted after {len(items)} items: {e.error}")
        return Result.failure(e.error)

    return Result.success(items)
