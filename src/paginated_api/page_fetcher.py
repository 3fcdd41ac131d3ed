"""
PageFetcher module defining the page boundary between the pagination engine
and resource-specific endpoints

List endpoints answer GET requests with {"objects": [...], "starting_after": cursor}.
Fetch endpoints answer POST requests with {"events": [...], "cursor": cursor}.
Both are normalised into a Page.
"""

import logging
from typing import Dict, Any, List, Optional, Protocol
from dataclasses import dataclass, field

from .result import Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """One bounded batch of items plus an optional next-page cursor"""
    items: List[Dict[str, Any]]
    cursor: Optional[str] = None
    # When False a missing cursor marks the last page
    derive_cursor: bool = True


@dataclass(frozen=True)
class PageParams:
    """Pagination parameters handed to a PageFetcher"""
    limit: int
    starting_after: Optional[str] = None
    ending_before: Optional[str] = None
    filters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.starting_after is not None and self.ending_before is not None:
            raise ValueError("Only one of starting_after and ending_before may be supplied")

    def to_query(self) -> Dict[str, Any]:
        """
        Render the parameters as list endpoint query parameters

        Returns:
            Dictionary with filters, limit and at most one cursor parameter
        """
        query = {key: value for key, value in self.filters.items() if value is not None}
        query['limit'] = self.limit
        if self.starting_after is not None:
            query['starting_after'] = self.starting_after
        elif self.ending_before is not None:
            query['ending_before'] = self.ending_before
        return query


class PageFetcher(Protocol):
    """Capability returning one page for the given pagination parameters"""

    def __call__(self, params: PageParams) -> Result:
        """Return Result holding a Page, or the APIError that prevented it"""
        ...


def parse_list_envelope(body: Any) -> Page:
    """
    Convert a list endpoint response body into a Page

    Args:
        body: Decoded response body

    Returns:
        Page with the listed objects; an unrecognised body yields an empty final page
    """
    if not isinstance(body, dict) or not isinstance(body.get('objects'), list):
        logger.warning("List response did not contain an 'objects' array, treating as last page")
        return Page(items=[])

    return Page(items=body['objects'], cursor=body.get('starting_after'))


def parse_fetch_envelope(body: Any) -> Page:
    """
    Convert a fetch endpoint response body into a Page

    Fetch endpoints own their cursor: a page without one is the last page.

    Args:
        body: Decoded response body

    Returns:
        Page with the fetched events; an unrecognised body yields an empty final page
    """
    if not isinstance(body, dict) or not isinstance(body.get('events'), list):
        logger.warning("Fetch response did not contain an 'events' array, treating as last page")
        return Page(items=[], derive_cursor=False)

    events = body['events']
    # An empty batch ends the traversal whatever cursor came with it
    cursor = body.get('cursor') if events else None
    return Page(items=events, cursor=cursor, derive_cursor=False)


def list_endpoint(client, path: str, **filters: Any) -> PageFetcher:
    """
    Bind a GET list endpoint and its filters into a PageFetcher

    Args:
        client: HTTPClient used to issue the requests
        path: Endpoint path, e.g. "/v1/project"
        **filters: Extra query parameters sent with every page request

    Returns:
        PageFetcher closure
    """
    def fetch_page(params: PageParams) -> Result:
        query = {**filters, **params.filters}
        # Cursors given as filters only seed a request that carries no cursor of its own
        seed_after = query.pop('starting_after', None)
        seed_before = query.pop('ending_before', None)
        if params.starting_after is None and params.ending_before is None:
            starting_after, ending_before = seed_after, seed_before
        else:
            starting_after, ending_before = params.starting_after, params.ending_before
        page_params = PageParams(
            limit=params.limit,
            starting_after=starting_after,
            ending_before=ending_before,
            filters=query
        )
        result = client.get(path, params=page_params.to_query())
        if not result.ok:
            return result
        return Result.success(parse_list_envelope(result.value))

    return fetch_page


def fetch_endpoint(client, path: str, **filters: Any) -> PageFetcher:
    """
    Bind a POST fetch endpoint and its filters into a PageFetcher

    Fetch endpoints are read-only despite the POST verb and take their cursor
    in the JSON body under "cursor". They only paginate forward.

    Args:
        client: HTTPClient used to issue the requests
        path: Endpoint path, e.g. "/v1/experiment/<id>/fetch"
        **filters: Extra body fields sent with every page request

    Returns:
        PageFetcher closure; calling it with ending_before raises ValueError
    """
    def fetch_page(params: PageParams) -> Result:
        if params.ending_before is not None:
            raise ValueError(f"Fetch endpoint {path} does not support ending_before")
        body = {
            key: value
            for key, value in {**filters, **params.filters}.items()
            if value is not None
        }
        body['limit'] = params.limit
        if params.starting_after is not None:
            body['cursor'] = params.starting_after
        result = client.post(path, body)
        if not result.ok:
            return result
        return Result.success(parse_fetch_envelope(result.value))

    return fetch_page
