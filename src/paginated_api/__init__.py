"""
Resilient client for cursor-paginated HTTP APIs
Provides retrying request execution and lazy or eager traversal of paginated endpoints
"""

from .api_errors import APIError, ErrorKind, PermanentAPIError, PaginationError, kind_from_status
from .result import Result
from .retry_policy import RetryPolicy, RetryDecision, parse_retry_after
from .http_client import HTTPClient, APIRequest, RetryState
from .page_fetcher import (
    Page, PageParams, PageFetcher, list_endpoint, fetch_endpoint,
    parse_list_envelope, parse_fetch_envelope
)
from .pagination_engine import (
    PaginationOptions, PaginationState, PageStream, StreamState, Pull, PullKind, stream, deduplicate
)
from .collector import list_all
from .config_loader import ConfigLoader, ClientConfig, ConfigurationError
from .logging_setup import configure_logging, configure_logging_from_config

__all__ = [
    'APIError',
    'ErrorKind',
    'PermanentAPIError',
    'PaginationError',
    'kind_from_status',
    'Result',
    'RetryPolicy',
    'RetryDecision',
    'parse_retry_after',
    'HTTPClient',
    'APIRequest',
    'RetryState',
    'Page',
    'PageParams',
    'PageFetcher',
    'list_endpoint',
    'fetch_endpoint',
    'parse_list_envelope',
    'parse_fetch_envelope',
    'PaginationOptions',
    'PaginationState',
    'PageStream',
    'StreamState',
    'Pull',
    'PullKind',
    'stream',
    'deduplicate',
    'list_all',
    'ConfigLoader',
    'ClientConfig',
    'ConfigurationError',
    'configure_logging',
    'configure_logging_from_config'
]
