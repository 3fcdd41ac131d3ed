"""
APIError module defining the error envelope and status classification table
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass


class ErrorKind(str, Enum):
    """Classified failure categories for API calls"""
    BAD_REQUEST = "bad_request"
    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    CONNECTION = "connection"


# Fixed status code table; anything >= 500 is a server error
STATUS_KINDS = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.AUTHENTICATION,
    403: ErrorKind.PERMISSION_DENIED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.UNPROCESSABLE_ENTITY,
    429: ErrorKind.RATE_LIMIT,
}

RETRYABLE_KINDS = frozenset({
    ErrorKind.CONFLICT,
    ErrorKind.RATE_LIMIT,
    ErrorKind.SERVER_ERROR,
    ErrorKind.TIMEOUT,
    ErrorKind.CONNECTION,
})


def kind_from_status(status: int) -> ErrorKind:
    """
    Map an HTTP status code to its error kind

    Args:
        status: Non-2xx HTTP status code

    Returns:
        ErrorKind for the status; unlisted statuses below 500 are bad requests
    """
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    return STATUS_KINDS.get(status, ErrorKind.BAD_REQUEST)


@dataclass(frozen=True)
class APIError:
    """Immutable envelope describing one terminal API failure"""
    kind: ErrorKind
    message: str
    code: Optional[str] = None
    status: Optional[int] = None
    retry_after_ms: Optional[int] = None

    @classmethod
    def from_status(cls, status: int, message: str, code: Optional[str] = None,
                    retry_after_ms: Optional[int] = None) -> 'APIError':
        """Build an envelope for a non-2xx HTTP response"""
        return cls(
            kind=kind_from_status(status),
            message=message,
            code=code,
            status=status,
            retry_after_ms=retry_after_ms
        )

    @property
    def is_retryable(self) -> bool:
        """Whether this kind of failure may succeed on a later attempt"""
        return self.kind in RETRYABLE_KINDS

    @property
    def is_transport_failure(self) -> bool:
        return self.kind in (ErrorKind.TIMEOUT, ErrorKind.CONNECTION)

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.kind.value} ({self.status}): {self.message}"
        return f"{self.kind.value}: {self.message}"


class PermanentAPIError(Exception):
    """Raised when a caller unwraps a failed result"""

    def __init__(self, error: APIError):
        super().__init__(str(error))
        self.error = error


class PaginationError(PermanentAPIError):
    """Raised by a lazy page stream when a page fetch fails terminally"""
    pass
