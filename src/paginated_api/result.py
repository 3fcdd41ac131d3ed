"""
Result module providing the success/failure value returned by API operations
"""

from typing import Generic, Optional, TypeVar
from dataclasses import dataclass

from .api_errors import APIError, PermanentAPIError

T = TypeVar('T')


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an APIError, never both"""
    value: Optional[T] = None
    error: Optional[APIError] = None

    @classmethod
    def success(cls, value: T) -> 'Result[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: APIError) -> 'Result[T]':
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """
        Return the success value

        Raises:
            PermanentAPIError: If the result holds an error
        """
        if self.error is not None:
            raise PermanentAPIError(self.error)
        return self.value
