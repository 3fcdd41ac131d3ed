"""
RetryPolicy module deciding whether a failed API call should be retried and when
"""

import re
from typing import Mapping, Optional
from dataclasses import dataclass

from .api_errors import APIError


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of a retry decision for one failed attempt"""
    should_retry: bool
    delay_ms: Optional[int] = None


def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    """
    Read a Retry-After header expressed in seconds

    Only the leading integer is used, so "1.5" means one second.

    Args:
        headers: Response headers (lookup is case-insensitive)

    Returns:
        Delay in milliseconds, or None when absent or not starting with digits
    """
    if not headers:
        return None

    value = None
    for name, header_value in headers.items():
        if name.lower() == 'retry-after':
            value = header_value
            break

    if value is None:
        return None

    match = re.match(r'\s*(\d+)', str(value))
    if match is None:
        # HTTP-date form is not supported by the API
        return None
    return int(match.group(1)) * 1000


class RetryPolicy:
    """Stateless retry rules with exponential backoff"""

    # Statuses retried in addition to anything >= 500
    RETRYABLE_STATUS_CODES = {408, 409}

    def __init__(self, max_retries: int = 2, base_delay_ms: int = 1000):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        if base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be non-negative, got {base_delay_ms}")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    def backoff(self, attempt: int) -> int:
        """
        Compute the exponential backoff delay for a retry

        Args:
            attempt: Zero-based number of retries already performed

        Returns:
            Delay in milliseconds (1000, 2000, 4000, ... with the default base)
        """
        return self.base_delay_ms * (2 ** attempt)

    def decide(self, outcome: APIError, attempt: int) -> RetryDecision:
        """
        Decide whether a failed attempt should be retried

        Args:
            outcome: Classified failure of the attempt
            attempt: Zero-based number of retries already performed

        Returns:
            RetryDecision with the delay to wait before the next attempt
        """
        if attempt >= self.max_retries:
            return RetryDecision(should_retry=False)

        if outcome.is_transport_failure:
            return RetryDecision(should_retry=True, delay_ms=self.backoff(attempt))

        status = outcome.status
        if status is None:
            return RetryDecision(should_retry=False)

        if status == 429:
            # Server-provided delay wins over computed backoff
            if outcome.retry_after_ms is not None:
                return RetryDecision(should_retry=True, delay_ms=outcome.retry_after_ms)
            return RetryDecision(should_retry=True, delay_ms=self.backoff(attempt))

        if status in self.RETRYABLE_STATUS_CODES or status >= 500:
            return RetryDecision(should_retry=True, delay_ms=self.backoff(attempt))

        return RetryDecision(should_retry=False)
