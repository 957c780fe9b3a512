"""
Response classification, exponential backoff, and retry decisions.

The retry schedule doubles from a one-second base:
  after attempt 1 → wait 1 s, after attempt 2 → wait 2 s, ...
The same schedule applies to rate limiting, error statuses, and transport
faults.  No wait follows the final attempt.
"""

from __future__ import annotations

from .config import BASE_DELAY_SECONDS, RATE_LIMIT_STATUS


# ---------------------------------------------------------------------------
# Outcome classification
# ---------------------------------------------------------------------------

class CallOutcome:
    """
    Outcome constants for a single attempt against the Messages API.

    Every attempt lands in exactly one category.  An empty-but-successful
    response is still SUCCESS at this layer.
    """

    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"

    @staticmethod
    def from_status(status_code: int) -> str:
        """
        Classify an HTTP status code.

        Args:
            status_code: Status of the HTTP response.

        Returns:
            One of ``SUCCESS``, ``RATE_LIMITED`` or ``FAILED``.
        """
        if 200 <= status_code < 300:
            return CallOutcome.SUCCESS
        if status_code == RATE_LIMIT_STATUS:
            return CallOutcome.RATE_LIMITED
        return CallOutcome.FAILED


# ---------------------------------------------------------------------------
# Backoff helpers
# ---------------------------------------------------------------------------

def exponential_backoff(attempt: int, base_delay: float = BASE_DELAY_SECONDS) -> float:
    """
    Return the wait in seconds after a failed attempt.

    Schedule: ``base_delay * 2 ** (attempt - 1)``, so with the default base
    attempt 1 → 1 s, attempt 2 → 2 s, attempt 3 → 4 s.

    Args:
        attempt: 1-based number of the attempt that just failed.
        base_delay: Delay after the first failed attempt.

    Returns:
        Seconds to wait before the next attempt.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    return base_delay * 2 ** (attempt - 1)


def should_retry(outcome: str, attempt: int, max_attempts: int) -> bool:
    """
    Decide whether another attempt should be made.

    Rate limiting and other failures are both retried while attempts
    remain; a success never is.

    Args:
        outcome: Category from :class:`CallOutcome`.
        attempt: The 1-based attempt number that just completed.
        max_attempts: Total attempts allowed (initial + retries).

    Returns:
        ``True`` if the call should be retried.
    """
    if outcome == CallOutcome.SUCCESS:
        return False
    return attempt < max_attempts
