"""Resilience patterns for settlement writes

Bounded retry with exponential backoff for optimistic-concurrency conflicts.
"""

from puzzle_settlement.resilience.retry import retry_with_backoff, with_retry, is_retryable_error

__all__ = [
    "retry_with_backoff",
    "with_retry",
    "is_retryable_error",
]
