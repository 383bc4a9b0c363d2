"""Retry logic with exponential backoff and jitter

Implements retry logic for settlement writes that:
1. Only retries optimistic-concurrency conflicts
2. Uses exponential backoff with jitter so colliding writers spread out
3. Gives up after max retries and surfaces the conflict as retryable
"""

import asyncio
import random
import logging
from typing import Callable, Any, Optional, TypeVar
from functools import wraps

from puzzle_settlement import config
from puzzle_settlement.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

T = TypeVar('T')

JITTER = 0.1  # 10% random jitter


def is_retryable_error(exc: Exception) -> bool:
    """
    Determine if a settlement error should be retried internally.

    Retryable:
    - ConcurrencyConflict (another writer saved first)

    Not retryable:
    - PersistenceError (reported to the caller, who retries with the same game_id)
    - InputError and anything else

    Args:
        exc: The exception to check

    Returns:
        True if error should be retried, False otherwise
    """
    return isinstance(exc, ConcurrencyConflict)


def calculate_backoff(
    attempt: int,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(base_delay * (2 ** attempt), max_delay) + jitter
    Jitter is random value between -10% and +10% of delay

    Args:
        attempt: The retry attempt number (0-indexed)
        base_delay: First delay in seconds (default: CONFLICT_BASE_DELAY)
        max_delay: Upper bound in seconds (default: CONFLICT_MAX_DELAY)

    Returns:
        Delay in seconds
    """
    base = config.CONFLICT_BASE_DELAY if base_delay is None else base_delay
    cap = config.CONFLICT_MAX_DELAY if max_delay is None else max_delay

    delay = min(base * (2 ** attempt), cap)

    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    final_delay = delay + jitter_amount

    return max(final_delay, 0.0)


async def retry_with_backoff(
    func: Callable[..., T],
    *args: Any,
    max_retries: Optional[int] = None,
    base_delay: Optional[float] = None,
    **kwargs: Any
) -> T:
    """
    Retry async function with exponential backoff.

    Only retries conflicts. Gives up after max_retries attempts.

    Args:
        func: Async function to retry
        max_retries: Maximum number of retry attempts (default: MAX_CONFLICT_RETRIES)
        base_delay: First backoff delay in seconds (default: CONFLICT_BASE_DELAY)
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        Last exception if all retries exhausted or non-retryable error

    Example:
        receipt = await retry_with_backoff(self._settle_once, player_id, game, max_retries=3)
    """
    if max_retries is None:
        max_retries = config.MAX_CONFLICT_RETRIES

    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if not is_retryable_error(e):
                raise

            if attempt == max_retries:
                logger.error(
                    f"[RETRY] All {max_retries} retries exhausted for {func.__name__}"
                )
                raise

            backoff = calculate_backoff(attempt, base_delay=base_delay)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {func.__name__} "
                f"after {backoff:.3f}s (error: {type(e).__name__})"
            )

            await asyncio.sleep(backoff)

    raise RuntimeError("Retry logic failed unexpectedly")


def with_retry(max_retries: Optional[int] = None) -> Callable:
    """
    Decorator to add conflict retry logic to async functions.

    Args:
        max_retries: Maximum number of retry attempts (default: MAX_CONFLICT_RETRIES)

    Example:
        @with_retry(max_retries=3)
        async def write_stats():
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(func, *args, max_retries=max_retries, **kwargs)
        return wrapper
    return decorator
