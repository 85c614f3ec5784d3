"""Retry with exponential backoff for async calls.

Used around the remote recommendation call on both the bulk and the
single-item AI paths. Only exceptions listed in `retryable_exceptions` are
retried; anything else propagates on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, TypeVar

from ctmap.domain.errors import ExternalCallError

logger = logging.getLogger(__name__)

T = TypeVar("T")
ExceptionTypes = type[BaseException] | tuple[type[BaseException], ...]
Sleep = Callable[[float], Awaitable[Any]]


class RetryExhausted(ExternalCallError):
    """Raised when all retry attempts have been used up."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_exception: BaseException | None = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


@dataclass(frozen=True)
class RetryConfig:
    """Retry behaviour.

    Attributes:
        max_attempts: Total attempts including the first one.
        base_delay: Delay before the first retry, in seconds.
        multiplier: Growth factor applied per retry.
        max_delay: Ceiling for any single delay.
        retryable_exceptions: Exception types that trigger another attempt.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 8.0
    retryable_exceptions: ExceptionTypes = (ExternalCallError,)

    def calculate_delay(self, attempt: int) -> float:
        """Delay after the failed *attempt* (1-indexed): 1, 2, 4, 8, 8 ..."""
        return min(self.base_delay * (self.multiplier ** (attempt - 1)), self.max_delay)

    def delays(self) -> list[float]:
        return [self.calculate_delay(n) for n in range(1, self.max_attempts)]


def async_retry(
    config: RetryConfig | None = None,
    *,
    sleep: Sleep = asyncio.sleep,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator for coroutine functions.

    Usage:
        @async_retry(RetryConfig(max_attempts=3))
        async def call_recommender(payload):
            ...

    The backoff sleep is awaited inside the wrapped coroutine, so it only
    delays that call and never its siblings in a gather.
    """
    retry_config = config or RetryConfig()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(1, retry_config.max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except retry_config.retryable_exceptions as e:
                    if attempt >= retry_config.max_attempts:
                        logger.warning(
                            "Retry exhausted for %s after %d attempts: %s",
                            func.__name__, attempt, e,
                        )
                        raise RetryExhausted(
                            f"{e} (gave up after {attempt} attempts)",
                            attempts=attempt,
                            last_exception=e,
                        ) from e

                    delay = retry_config.calculate_delay(attempt)
                    logger.warning(
                        "Retry %d/%d for %s in %.2fs: %s",
                        attempt, retry_config.max_attempts, func.__name__, delay, e,
                    )
                    if on_retry is not None:
                        on_retry(attempt, e, delay)
                    await sleep(delay)

            # max_attempts < 1
            raise RetryExhausted("No attempts allowed", attempts=0)

        return wrapper

    return decorator
