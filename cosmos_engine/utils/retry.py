"""Backoff retry for provider HTTP calls."""

from __future__ import annotations

import asyncio
import functools
import random
from typing import Any, Callable, TypeVar

import httpx

from cosmos_engine.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

TOO_MANY_REQUESTS = 429


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Exponential delay for `attempt` (1-based) plus up to 50% jitter."""
    delay = min(base_delay * 2 ** (attempt - 1), max_delay)
    return delay + random.uniform(0, delay * 0.5)


def is_retryable(exc: BaseException) -> bool:
    """Transport failures, 5xx and 429 are worth another try; other 4xx are not."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == TOO_MANY_REQUESTS
    return isinstance(exc, httpx.TransportError)


def async_retry(
    max_attempts: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 4.0,
) -> Callable[[F], F]:
    """Retry an async httpx call with exponential backoff.

    Provider calls run under the aggregator's per-provider timeout, so the
    defaults allow a single quick retry.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except httpx.HTTPError as exc:
                    if not is_retryable(exc):
                        logger.warning(
                            "retry_skipped_client_error",
                            func=func.__name__,
                            status=getattr(getattr(exc, "response", None), "status_code", None),
                        )
                        raise
                    if attempt >= max_attempts:
                        raise

                    delay = backoff_delay(attempt, base_delay, max_delay)
                    logger.warning(
                        "retry_attempt",
                        func=func.__name__,
                        attempt=attempt,
                        delay=round(delay, 2),
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper  # type: ignore[return-value]

    return decorator
