"""Retry-with-backoff and timeout-with-fallback helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from healthscan_admin.server.errors import error_message, is_quiet

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0, max_delay: float = 5.0) -> float:
    """Delay before retrying after the 1-based *attempt* failed."""
    return min(base_delay * 2 ** (attempt - 1), max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    *,
    base_delay: float = 1.0,
    max_delay: float = 5.0,
) -> T:
    """Call *operation* up to *max_retries* times, re-raising the last error."""
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    last_error: Exception | None = None
    for attempt in range(1, max_retries + 1):
        try:
            return await operation()
        except Exception as exc:
            last_error = exc
            if attempt >= max_retries:
                break
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.info("Retry attempt %d/%d in %.1fs", attempt, max_retries, delay)
            await asyncio.sleep(delay)

    assert last_error is not None
    raise last_error


async def safe_request(
    request_fn: Callable[[], Awaitable[T]],
    fallback_value: T,
    timeout: float = 5.0,
) -> T:
    """Await *request_fn* for at most *timeout* seconds, returning *fallback_value* on any failure."""
    try:
        return await asyncio.wait_for(request_fn(), timeout=timeout)
    except TimeoutError:
        logger.debug("Request timed out after %.1fs, using fallback", timeout)
    except Exception as exc:
        if not is_quiet(exc):
            logger.warning("Server request failed, using fallback: %s", error_message(exc))
    return fallback_value
