"""
Retry helpers with exponential backoff.

Only for idempotent calls (HTTP GETs, chain reads). Transaction submission is
never retried here: the caller resubmits the whole request instead.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import httpx

from nft_airdrop.core.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


def backoff_delay(retry_count: int, delay: float, max_delay: float) -> float:
    """delay * 2^retry_count, capped at max_delay."""
    return min(delay * (2 ** retry_count), max_delay)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    delay: float = 1.0,
    max_delay: float = 10.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run `operation`, retrying up to `max_retries` extra times on `retry_on` errors."""
    last_error: Optional[BaseException] = None

    for retry_count in range(max_retries + 1):
        try:
            return await operation()
        except retry_on as e:
            last_error = e
            if retry_count == max_retries:
                break
            wait = backoff_delay(retry_count, delay, max_delay)
            logger.debug(f"Retry #{retry_count + 1} of {description} in {wait:.2f}s after: {e}")
            await sleep(wait)

    logger.error(f"{description} failed after {max_retries + 1} attempts: {last_error}")
    raise last_error


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    max_retries: int = 3,
    delay: float = 1.0,
    max_delay: float = 10.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    **kwargs,
) -> httpx.Response:
    """Send a request, retrying transport errors and non-2xx responses."""

    async def _send() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
        return response

    return await retry_async(
        _send,
        max_retries=max_retries,
        delay=delay,
        max_delay=max_delay,
        retry_on=(httpx.TransportError, httpx.HTTPStatusError),
        description=f"{method} {url}",
        sleep=sleep,
    )
