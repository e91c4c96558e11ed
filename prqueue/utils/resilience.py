"""
Caller-level guards around a synchronization pass.

The engine never retries; a caller that wants a deadline wraps the whole
pass with ``run_with_timeout`` and gets a ProviderError on expiry.
"""

import asyncio
from typing import Awaitable, TypeVar

from prqueue.models.error import ProviderError
from prqueue.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


async def run_with_timeout(awaitable: Awaitable[T], timeout_seconds: float) -> T:
    """
    Await ``awaitable`` with a deadline.

    Args:
        awaitable: Coroutine to run (usually ``PRSyncService.sync(...)``)
        timeout_seconds: Deadline in seconds

    Returns:
        The awaitable's result

    Raises:
        ProviderError: With status 504 if the deadline expires; partial
            results are abandoned
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        logger.error(f"Synchronization timed out after {timeout_seconds}s")
        raise ProviderError(
            f"Timed out after {timeout_seconds}s waiting for GitHub",
            status_code=504,
        ) from e
