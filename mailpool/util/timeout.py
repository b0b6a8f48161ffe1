"""Bounded waits on the backing store."""

import asyncio
from typing import Awaitable, TypeVar

import logfire

from mailpool.domain.error import UnavailableError

T = TypeVar("T")


async def bounded(awaitable: Awaitable[T], seconds: float, operation: str) -> T:
    """Await a store call, failing with UnavailableError after seconds.

    On timeout the inner call is cancelled; the calling use case rolls the
    request transaction back, so nothing it wrote is committed.

    Args:
        awaitable: Store call to await
        seconds: Timeout in seconds
        operation: Name used in logs

    Returns:
        The awaited result

    Raises:
        UnavailableError: If the call did not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=seconds)
    except asyncio.TimeoutError as e:
        logfire.warn(
            "Store call timed out", operation=operation, timeout_seconds=seconds
        )
        raise UnavailableError() from e
