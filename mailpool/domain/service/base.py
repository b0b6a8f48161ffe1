"""Base service class for domain services."""

from datetime import datetime, timezone
from typing import Awaitable, Callable, TypeVar

from mailpool.util.timeout import bounded

T = TypeVar("T")

Clock = Callable[[], datetime]

DEFAULT_STORE_TIMEOUT_SECONDS = 5.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Service:
    """Base class for all domain services.

    Domain services contain business logic that doesn't naturally belong
    to a single entity or spans multiple entities/aggregates.

    Every backing store call goes through ``_store`` so that it is bounded
    by ``store_timeout_seconds``.
    """

    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS

    async def _store(self, awaitable: Awaitable[T], operation: str) -> T:
        return await bounded(awaitable, self.store_timeout_seconds, operation)
