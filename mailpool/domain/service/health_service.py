"""Store health domain service."""

import logfire

from mailpool.domain.error import UnavailableError
from mailpool.domain.repository import StoreHealthRepository

from .base import DEFAULT_STORE_TIMEOUT_SECONDS, Service


class HealthService(Service):
    """Readiness checks against the backing store."""

    def __init__(
        self,
        health_repository: StoreHealthRepository,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
    ) -> None:
        self.health_repository = health_repository
        self.store_timeout_seconds = store_timeout_seconds

    async def is_ready(self) -> bool:
        """Whether the backing store answers within the store timeout."""
        try:
            await self._store(self.health_repository.ping(), "health.ping")
        except UnavailableError:
            logfire.warn("Backing store not ready")
            return False
        return True
