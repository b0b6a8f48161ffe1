"""Store health repository interface."""

from abc import ABC, abstractmethod


class StoreHealthRepository(ABC):
    """Readiness probe against the backing store."""

    @abstractmethod
    async def ping(self) -> None:
        """Run a trivial round trip against the store.

        Raises:
            UnavailableError: If the store cannot be reached
        """
        pass
