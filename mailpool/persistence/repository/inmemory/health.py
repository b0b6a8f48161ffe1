"""In-memory store health repository for testing."""

from mailpool.domain.error import UnavailableError
from mailpool.domain.repository import StoreHealthRepository


class InMemoryStoreHealthRepository(StoreHealthRepository):
    """Health probe whose outcome tests can flip."""

    def __init__(self) -> None:
        self.available = True

    async def ping(self) -> None:
        if not self.available:
            raise UnavailableError()
