"""In-memory card-key repository for testing."""

import asyncio
from typing import Optional

from mailpool.domain.model import CardKeyConsumption
from mailpool.domain.repository import CardKeyRepository
from mailpool.domain.value import CardKeyId


class InMemoryCardKeyRepository(CardKeyRepository):
    """In-memory implementation of CardKeyRepository for testing."""

    def __init__(self) -> None:
        self._consumptions: dict[CardKeyId, CardKeyConsumption] = {}
        self._lock = asyncio.Lock()

    async def find_consumption(self, key: CardKeyId) -> Optional[CardKeyConsumption]:
        """Find the consumption of a card key."""
        await asyncio.sleep(0)
        return self._consumptions.get(key)

    async def consume(self, consumption: CardKeyConsumption) -> bool:
        """Record the consumption unless one exists."""
        async with self._lock:
            if consumption.key in self._consumptions:
                return False
            self._consumptions[consumption.key] = consumption
            return True
