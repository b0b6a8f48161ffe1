"""Card-key consumption repository interface."""

from abc import ABC, abstractmethod

from mailpool.domain.model.card_key import CardKeyConsumption
from mailpool.domain.value import CardKeyId


class CardKeyRepository(ABC):
    """Repository for card-key consumption flags."""

    @abstractmethod
    async def find_consumption(self, key: CardKeyId) -> CardKeyConsumption | None:
        """Find the consumption record of a card key.

        Args:
            key: Card key identifier (from its payload)

        Returns:
            The consumption if the key was redeemed, None otherwise
        """
        pass

    @abstractmethod
    async def consume(self, consumption: CardKeyConsumption) -> bool:
        """Record a consumption unless one already exists.

        Args:
            consumption: Consumption to record

        Returns:
            True if this call consumed the key, False if it was already consumed
        """
        pass
