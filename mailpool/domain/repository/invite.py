"""Invite redemption repository interface."""

from abc import ABC, abstractmethod

from mailpool.domain.model.invite import InviteRedemptionRecord, RedemptionUse
from mailpool.domain.value import InviteId


class InviteRedemptionRepository(ABC):
    """Repository for invite redemption records.

    Defines the contract for redemption accounting.
    Implementations live in the persistence layer.
    """

    @abstractmethod
    async def find_by_invite_id(
        self, invite_id: InviteId
    ) -> InviteRedemptionRecord | None:
        """Find the redemption record of an invite.

        Args:
            invite_id: The invite's identifier (from its payload)

        Returns:
            The record if the invite was ever redeemed, None otherwise
        """
        pass

    @abstractmethod
    async def append_use_if_count(
        self, invite_id: InviteId, expected_count: int, use: RedemptionUse
    ) -> bool:
        """Append a use only if the stored count still equals expected_count.

        Compare-and-set: increments used_count and appends the use as one
        atomic unit. With expected_count == 0 the record is created.

        Args:
            invite_id: The invite's identifier
            expected_count: used_count observed by the caller
            use: The redemption to append

        Returns:
            True if the use was recorded, False if the count changed meanwhile
        """
        pass
