"""Pooled identity repository interface."""

from abc import ABC, abstractmethod

from mailpool.domain.model.identity import PooledIdentity
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId


class PooledIdentityRepository(ABC):
    """Repository for pooled identities.

    The store is the source of truth for availability. Claims must be
    atomic: selecting available rows and marking them assigned is one step.
    """

    @abstractmethod
    async def claim_available(
        self,
        count: int,
        assignee: UserId,
        tier: PoolTier | None = None,
        protocol: IdentityProtocol | None = None,
    ) -> list[str]:
        """Atomically claim up to count available identities.

        Available means not banned and not assigned. Claimed rows are
        assigned to assignee before any other claim can see them.

        Args:
            count: Maximum number of identities to claim
            assignee: User the identities are granted to
            tier: Optional tier filter
            protocol: Optional protocol filter

        Returns:
            Claimed email addresses (may be fewer than count)
        """
        pass

    @abstractmethod
    async def load_statuses(self) -> dict[str, bool]:
        """Load the ban status of every known identity.

        Returns:
            Mapping of email to banned flag
        """
        pass

    @abstractmethod
    async def set_banned(self, email: str, banned: bool) -> bool:
        """Update the ban status of an identity.

        Args:
            email: Identity email
            banned: New ban status

        Returns:
            True if the identity exists in the store
        """
        pass

    @abstractmethod
    async def add(self, identities: list[PooledIdentity]) -> int:
        """Insert identities, ignoring emails already present.

        Args:
            identities: Identities to insert

        Returns:
            Number of identities actually inserted
        """
        pass
