"""Pooled identity entity."""

from datetime import datetime

from mailpool.domain.model.common import DomainModel
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId


class PooledIdentity(DomainModel):
    """A mailbox address that can be granted to a redeemer.

    Business rules:
    - banned identities are never allocated
    - an identity is allocated at most once (assigned_to is set on grant)
    """

    email: str
    tier: PoolTier
    protocol: IdentityProtocol = IdentityProtocol.IMAP
    banned: bool = False
    assigned_to: UserId | None = None
    assigned_at: datetime | None = None

    @property
    def is_available(self) -> bool:
        return not self.banned and self.assigned_to is None
