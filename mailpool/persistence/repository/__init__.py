"""PostgreSQL repository implementations."""

from mailpool.persistence.repository.audit import PostgresAuditLogRepository
from mailpool.persistence.repository.card_key import PostgresCardKeyRepository
from mailpool.persistence.repository.health import PostgresStoreHealthRepository
from mailpool.persistence.repository.identity import (
    PostgresPooledIdentityRepository,
)
from mailpool.persistence.repository.invite import (
    PostgresInviteRedemptionRepository,
)
from mailpool.persistence.repository.transaction import PostgresTransaction

__all__ = [
    "PostgresAuditLogRepository",
    "PostgresCardKeyRepository",
    "PostgresInviteRedemptionRepository",
    "PostgresPooledIdentityRepository",
    "PostgresStoreHealthRepository",
    "PostgresTransaction",
]
