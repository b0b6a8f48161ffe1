"""Repository interfaces for mailpool domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from mailpool.domain.repository.audit import AuditLogRepository
from mailpool.domain.repository.card_key import CardKeyRepository
from mailpool.domain.repository.health import StoreHealthRepository
from mailpool.domain.repository.identity import PooledIdentityRepository
from mailpool.domain.repository.invite import InviteRedemptionRepository
from mailpool.domain.repository.transaction import Transaction

__all__ = [
    "AuditLogRepository",
    "CardKeyRepository",
    "InviteRedemptionRepository",
    "PooledIdentityRepository",
    "StoreHealthRepository",
    "Transaction",
]
