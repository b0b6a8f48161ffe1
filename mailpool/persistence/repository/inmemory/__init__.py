"""In-memory repository implementations for testing."""

from .audit import InMemoryAuditLogRepository
from .card_key import InMemoryCardKeyRepository
from .health import InMemoryStoreHealthRepository
from .identity import InMemoryPooledIdentityRepository
from .invite import InMemoryInviteRedemptionRepository
from .transaction import InMemoryTransaction

__all__ = [
    "InMemoryAuditLogRepository",
    "InMemoryCardKeyRepository",
    "InMemoryInviteRedemptionRepository",
    "InMemoryPooledIdentityRepository",
    "InMemoryStoreHealthRepository",
    "InMemoryTransaction",
]
