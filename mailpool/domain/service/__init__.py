"""Domain services."""

from .base import Service
from .card_key_verifier import (
    CardKeyVerification,
    CardKeyVerifier,
    MintCardKeyRequest,
    MintedCardKey,
)
from .health_service import HealthService
from .invite_registry import (
    InviteConfig,
    InviteGrant,
    InviteRedemption,
    InviteRegistry,
    InviteVerification,
    IssuedInvite,
)
from .redemption_orchestrator import (
    BatchRedemptionOrchestrator,
    BatchRedemptionResult,
    BatchSummary,
    InviteRedemptionResult,
    ProtocolAllocation,
    TierAllocation,
)
from .resource_pool import (
    AddIdentitiesResult,
    IdentityStatusCache,
    PoolStats,
    ResourcePool,
)
from .token_codec import TokenCodec

__all__ = [
    "AddIdentitiesResult",
    "BatchRedemptionOrchestrator",
    "BatchRedemptionResult",
    "BatchSummary",
    "CardKeyVerification",
    "CardKeyVerifier",
    "HealthService",
    "IdentityStatusCache",
    "InviteConfig",
    "InviteGrant",
    "InviteRedemption",
    "InviteRedemptionResult",
    "InviteRegistry",
    "InviteVerification",
    "IssuedInvite",
    "MintCardKeyRequest",
    "MintedCardKey",
    "PoolStats",
    "ProtocolAllocation",
    "ResourcePool",
    "Service",
    "TierAllocation",
    "TokenCodec",
]
