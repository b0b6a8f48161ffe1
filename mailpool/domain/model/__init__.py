"""Domain model entities for mailpool."""

from mailpool.domain.model.audit import AuditEntry
from mailpool.domain.model.card_key import CardKeyConsumption, CardKeyPayload
from mailpool.domain.model.identity import PooledIdentity
from mailpool.domain.model.invite import (
    InvitePayload,
    InviteRedemptionRecord,
    RedemptionUse,
    RegistrationMethods,
)

__all__ = [
    "AuditEntry",
    "CardKeyConsumption",
    "CardKeyPayload",
    "InvitePayload",
    "InviteRedemptionRecord",
    "PooledIdentity",
    "RedemptionUse",
    "RegistrationMethods",
]
