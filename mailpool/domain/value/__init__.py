"""Domain value objects for mailpool."""

from mailpool.domain.value.identifiers import (
    MAX_USER_ID_LENGTH,
    CardKeyId,
    InviteId,
    UserId,
)
from mailpool.domain.value.types import (
    CardDuration,
    CardSource,
    ErrorDetail,
    ErrorKind,
    IdentityProtocol,
    InviteType,
    PoolTier,
    RegistrationMethod,
    TokenContext,
)

__all__ = [
    # Identifiers
    "InviteId",
    "CardKeyId",
    "UserId",
    "MAX_USER_ID_LENGTH",
    # Types
    "CardDuration",
    "CardSource",
    "ErrorDetail",
    "ErrorKind",
    "IdentityProtocol",
    "InviteType",
    "PoolTier",
    "RegistrationMethod",
    "TokenContext",
]
