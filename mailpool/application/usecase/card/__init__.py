"""Card-key use cases."""

from mailpool.application.usecase.card.get_verification_history import (
    GetVerificationHistoryRequest,
    GetVerificationHistoryResponse,
    GetVerificationHistoryUseCase,
)
from mailpool.application.usecase.card.mint_card_key import (
    MintCardKeyResponse,
    MintCardKeyUseCase,
)
from mailpool.application.usecase.card.verify_card_keys import (
    ANONYMOUS_USER_ID,
    VerifyCardKeysRequest,
    VerifyCardKeysResponse,
    VerifyCardKeysUseCase,
)

__all__ = [
    "ANONYMOUS_USER_ID",
    "GetVerificationHistoryRequest",
    "GetVerificationHistoryResponse",
    "GetVerificationHistoryUseCase",
    "MintCardKeyResponse",
    "MintCardKeyUseCase",
    "VerifyCardKeysRequest",
    "VerifyCardKeysResponse",
    "VerifyCardKeysUseCase",
]
