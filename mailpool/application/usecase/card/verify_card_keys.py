"""Batch verify card keys use case."""

import logfire
from pydantic import BaseModel, Field, field_validator

from mailpool.application.usecase.base import TransactionalUseCase
from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    BatchSummary,
    CardKeyVerification,
    TierAllocation,
)
from mailpool.domain.repository import Transaction
from mailpool.domain.value import MAX_USER_ID_LENGTH, UserId

ANONYMOUS_USER_ID = "anonymous"


class VerifyCardKeysRequest(BaseModel):
    """Batch verify request.

    Blank lines are dropped; the batch limit is enforced by the domain.
    """

    card_keys: list[str]
    user_id: str | None = Field(default=None, max_length=MAX_USER_ID_LENGTH)

    @field_validator("card_keys")
    @classmethod
    def drop_blank_keys(cls, v: list[str]) -> list[str]:
        return [key.strip() for key in v if key.strip()]


class VerifyCardKeysResponse(BaseModel):
    """Per-key results, granted identities and totals."""

    results: list[CardKeyVerification]
    allocation: TierAllocation
    summary: BatchSummary


class VerifyCardKeysUseCase(TransactionalUseCase):
    """Use case for redeeming a batch of card keys."""

    def __init__(
        self, orchestrator: BatchRedemptionOrchestrator, transaction: Transaction
    ) -> None:
        """Initialize use case.

        Args:
            orchestrator: Redemption orchestrator
            transaction: Request transaction
        """
        super().__init__(transaction)
        self.orchestrator = orchestrator

    async def execute(self, request: VerifyCardKeysRequest) -> VerifyCardKeysResponse:
        """Verify and redeem card keys.

        Raises:
            ValidationError: If the batch is empty or too large
            UnavailableError: If the store is unreachable
        """
        user_id = UserId(request.user_id or ANONYMOUS_USER_ID)
        with logfire.span(
            "verify_card_keys.execute",
            key_count=len(request.card_keys),
            user_id=user_id,
        ):
            async with self.atomic():
                result = await self.orchestrator.redeem_card_keys(
                    request.card_keys, user_id
                )
                return VerifyCardKeysResponse(**result.model_dump())
