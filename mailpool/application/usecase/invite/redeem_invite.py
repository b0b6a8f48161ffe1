"""Redeem invite use case."""

import logfire
from pydantic import BaseModel, Field

from mailpool.application.usecase.base import TransactionalUseCase
from mailpool.domain.service import (
    BatchRedemptionOrchestrator,
    InviteGrant,
    ProtocolAllocation,
)
from mailpool.domain.repository import Transaction
from mailpool.domain.value import MAX_USER_ID_LENGTH, ErrorDetail, UserId


class RedeemInviteRequest(BaseModel):
    """Redeem invite request."""

    token: str
    user_id: str = Field(min_length=1, max_length=MAX_USER_ID_LENGTH)
    method: str


class RedeemInviteResponse(BaseModel):
    """Redeem invite response.

    allocation is empty unless success is true.
    """

    success: bool
    data: InviteGrant | None = None
    error: ErrorDetail | None = None
    allocation: ProtocolAllocation
    requested: int
    provided: int
    partial_grant: bool


class RedeemInviteUseCase(TransactionalUseCase):
    """Use case for registering through an invite and drawing its quota."""

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

    async def execute(self, request: RedeemInviteRequest) -> RedeemInviteResponse:
        """Redeem an invite.

        Raises:
            UnavailableError: If the store is unreachable
        """
        with logfire.span(
            "redeem_invite.execute", user_id=request.user_id, method=request.method
        ):
            async with self.atomic():
                result = await self.orchestrator.redeem_invite(
                    request.token, UserId(request.user_id), request.method
                )
                return RedeemInviteResponse(
                    success=result.redemption.success,
                    data=result.redemption.data,
                    error=result.redemption.error,
                    allocation=result.allocation,
                    requested=result.requested,
                    provided=result.provided,
                    partial_grant=result.partial_grant,
                )
