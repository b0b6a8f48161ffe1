"""Get card verification history use case."""

import logfire
from pydantic import BaseModel, Field

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.model import AuditEntry
from mailpool.domain.service import BatchRedemptionOrchestrator
from mailpool.domain.value import UserId


class GetVerificationHistoryRequest(BaseModel):
    """Verification history request."""

    user_id: str
    limit: int = Field(default=50, gt=0, le=100)


class GetVerificationHistoryResponse(BaseModel):
    """Verification log entries, newest first."""

    entries: list[AuditEntry]


class GetVerificationHistoryUseCase(BaseUseCase):
    """Use case for reading a user's card verification log."""

    def __init__(self, orchestrator: BatchRedemptionOrchestrator) -> None:
        self.orchestrator = orchestrator

    async def execute(
        self, request: GetVerificationHistoryRequest
    ) -> GetVerificationHistoryResponse:
        with logfire.span("get_verification_history.execute", user_id=request.user_id):
            entries = await self.orchestrator.verification_history(
                UserId(request.user_id), request.limit
            )
            return GetVerificationHistoryResponse(entries=entries)
