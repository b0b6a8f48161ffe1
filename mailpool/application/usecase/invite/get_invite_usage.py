"""Get invite usage use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.model import RedemptionUse
from mailpool.domain.service import InviteRegistry
from mailpool.domain.value import InviteId


class GetInviteUsageRequest(BaseModel):
    """Get invite usage request."""

    invite_id: str


class GetInviteUsageResponse(BaseModel):
    """Usage statistics of one invite."""

    invite_id: str
    used_count: int
    used_by: list[RedemptionUse]


class GetInviteUsageUseCase(BaseUseCase):
    """Use case for admin usage statistics of an invite."""

    def __init__(self, invite_registry: InviteRegistry) -> None:
        self.invite_registry = invite_registry

    async def execute(self, request: GetInviteUsageRequest) -> GetInviteUsageResponse:
        with logfire.span("get_invite_usage.execute", invite_id=request.invite_id):
            record = await self.invite_registry.usage(InviteId(request.invite_id))
            return GetInviteUsageResponse(
                invite_id=record.invite_id,
                used_count=record.used_count,
                used_by=record.used_by,
            )
