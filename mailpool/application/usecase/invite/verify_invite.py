"""Verify invite use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.model import InvitePayload
from mailpool.domain.service import InviteRegistry
from mailpool.domain.value import ErrorDetail


class VerifyInviteRequest(BaseModel):
    """Verify invite request."""

    token: str


class VerifyInviteResponse(BaseModel):
    """Verify invite response."""

    is_valid: bool
    can_use: bool
    remaining_uses: int | None = None
    error: ErrorDetail | None = None
    payload: InvitePayload | None = None


class VerifyInviteUseCase(BaseUseCase):
    """Use case for checking an invite before registration.

    Lets the frontend show the invite details (or why it cannot be used)
    without consuming a registration.
    """

    def __init__(self, invite_registry: InviteRegistry) -> None:
        self.invite_registry = invite_registry

    async def execute(self, request: VerifyInviteRequest) -> VerifyInviteResponse:
        with logfire.span("verify_invite.execute", token=request.token[:8] + "..."):
            verification = await self.invite_registry.verify(request.token)
            return VerifyInviteResponse(**verification.model_dump())
