"""Issue invite use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.model import InvitePayload, RegistrationMethods
from mailpool.domain.service import InviteConfig, InviteRegistry
from mailpool.domain.value import InviteType


class IssueInviteRequest(BaseModel):
    """Request to issue an invite.

    For "custom" invites every count and valid_days is required and must
    be positive. "quick" invites ignore them.
    """

    type: InviteType = InviteType.CUSTOM
    imap_email_count: int | None = None
    graph_email_count: int | None = None
    max_registrations: int | None = None
    valid_days: int | None = None
    registration_methods: RegistrationMethods | None = None
    allow_batch_add_emails: bool = True
    auto_create_trial_account: bool = False
    created_by: str | None = None


class IssueInviteResponse(BaseModel):
    """Issued invite."""

    token: str
    url: str
    payload: InvitePayload


class IssueInviteUseCase(BaseUseCase):
    """Use case for issuing a sealed invite."""

    def __init__(self, invite_registry: InviteRegistry) -> None:
        """Initialize use case.

        Args:
            invite_registry: Invite domain service
        """
        self.invite_registry = invite_registry

    async def execute(self, request: IssueInviteRequest) -> IssueInviteResponse:
        """Issue an invite.

        Raises:
            ValidationError: If a custom request is incomplete or non-positive
        """
        with logfire.span("issue_invite.execute", type=request.type.value):
            issued = self.invite_registry.issue(
                InviteConfig.model_validate(request.model_dump())
            )
            return IssueInviteResponse(
                token=issued.token, url=issued.url, payload=issued.payload
            )
