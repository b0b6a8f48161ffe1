"""Invite use cases."""

from mailpool.application.usecase.invite.get_invite_usage import (
    GetInviteUsageRequest,
    GetInviteUsageResponse,
    GetInviteUsageUseCase,
)
from mailpool.application.usecase.invite.issue_invite import (
    IssueInviteRequest,
    IssueInviteResponse,
    IssueInviteUseCase,
)
from mailpool.application.usecase.invite.redeem_invite import (
    RedeemInviteRequest,
    RedeemInviteResponse,
    RedeemInviteUseCase,
)
from mailpool.application.usecase.invite.verify_invite import (
    VerifyInviteRequest,
    VerifyInviteResponse,
    VerifyInviteUseCase,
)

__all__ = [
    "GetInviteUsageRequest",
    "GetInviteUsageResponse",
    "GetInviteUsageUseCase",
    "IssueInviteRequest",
    "IssueInviteResponse",
    "IssueInviteUseCase",
    "RedeemInviteRequest",
    "RedeemInviteResponse",
    "RedeemInviteUseCase",
    "VerifyInviteRequest",
    "VerifyInviteResponse",
    "VerifyInviteUseCase",
]
