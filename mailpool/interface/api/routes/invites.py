"""Invite routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, status

from mailpool.application.usecase.invite import (
    GetInviteUsageRequest,
    GetInviteUsageResponse,
    GetInviteUsageUseCase,
    IssueInviteRequest,
    IssueInviteResponse,
    IssueInviteUseCase,
    RedeemInviteRequest,
    RedeemInviteResponse,
    RedeemInviteUseCase,
    VerifyInviteRequest,
    VerifyInviteResponse,
    VerifyInviteUseCase,
)
from mailpool.domain.error import DomainError
from mailpool.interface.error import to_http_exception

router = APIRouter(prefix="/invites", tags=["invites"], route_class=DishkaRoute)


@router.post(
    "", response_model=IssueInviteResponse, status_code=status.HTTP_201_CREATED
)
async def issue_invite(
    request: IssueInviteRequest,
    issue_invite_use_case: FromDishka[IssueInviteUseCase],
) -> IssueInviteResponse:
    """Issue a custom or quick invite.

    Raises:
        HTTPException: 400 if a custom invite is incomplete or non-positive
    """
    try:
        return await issue_invite_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/verify", response_model=VerifyInviteResponse)
async def verify_invite(
    request: VerifyInviteRequest,
    verify_invite_use_case: FromDishka[VerifyInviteUseCase],
) -> VerifyInviteResponse:
    """Check an invite without using it.

    Invalid, expired and exhausted invites are reported in the body.

    Raises:
        HTTPException: 503 if the store is unavailable
    """
    try:
        return await verify_invite_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/redeem", response_model=RedeemInviteResponse)
async def redeem_invite(
    request: RedeemInviteRequest,
    redeem_invite_use_case: FromDishka[RedeemInviteUseCase],
) -> RedeemInviteResponse:
    """Register through an invite and draw its mailbox quota.

    Raises:
        HTTPException: 503 if the store is unavailable
    """
    try:
        return await redeem_invite_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/{invite_id}/usage", response_model=GetInviteUsageResponse)
async def get_invite_usage(
    invite_id: str,
    get_invite_usage_use_case: FromDishka[GetInviteUsageUseCase],
) -> GetInviteUsageResponse:
    """Usage statistics of an invite."""
    try:
        return await get_invite_usage_use_case.execute(
            GetInviteUsageRequest(invite_id=invite_id)
        )
    except DomainError as e:
        raise to_http_exception(e)
