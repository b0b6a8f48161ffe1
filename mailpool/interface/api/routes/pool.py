"""Pooled identity routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, status
from pydantic import BaseModel

from mailpool.application.usecase.pool import (
    AddIdentitiesRequest,
    AddIdentitiesResponse,
    AddIdentitiesUseCase,
    GetPoolStatsUseCase,
    PoolStatsResponse,
    RefreshPoolUseCase,
    UpdateIdentityStatusRequest,
    UpdateIdentityStatusResponse,
    UpdateIdentityStatusUseCase,
)
from mailpool.domain.error import DomainError
from mailpool.interface.error import to_http_exception

router = APIRouter(prefix="/pool", tags=["pool"], route_class=DishkaRoute)


class UpdateIdentityStatusAPIRequest(BaseModel):
    """API request for banning or unbanning an identity."""

    banned: bool


@router.post(
    "/identities",
    response_model=AddIdentitiesResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_identities(
    request: AddIdentitiesRequest,
    add_identities_use_case: FromDishka[AddIdentitiesUseCase],
) -> AddIdentitiesResponse:
    """Add identities to the pool; known emails are skipped."""
    try:
        return await add_identities_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.put("/identities/{email}/status", response_model=UpdateIdentityStatusResponse)
async def update_identity_status(
    email: str,
    request: UpdateIdentityStatusAPIRequest,
    update_identity_status_use_case: FromDishka[UpdateIdentityStatusUseCase],
) -> UpdateIdentityStatusResponse:
    """Ban or unban an identity.

    Raises:
        HTTPException: 404 if the identity is not in the pool
    """
    try:
        return await update_identity_status_use_case.execute(
            UpdateIdentityStatusRequest(email=email, banned=request.banned)
        )
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/stats", response_model=PoolStatsResponse)
async def get_pool_stats(
    get_pool_stats_use_case: FromDishka[GetPoolStatsUseCase],
) -> PoolStatsResponse:
    """Identity counts from the status cache."""
    try:
        return await get_pool_stats_use_case.execute()
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/refresh", response_model=PoolStatsResponse)
async def refresh_pool(
    refresh_pool_use_case: FromDishka[RefreshPoolUseCase],
) -> PoolStatsResponse:
    """Rehydrate the status cache from the store."""
    try:
        return await refresh_pool_use_case.execute()
    except DomainError as e:
        raise to_http_exception(e)
