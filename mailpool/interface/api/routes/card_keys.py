"""Card-key routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, status

from mailpool.application.usecase.card import (
    GetVerificationHistoryRequest,
    GetVerificationHistoryResponse,
    GetVerificationHistoryUseCase,
    MintCardKeyResponse,
    MintCardKeyUseCase,
    VerifyCardKeysRequest,
    VerifyCardKeysResponse,
    VerifyCardKeysUseCase,
)
from mailpool.domain.error import DomainError
from mailpool.domain.service import MintCardKeyRequest
from mailpool.interface.error import to_http_exception

router = APIRouter(prefix="/card-keys", tags=["card-keys"], route_class=DishkaRoute)


@router.post(
    "", response_model=MintCardKeyResponse, status_code=status.HTTP_201_CREATED
)
async def mint_card_key(
    request: MintCardKeyRequest,
    mint_card_key_use_case: FromDishka[MintCardKeyUseCase],
) -> MintCardKeyResponse:
    """Mint a card key."""
    try:
        return await mint_card_key_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.post("/batch-verify", response_model=VerifyCardKeysResponse)
async def batch_verify_card_keys(
    request: VerifyCardKeysRequest,
    verify_card_keys_use_case: FromDishka[VerifyCardKeysUseCase],
) -> VerifyCardKeysResponse:
    """Verify and redeem a batch of card keys.

    Per-key failures are reported in results; the call itself only fails
    for an empty or oversized batch (400) or an unavailable store (503).
    """
    try:
        return await verify_card_keys_use_case.execute(request)
    except DomainError as e:
        raise to_http_exception(e)


@router.get("/verifications/{user_id}", response_model=GetVerificationHistoryResponse)
async def get_verification_history(
    user_id: str,
    get_verification_history_use_case: FromDishka[GetVerificationHistoryUseCase],
    limit: int = Query(default=50, ge=1, le=100),
) -> GetVerificationHistoryResponse:
    """Recent card verification log of a user."""
    try:
        return await get_verification_history_use_case.execute(
            GetVerificationHistoryRequest(user_id=user_id, limit=limit)
        )
    except DomainError as e:
        raise to_http_exception(e)
