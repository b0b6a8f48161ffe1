"""Mint card key use case."""

import logfire
from pydantic import BaseModel

from mailpool.application.usecase.base import BaseUseCase
from mailpool.domain.model import CardKeyPayload
from mailpool.domain.service import CardKeyVerifier, MintCardKeyRequest


class MintCardKeyResponse(BaseModel):
    """Minted card key."""

    token: str
    payload: CardKeyPayload


class MintCardKeyUseCase(BaseUseCase):
    """Use case for minting a card key for a sales channel."""

    def __init__(self, card_key_verifier: CardKeyVerifier) -> None:
        self.card_key_verifier = card_key_verifier

    async def execute(self, request: MintCardKeyRequest) -> MintCardKeyResponse:
        with logfire.span("mint_card_key.execute", source=request.source.value):
            minted = self.card_key_verifier.mint(request)
            return MintCardKeyResponse(token=minted.token, payload=minted.payload)
