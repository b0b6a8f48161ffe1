"""Card-key domain service."""

import secrets
from datetime import timedelta

import logfire
from pydantic import BaseModel, Field, model_validator

from mailpool.domain.error import AlreadyUsedError, DomainError, ExpiredError
from mailpool.domain.model import CardKeyConsumption, CardKeyPayload
from mailpool.domain.repository import CardKeyRepository
from mailpool.domain.value import (
    CardDuration,
    CardKeyId,
    CardSource,
    ErrorDetail,
    TokenContext,
    UserId,
)

from .base import DEFAULT_STORE_TIMEOUT_SECONDS, Clock, Service, utc_now
from .token_codec import TokenCodec


class MintCardKeyRequest(BaseModel):
    """Card-key minting request."""

    source: CardSource
    custom_source: str | None = None
    email_count: int = Field(gt=0)
    duration: CardDuration
    valid_days: int | None = Field(default=None, gt=0)
    reusable: bool = False

    @model_validator(mode="after")
    def check_custom_source(self) -> "MintCardKeyRequest":
        if self.source is CardSource.CUSTOM and not self.custom_source:
            raise ValueError("custom_source is required for custom card keys")
        return self


class MintedCardKey(BaseModel):
    """Freshly minted card key."""

    payload: CardKeyPayload
    token: str


class CardKeyVerification(BaseModel):
    """Outcome of verifying (or redeeming) one card key."""

    key: str
    is_valid: bool
    data: CardKeyPayload | None = None
    error: ErrorDetail | None = None


class CardKeyVerifier(Service):
    """Domain service for card keys.

    Verification is read-only. Redemption consumes a non-reusable key as a
    whole on its first successful use; reusable keys are never consumed.
    """

    def __init__(
        self,
        codec: TokenCodec,
        card_key_repository: CardKeyRepository,
        store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize card-key verifier.

        Args:
            codec: Token codec
            card_key_repository: Consumption repository
            store_timeout_seconds: Bound on each store call
            clock: Source of the current UTC time
        """
        self.codec = codec
        self.card_key_repository = card_key_repository
        self.store_timeout_seconds = store_timeout_seconds
        self.clock = clock

    def mint(self, request: MintCardKeyRequest) -> MintedCardKey:
        """Mint a new card key.

        Args:
            request: Minting request

        Returns:
            The payload and its sealed token
        """
        with logfire.span(
            "card_key_verifier.mint",
            source=request.source.value,
            duration=request.duration.value,
        ):
            now = self.clock()
            payload = CardKeyPayload(
                key=CardKeyId(secrets.token_hex(8)),
                duration=request.duration,
                email_count=request.email_count,
                source=request.source,
                custom_source=request.custom_source,
                issued_at=now,
                expires_at=(
                    now + timedelta(days=request.valid_days)
                    if request.valid_days
                    else None
                ),
                reusable=request.reusable,
            )
            token = self.codec.seal(payload, TokenContext.CARD)
            logfire.info(
                "Card key minted",
                key=payload.key,
                source=payload.source.value,
                email_count=payload.email_count,
                reusable=payload.reusable,
            )
            return MintedCardKey(payload=payload, token=token)

    async def verify(self, raw_key: str, user_id: UserId) -> CardKeyVerification:
        """Verify a card key without consuming it.

        Args:
            raw_key: Card key as submitted
            user_id: Requesting user

        Returns:
            Verification result; per-key errors are reported, not raised

        Raises:
            UnavailableError: If the store is unreachable
        """
        with logfire.span("card_key_verifier.verify", user_id=user_id):
            try:
                payload = await self._check(raw_key)
            except DomainError as e:
                if e.retryable:
                    raise
                return CardKeyVerification(
                    key=raw_key, is_valid=False, error=ErrorDetail.from_error(e)
                )
            return CardKeyVerification(key=raw_key, is_valid=True, data=payload)

    async def redeem(self, raw_key: str, user_id: UserId) -> CardKeyVerification:
        """Verify a card key and consume it.

        Consumption is a conditional insert; of two concurrent redemptions
        of the same single-use key only one succeeds, the other reports
        already_used.

        Args:
            raw_key: Card key as submitted
            user_id: Redeeming user

        Returns:
            Verification result

        Raises:
            UnavailableError: If the store is unreachable
        """
        with logfire.span("card_key_verifier.redeem", user_id=user_id):
            try:
                payload = await self._check(raw_key)
                if not payload.reusable:
                    consumed = await self._store(
                        self.card_key_repository.consume(
                            CardKeyConsumption(
                                key=payload.key,
                                user_id=user_id,
                                consumed_at=self.clock(),
                            )
                        ),
                        "card_key.consume",
                    )
                    if not consumed:
                        logfire.warn(
                            "Card key consumed concurrently",
                            key=payload.key,
                            user_id=user_id,
                        )
                        raise AlreadyUsedError()
            except DomainError as e:
                if e.retryable:
                    raise
                return CardKeyVerification(
                    key=raw_key, is_valid=False, error=ErrorDetail.from_error(e)
                )

            logfire.info(
                "Card key redeemed",
                key=payload.key,
                user_id=user_id,
                email_count=payload.email_count,
                duration=payload.duration.value,
            )
            return CardKeyVerification(key=raw_key, is_valid=True, data=payload)

    async def _check(self, raw_key: str) -> CardKeyPayload:
        payload = self.codec.unseal_card_key(self.codec.normalize(raw_key))

        if payload.is_expired(self.clock()):
            logfire.info("Expired card key", key=payload.key)
            raise ExpiredError("Card key has expired")

        if not payload.reusable:
            consumption = await self._store(
                self.card_key_repository.find_consumption(payload.key),
                "card_key.find_consumption",
            )
            if consumption:
                logfire.info(
                    "Card key already used",
                    key=payload.key,
                    consumed_by=consumption.user_id,
                )
                raise AlreadyUsedError()

        return payload
