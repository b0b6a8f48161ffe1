"""Card-key entities."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from mailpool.domain.model.common import DomainModel
from mailpool.domain.value import CardDuration, CardKeyId, CardSource, UserId


class CardKeyPayload(DomainModel):
    """Entitlement sealed into a card key.

    Produced once at minting time and never changed. Consumption state
    lives in the backing store, keyed by ``key``.
    """

    key: CardKeyId
    duration: CardDuration
    email_count: int = Field(gt=0)
    source: CardSource
    custom_source: str | None = None
    issued_at: datetime
    expires_at: datetime | None = None
    reusable: bool = False

    @field_validator("duration", mode="before")
    @classmethod
    def normalize_duration(cls, v):
        """Accept display labels and compact codes."""
        if isinstance(v, str):
            return CardDuration(v)
        return v

    @model_validator(mode="after")
    def check_custom_source(self) -> "CardKeyPayload":
        if self.source is CardSource.CUSTOM and not self.custom_source:
            raise ValueError("custom_source is required for custom card keys")
        return self

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class CardKeyConsumption(DomainModel):
    """Record that a single-use card key was redeemed."""

    key: CardKeyId
    user_id: UserId
    consumed_at: datetime
