"""Invite entities.

An invite is a sealed, self-describing token. Its payload is immutable; the
only mutable state is the redemption record kept by the backing store.
"""

from datetime import datetime

from pydantic import Field

from mailpool.domain.model.common import DomainModel
from mailpool.domain.value import InviteId, RegistrationMethod, UserId

SECONDS_PER_DAY = 86400


class RegistrationMethods(DomainModel):
    """Registration methods an invite opens up."""

    linuxdo: bool = False
    google: bool = False
    card_key: bool = False
    others: bool = False

    @classmethod
    def all_enabled(cls) -> "RegistrationMethods":
        return cls(linuxdo=True, google=True, card_key=True, others=True)

    def allows(self, method: RegistrationMethod) -> bool:
        return getattr(self, method.value)


class InvitePayload(DomainModel):
    """Invite payload sealed into the invite token.

    Business rules:
    - max_registrations may be 0 (an invite that can never be used)
    - expires_at is an absolute UTC instant; the invite is expired once now >= expires_at
    - quotas are granted once per successful redemption
    """

    id: InviteId
    created_at: datetime
    created_by: str | None = None
    expires_at: datetime
    imap_email_count: int = Field(ge=0)
    graph_email_count: int = Field(ge=0)
    max_registrations: int = Field(ge=0)
    registration_methods: RegistrationMethods = RegistrationMethods()
    allow_batch_add_emails: bool = True
    auto_create_trial_account: bool = False

    @property
    def valid_days(self) -> int:
        """Validity window in whole days, as requested at issuance."""
        seconds = (self.expires_at - self.created_at).total_seconds()
        return round(seconds / SECONDS_PER_DAY)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class RedemptionUse(DomainModel):
    """One successful redemption of an invite."""

    user_id: UserId
    method: RegistrationMethod
    timestamp: datetime


class InviteRedemptionRecord(DomainModel):
    """Redemption accounting for one invite.

    used_count always equals len(used_by). A record that was never written
    reads as an empty record.
    """

    invite_id: InviteId
    used_count: int = 0
    used_by: list[RedemptionUse] = []

    def remaining(self, max_registrations: int) -> int:
        return max(0, max_registrations - self.used_count)
