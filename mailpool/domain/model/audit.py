"""Audit log entity."""

from datetime import datetime

from mailpool.domain.model.common import DomainModel
from mailpool.domain.value import CardDuration, CardSource, UserId


class AuditEntry(DomainModel):
    """One successful redemption unit (one valid card key).

    email_count is what the key entitled, not what was actually granted.
    """

    subject_key: str
    user_id: UserId
    verified_at: datetime
    email_count: int
    duration: CardDuration
    source: CardSource
    custom_source: str | None = None
