"""In-memory invite redemption repository for testing."""

import asyncio
from typing import Optional

from mailpool.domain.model import InviteRedemptionRecord, RedemptionUse
from mailpool.domain.repository import InviteRedemptionRepository
from mailpool.domain.value import InviteId


class InMemoryInviteRedemptionRepository(InviteRedemptionRepository):
    """In-memory implementation of InviteRedemptionRepository for testing.

    Reads yield to the event loop so concurrent redemptions interleave the
    way they would against a real store.
    """

    def __init__(self) -> None:
        self._records: dict[InviteId, InviteRedemptionRecord] = {}
        self._lock = asyncio.Lock()

    async def find_by_invite_id(
        self, invite_id: InviteId
    ) -> Optional[InviteRedemptionRecord]:
        """Find the redemption record of an invite."""
        await asyncio.sleep(0)
        return self._records.get(invite_id)

    async def append_use_if_count(
        self, invite_id: InviteId, expected_count: int, use: RedemptionUse
    ) -> bool:
        """Append a use if used_count still equals expected_count."""
        async with self._lock:
            record = self._records.get(invite_id) or InviteRedemptionRecord(
                invite_id=invite_id
            )
            if record.used_count != expected_count:
                return False
            self._records[invite_id] = InviteRedemptionRecord(
                invite_id=invite_id,
                used_count=record.used_count + 1,
                used_by=[*record.used_by, use],
            )
            return True
