"""In-memory pooled identity repository for testing."""

import asyncio
from datetime import datetime, timezone

from mailpool.domain.model import PooledIdentity
from mailpool.domain.repository import PooledIdentityRepository
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId


class InMemoryPooledIdentityRepository(PooledIdentityRepository):
    """In-memory implementation of PooledIdentityRepository for testing."""

    def __init__(self) -> None:
        # Insertion order doubles as claim order
        self._identities: dict[str, PooledIdentity] = {}
        self._lock = asyncio.Lock()

    async def claim_available(
        self,
        count: int,
        assignee: UserId,
        tier: PoolTier | None = None,
        protocol: IdentityProtocol | None = None,
    ) -> list[str]:
        """Claim up to count available identities."""
        await asyncio.sleep(0)
        async with self._lock:
            claimed: list[str] = []
            now = datetime.now(timezone.utc)
            for email, identity in self._identities.items():
                if len(claimed) >= count:
                    break
                if not identity.is_available:
                    continue
                if tier and identity.tier is not tier:
                    continue
                if protocol and identity.protocol is not protocol:
                    continue
                self._identities[email] = identity.model_copy(
                    update={"assigned_to": assignee, "assigned_at": now}
                )
                claimed.append(email)
            return claimed

    async def load_statuses(self) -> dict[str, bool]:
        """Load the ban status of every identity."""
        await asyncio.sleep(0)
        return {email: i.banned for email, i in self._identities.items()}

    async def set_banned(self, email: str, banned: bool) -> bool:
        """Update the ban status of an identity."""
        async with self._lock:
            identity = self._identities.get(email)
            if not identity:
                return False
            self._identities[email] = identity.model_copy(update={"banned": banned})
            return True

    async def add(self, identities: list[PooledIdentity]) -> int:
        """Insert identities, skipping known emails."""
        async with self._lock:
            added = 0
            for identity in identities:
                if identity.email in self._identities:
                    continue
                self._identities[identity.email] = identity
                added += 1
            return added

    def get(self, email: str) -> PooledIdentity | None:
        """Look up an identity (test inspection helper)."""
        return self._identities.get(email)
