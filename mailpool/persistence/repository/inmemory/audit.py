"""In-memory audit log repository for testing."""

from mailpool.domain.model import AuditEntry
from mailpool.domain.repository import AuditLogRepository
from mailpool.domain.value import UserId


class InMemoryAuditLogRepository(AuditLogRepository):
    """In-memory implementation of AuditLogRepository for testing."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    async def append(self, entries: list[AuditEntry]) -> None:
        """Append audit entries."""
        self.entries.extend(entries)

    async def find_by_user(self, user_id: UserId, limit: int = 100) -> list[AuditEntry]:
        """Find the most recent entries of a user."""
        matches = [entry for entry in self.entries if entry.user_id == user_id]
        return list(reversed(matches))[:limit]
