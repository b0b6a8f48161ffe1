"""Audit log repository interface."""

from abc import ABC, abstractmethod

from mailpool.domain.model.audit import AuditEntry
from mailpool.domain.value import UserId


class AuditLogRepository(ABC):
    """Append-only card verification log."""

    @abstractmethod
    async def append(self, entries: list[AuditEntry]) -> None:
        """Append audit entries.

        Args:
            entries: Entries to append, in order
        """
        pass

    @abstractmethod
    async def find_by_user(self, user_id: UserId, limit: int = 100) -> list[AuditEntry]:
        """Find the most recent entries of a user.

        Args:
            user_id: Redeeming user
            limit: Maximum number of entries

        Returns:
            Entries, newest first
        """
        pass
