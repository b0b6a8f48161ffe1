"""PostgreSQL implementation of AuditLog repository."""

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.model import AuditEntry
from mailpool.domain.repository import AuditLogRepository
from mailpool.domain.value import UserId
from mailpool.persistence.database import translate_store_errors
from mailpool.persistence.mappers import audit_entry_to_dict, row_to_audit_entry
from mailpool.persistence.tables import card_verification_logs_table


class PostgresAuditLogRepository(AuditLogRepository):
    """PostgreSQL implementation of AuditLogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def append(self, entries: list[AuditEntry]) -> None:
        """Append audit entries inside a savepoint.

        A failed insert rolls back to the savepoint only, leaving the
        request transaction (and the grants in it) intact.
        """
        if not entries:
            return
        async with translate_store_errors("audit.append"):
            async with self.session.begin_nested():
                await self.session.execute(
                    insert(card_verification_logs_table),
                    [audit_entry_to_dict(entry) for entry in entries],
                )

    async def find_by_user(self, user_id: UserId, limit: int = 100) -> list[AuditEntry]:
        """Find the most recent entries of a user."""
        async with translate_store_errors("audit.find_by_user"):
            stmt = (
                select(card_verification_logs_table)
                .where(card_verification_logs_table.c.user_id == user_id)
                .order_by(
                    card_verification_logs_table.c.verified_at.desc(),
                    card_verification_logs_table.c.id.desc(),
                )
                .limit(limit)
            )
            result = await self.session.execute(stmt)
            return [row_to_audit_entry(dict(row)) for row in result.mappings().all()]
