"""PostgreSQL implementation of PooledIdentity repository."""

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.model import PooledIdentity
from mailpool.domain.repository import PooledIdentityRepository
from mailpool.domain.value import IdentityProtocol, PoolTier, UserId
from mailpool.persistence.database import translate_store_errors
from mailpool.persistence.mappers import identity_to_dict
from mailpool.persistence.tables import pooled_identities_table


class PostgresPooledIdentityRepository(PooledIdentityRepository):
    """PostgreSQL implementation of PooledIdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def claim_available(
        self,
        count: int,
        assignee: UserId,
        tier: PoolTier | None = None,
        protocol: IdentityProtocol | None = None,
    ) -> list[str]:
        """Claim up to count available identities in one statement.

        Candidate rows are locked with FOR UPDATE SKIP LOCKED, so concurrent
        claims pick disjoint rows instead of waiting on each other.

        Args:
            count: Maximum number of identities
            assignee: User the identities are granted to
            tier: Optional tier filter
            protocol: Optional protocol filter

        Returns:
            Claimed emails
        """
        table = pooled_identities_table
        async with translate_store_errors("identity.claim_available"):
            candidates = select(table.c.email).where(
                table.c.assigned_to.is_(None),
                table.c.banned.is_(False),
            )
            if tier:
                candidates = candidates.where(table.c.tier == tier.value)
            if protocol:
                candidates = candidates.where(table.c.protocol == protocol.value)
            candidates = (
                candidates.order_by(table.c.created_at, table.c.email)
                .limit(count)
                .with_for_update(skip_locked=True)
            )

            stmt = (
                update(table)
                .where(table.c.email.in_(candidates.scalar_subquery()))
                .values(assigned_to=assignee, assigned_at=func.now())
                .returning(table.c.email)
            )
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def load_statuses(self) -> dict[str, bool]:
        """Load the ban status of every identity."""
        async with translate_store_errors("identity.load_statuses"):
            stmt = select(
                pooled_identities_table.c.email, pooled_identities_table.c.banned
            )
            result = await self.session.execute(stmt)
            return {row.email: row.banned for row in result.all()}

    async def set_banned(self, email: str, banned: bool) -> bool:
        """Update the ban status of an identity.

        Returns:
            True if the identity exists
        """
        async with translate_store_errors("identity.set_banned"):
            stmt = (
                update(pooled_identities_table)
                .where(pooled_identities_table.c.email == email)
                .values(banned=banned)
                .returning(pooled_identities_table.c.email)
            )
            result = await self.session.execute(stmt)
            return result.first() is not None

    async def add(self, identities: list[PooledIdentity]) -> int:
        """Insert identities, skipping emails already present.

        Returns:
            Number of inserted identities
        """
        if not identities:
            return 0
        async with translate_store_errors("identity.add"):
            stmt = (
                pg_insert(pooled_identities_table)
                .values([identity_to_dict(identity) for identity in identities])
                .on_conflict_do_nothing(index_elements=["email"])
                .returning(pooled_identities_table.c.email)
            )
            result = await self.session.execute(stmt)
            return len(result.all())
