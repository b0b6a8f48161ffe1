"""PostgreSQL implementation of InviteRedemption repository."""

from typing import Optional

from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.model import InviteRedemptionRecord, RedemptionUse
from mailpool.domain.repository import InviteRedemptionRepository
from mailpool.domain.value import InviteId
from mailpool.persistence.database import translate_store_errors
from mailpool.persistence.mappers import (
    redemption_use_to_dict,
    rows_to_redemption_record,
)
from mailpool.persistence.tables import (
    invite_redemption_uses_table,
    invite_redemptions_table,
)


class PostgresInviteRedemptionRepository(InviteRedemptionRepository):
    """PostgreSQL implementation of InviteRedemptionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_invite_id(
        self, invite_id: InviteId
    ) -> Optional[InviteRedemptionRecord]:
        """Find the redemption record of an invite.

        Args:
            invite_id: Invite ID to look up

        Returns:
            Record with its uses in order, None if never redeemed
        """
        async with translate_store_errors("invite_redemption.find"):
            stmt = select(invite_redemptions_table.c.used_count).where(
                invite_redemptions_table.c.invite_id == invite_id
            )
            used_count = (await self.session.execute(stmt)).scalar_one_or_none()
            if used_count is None:
                return None

            uses_stmt = (
                select(invite_redemption_uses_table)
                .where(invite_redemption_uses_table.c.invite_id == invite_id)
                .order_by(invite_redemption_uses_table.c.seq)
            )
            rows = (await self.session.execute(uses_stmt)).mappings().all()
            return rows_to_redemption_record(
                invite_id, used_count, [dict(row) for row in rows]
            )

    async def append_use_if_count(
        self, invite_id: InviteId, expected_count: int, use: RedemptionUse
    ) -> bool:
        """Append a use if used_count still equals expected_count.

        The first use inserts the header row (ON CONFLICT DO NOTHING); later
        uses update it conditionally on the expected count. Either way the
        row lock serializes concurrent writers and the loser matches no row.

        Args:
            invite_id: Invite ID
            expected_count: used_count observed by the caller
            use: Use to append

        Returns:
            True if the use was recorded
        """
        async with translate_store_errors("invite_redemption.append_use"):
            if expected_count == 0:
                stmt = (
                    pg_insert(invite_redemptions_table)
                    .values(invite_id=invite_id, used_count=1)
                    .on_conflict_do_nothing(index_elements=["invite_id"])
                    .returning(invite_redemptions_table.c.invite_id)
                )
            else:
                stmt = (
                    update(invite_redemptions_table)
                    .where(
                        invite_redemptions_table.c.invite_id == invite_id,
                        invite_redemptions_table.c.used_count == expected_count,
                    )
                    .values(
                        used_count=invite_redemptions_table.c.used_count + 1,
                        updated_at=func.now(),
                    )
                    .returning(invite_redemptions_table.c.invite_id)
                )

            result = await self.session.execute(stmt)
            if result.first() is None:
                return False

            await self.session.execute(
                insert(invite_redemption_uses_table).values(
                    **redemption_use_to_dict(invite_id, expected_count + 1, use)
                )
            )
            await self.session.flush()
            return True
