"""PostgreSQL implementation of CardKey repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.model import CardKeyConsumption
from mailpool.domain.repository import CardKeyRepository
from mailpool.domain.value import CardKeyId
from mailpool.persistence.database import translate_store_errors
from mailpool.persistence.mappers import consumption_to_dict, row_to_consumption
from mailpool.persistence.tables import card_key_consumptions_table


class PostgresCardKeyRepository(CardKeyRepository):
    """PostgreSQL implementation of CardKeyRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_consumption(self, key: CardKeyId) -> Optional[CardKeyConsumption]:
        """Find the consumption of a card key."""
        async with translate_store_errors("card_key.find_consumption"):
            stmt = select(card_key_consumptions_table).where(
                card_key_consumptions_table.c.key == key
            )
            result = await self.session.execute(stmt)
            row = result.mappings().first()
            return row_to_consumption(dict(row)) if row else None

    async def consume(self, consumption: CardKeyConsumption) -> bool:
        """Insert the consumption unless the key was already consumed.

        Returns:
            True if this call consumed the key
        """
        async with translate_store_errors("card_key.consume"):
            stmt = (
                pg_insert(card_key_consumptions_table)
                .values(**consumption_to_dict(consumption))
                .on_conflict_do_nothing(index_elements=["key"])
                .returning(card_key_consumptions_table.c.key)
            )
            result = await self.session.execute(stmt)
            return result.first() is not None
