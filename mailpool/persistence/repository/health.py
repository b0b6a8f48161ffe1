"""PostgreSQL implementation of StoreHealth repository."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.repository import StoreHealthRepository
from mailpool.persistence.database import translate_store_errors


class PostgresStoreHealthRepository(StoreHealthRepository):
    """Readiness probe running SELECT 1."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def ping(self) -> None:
        async with translate_store_errors("health.ping"):
            await self.session.execute(text("SELECT 1"))
