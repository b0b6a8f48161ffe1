"""PostgreSQL implementation of the request Transaction."""

import logfire
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from mailpool.domain.error import UnavailableError
from mailpool.domain.repository import Transaction
from mailpool.persistence.database import translate_store_errors


class PostgresTransaction(Transaction):
    """Commits or rolls back the request's AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        try:
            async with translate_store_errors("transaction.commit"):
                await self.session.commit()
        except DBAPIError as e:
            # A rejected commit (serialization failure) leaves nothing written
            logfire.error(
                "Request transaction commit rejected",
                error_type=type(e).__name__,
                error=str(e),
            )
            raise UnavailableError() from e
        logfire.debug("Request transaction committed")

    async def rollback(self) -> None:
        async with translate_store_errors("transaction.rollback"):
            await self.session.rollback()
        logfire.warn("Request transaction rolled back")
