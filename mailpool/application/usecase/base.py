"""Base use case."""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import logfire

from mailpool.domain.error import UnavailableError
from mailpool.domain.repository import Transaction


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass


class TransactionalUseCase(BaseUseCase):
    """Use case whose writes must land together or not at all."""

    def __init__(self, transaction: Transaction) -> None:
        self.transaction = transaction

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Commit the request transaction once the block completes.

        The transaction is rolled back if the store drops out midway or the
        commit itself fails; UnavailableError is re-raised either way.
        """
        try:
            yield
            await self.transaction.commit()
        except UnavailableError:
            logfire.warn("Store unavailable, rolling back", use_case=type(self).__name__)
            await self.transaction.rollback()
            raise
