"""In-memory transaction for testing."""

from mailpool.domain.repository import Transaction


class InMemoryTransaction(Transaction):
    """Counts commits and rollbacks; in-memory writes are not undone."""

    def __init__(self) -> None:
        self.commit_count = 0
        self.rollback_count = 0

    async def commit(self) -> None:
        self.commit_count += 1

    async def rollback(self) -> None:
        self.rollback_count += 1
