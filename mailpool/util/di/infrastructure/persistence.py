"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mailpool.config import Settings
from mailpool.domain.repository import (
    AuditLogRepository,
    CardKeyRepository,
    InviteRedemptionRepository,
    PooledIdentityRepository,
    StoreHealthRepository,
    Transaction,
)
from mailpool.persistence.database import create_engine, create_session_factory
from mailpool.persistence.repository import (
    PostgresAuditLogRepository,
    PostgresCardKeyRepository,
    PostgresInviteRedemptionRepository,
    PostgresPooledIdentityRepository,
    PostgresStoreHealthRepository,
    PostgresTransaction,
)
from mailpool.util.di.base import ProviderBase
from mailpool.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        Writing use cases commit through the Transaction before they respond;
        whatever is left is committed here at the end of the request, or
        rolled back if an exception was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
                logfire.debug("Session committed")
            except Exception as e:
                logfire.warn("Session rollback", error_type=type(e).__name__)
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_transaction(self, session: AsyncSession) -> Transaction:
        """Provide the request transaction handle."""
        return PostgresTransaction(session)

    @provide(scope=Scope.REQUEST)
    def get_invite_redemption_repository(
        self, session: AsyncSession
    ) -> InviteRedemptionRepository:
        """Provide InviteRedemption repository."""
        return PostgresInviteRedemptionRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_card_key_repository(self, session: AsyncSession) -> CardKeyRepository:
        """Provide CardKey repository."""
        return PostgresCardKeyRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_pooled_identity_repository(
        self, session: AsyncSession
    ) -> PooledIdentityRepository:
        """Provide PooledIdentity repository."""
        return PostgresPooledIdentityRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_audit_log_repository(self, session: AsyncSession) -> AuditLogRepository:
        """Provide AuditLog repository."""
        return PostgresAuditLogRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_store_health_repository(
        self, session: AsyncSession
    ) -> StoreHealthRepository:
        """Provide StoreHealth repository."""
        return PostgresStoreHealthRepository(session)
