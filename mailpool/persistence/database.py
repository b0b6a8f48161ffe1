"""Database connection and session management.

Provides async database engine and session factory for PostgreSQL.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import logfire
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mailpool.config import Settings
from mailpool.domain.error import UnavailableError


def create_engine(settings: Settings) -> AsyncEngine:
    """Create async database engine.

    Args:
        settings: Application settings with database URL

    Returns:
        Configured async engine
    """
    database = settings.database
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,  # Log SQL queries in debug mode
        pool_pre_ping=True,  # Verify connections before using
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        pool_timeout=database.connect_timeout_seconds,
        connect_args={"timeout": database.connect_timeout_seconds},  # asyncpg
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory.

    Args:
        engine: Database engine

    Returns:
        Session factory for creating database sessions
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,  # Manual flushing for better control
        autocommit=False,  # Explicit transaction management
    )


@asynccontextmanager
async def get_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Get database session with automatic cleanup.

    Args:
        session_factory: Factory for creating sessions

    Yields:
        Database session
    """
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def translate_store_errors(operation: str) -> AsyncGenerator[None, None]:
    """Surface connectivity failures as UnavailableError.

    Driver error text is logged, never propagated to callers.

    Args:
        operation: Name used in logs
    """
    try:
        yield
    except (
        OperationalError,
        InterfaceError,
        PoolTimeoutError,
        OSError,
        asyncio.TimeoutError,
    ) as e:
        logfire.error(
            "Backing store call failed",
            operation=operation,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise UnavailableError() from e
