"""Fixtures for integration tests against PostgreSQL.

Point DATABASE__URL at a dedicated test database: the schema is created
from the table metadata and every mailpool table is emptied before each
test. Tests are skipped when the database cannot be reached.
"""

import asyncio
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mailpool.config import Settings
from mailpool.persistence.database import create_engine, create_session_factory
from mailpool.persistence.tables import metadata

INTEGRATION_DIR = Path(__file__).parent


async def _database_reachable(settings: Settings) -> bool:
    engine = create_engine(settings)
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
        return True
    except (OSError, asyncio.TimeoutError, SQLAlchemyError):
        return False
    finally:
        await engine.dispose()


def pytest_collection_modifyitems(config, items):
    integration_items = [
        item for item in items if INTEGRATION_DIR in item.path.parents
    ]
    if not integration_items:
        return

    settings = Settings()
    if asyncio.run(_database_reachable(settings)):
        return

    skip = pytest.mark.skip(reason="PostgreSQL at DATABASE__URL is not reachable")
    for item in integration_items:
        item.add_marker(skip)


@pytest_asyncio.fixture
async def engine():
    """Engine on a freshly emptied schema."""
    engine = create_engine(Settings())
    async with engine.begin() as connection:
        await connection.run_sync(metadata.create_all)
        table_names = ", ".join(table.name for table in metadata.sorted_tables)
        await connection.execute(text(f"TRUNCATE {table_names} RESTART IDENTITY"))

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)
