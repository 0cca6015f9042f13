"""Integration test fixtures for the room registry.

These fixtures require a running PostgreSQL instance, configured through the
same ROOMS_DB_* variables the reconciler reads. Tests are skipped when the
database cannot be reached.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from chat.infrastructure.models import RoomMemberModel, RoomModel  # noqa: F401
from infrastructure.database import close_database_connections
from infrastructure.database.engines import create_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        ROOMS_DB_HOST, ROOMS_DB_PORT, ROOMS_DB_PASSWORD, etc.
    """
    return DatabaseSettings()


@pytest_asyncio.fixture
async def registry_engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide an engine on a registry whose tables exist."""
    engine = create_engine(integration_db_settings)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL is not reachable: {e}")

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def clean_registry(registry_engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Empty the registry tables before and after each test.

    Member rows go first so the foreign key never blocks the room delete.
    """

    async def cleanup() -> None:
        async with registry_engine.begin() as conn:
            await conn.execute(text("DELETE FROM chat_room_members"))
            await conn.execute(text("DELETE FROM chat_rooms"))

    await cleanup()
    yield
    await cleanup()


@pytest_asyncio.fixture
async def async_session(
    registry_engine: AsyncEngine, clean_registry: None
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session on a clean registry."""
    sessionmaker = async_sessionmaker(registry_engine, expire_on_commit=False)

    async with sessionmaker() as session:
        yield session


@pytest_asyncio.fixture
async def shared_engine(clean_registry: None) -> AsyncGenerator[None, None]:
    """Dispose of the process-wide engine that unit_of_work opens.

    The engine is bound to the test's event loop, so it must not outlive it.
    """
    yield
    await close_database_connections()
