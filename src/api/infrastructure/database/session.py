"""Async session management for the room registry.

Provides a process-wide engine and a unit-of-work context manager. Repositories
flush but never commit; the unit of work commits on success and rolls back on
any exception. Services may commit inside the unit of work to make a write
durable early; only work after the last such commit is rolled back.
"""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_engine
from infrastructure.observability import DatabaseProbe, DefaultDatabaseProbe
from infrastructure.settings import get_database_settings

# Module-level probe for observability
_probe: DatabaseProbe = DefaultDatabaseProbe()

_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None

# Thread lock for safe engine initialization
_engine_lock = threading.Lock()


def get_engine() -> AsyncEngine:
    """Get the registry engine (singleton).

    Creates the engine and its sessionmaker on first call.
    Uses double-check locking for thread-safe initialization.
    """
    global _engine, _sessionmaker
    if _engine is None:
        with _engine_lock:
            # Double-check after acquiring lock
            if _engine is None:
                settings = get_database_settings()
                _engine = create_engine(settings)
                _sessionmaker = async_sessionmaker(
                    _engine,
                    expire_on_commit=False,
                    class_=AsyncSession,
                )
                _probe.pool_initialized(
                    settings.connection_string,
                    settings.pool_min_connections,
                    settings.pool_max_connections,
                )
    return _engine


@asynccontextmanager
async def unit_of_work() -> AsyncIterator[AsyncSession]:
    """Open a session whose work is committed when the block succeeds.

    Usage:
        async with unit_of_work() as session:
            service = build_reconciliation_service(session, ...)
            await service.add_member(entity, user_id, tenant_id)

    Yields:
        AsyncSession; a transaction begins on first use
    """
    get_engine()
    assert _sessionmaker is not None

    async with _sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            await session.rollback()
            _probe.transaction_rolled_back(error=str(e))
            raise


async def close_database_connections() -> None:
    """Dispose of the engine. Should be called on shutdown."""
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _probe.pool_closed()
        _engine = None
        _sessionmaker = None
