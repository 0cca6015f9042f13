"""Alembic environment for the room registry.

Runs migrations over the asyncpg engine built from ROOMS_DB_* settings.
"""

import asyncio

from alembic import context
from sqlalchemy.engine import Connection

from chat.infrastructure.models import RoomMemberModel, RoomModel  # noqa: F401
from infrastructure.database.engines import build_async_url, create_engine
from infrastructure.database.models import Base
from infrastructure.settings import get_database_settings

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit migration SQL without a database connection."""
    context.configure(
        url=build_async_url(get_database_settings()),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations over an async connection."""
    engine = create_engine(get_database_settings())

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
