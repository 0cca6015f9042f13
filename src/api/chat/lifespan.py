"""Process lifecycle for hosts embedding the room reconciler.

Hosts wrap their own lifetime in ``reconciler_lifespan()``: logging is
configured on entry, and the homeserver client and database pool are
released on exit.

Usage:
    async with reconciler_lifespan():
        async with unit_of_work() as session:
            handler = build_membership_event_handler(session, ...)
            await handler.handle(event)
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from chat.dependencies import close_matrix_client
from infrastructure.database import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultStartupProbe, StartupProbe
from infrastructure.settings import get_matrix_settings, get_settings
from infrastructure.version import __version__


@asynccontextmanager
async def reconciler_lifespan(probe: StartupProbe | None = None) -> AsyncIterator[None]:
    """Configure logging, then release shared resources on exit.

    A failure while releasing one resource does not prevent releasing the
    others; it is reported through the probe.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    probe = probe or DefaultStartupProbe()
    probe.reconciler_started(
        app_name=settings.app_name,
        version=__version__,
        server_name=get_matrix_settings().server_name,
    )

    try:
        yield
    finally:
        for step, close in (
            ("matrix_client", close_matrix_client),
            ("database", close_database_connections),
        ):
            try:
                await close()
            except Exception as e:
                probe.shutdown_step_failed(step=step, error=str(e))
        probe.reconciler_stopped(app_name=settings.app_name)
