"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DatabaseProbe(Protocol):
    """Domain probe for registry database observability."""

    def pool_initialized(self, connection: str, min_conn: int, max_conn: int) -> None:
        """Record that the connection pool was initialized."""
        ...

    def transaction_rolled_back(self, error: str) -> None:
        """Record that a unit of work was rolled back."""
        ...

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> DatabaseProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultDatabaseProbe:
    """Default implementation of DatabaseProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultDatabaseProbe:
        """Create a new probe with observation context bound."""
        return DefaultDatabaseProbe(logger=self._logger, context=context)

    def pool_initialized(self, connection: str, min_conn: int, max_conn: int) -> None:
        """Record that the connection pool was initialized."""
        self._logger.info(
            "database_pool_initialized",
            connection=connection,
            min_connections=min_conn,
            max_connections=max_conn,
            **self._get_context_kwargs(),
        )

    def transaction_rolled_back(self, error: str) -> None:
        """Record that a unit of work was rolled back."""
        self._logger.warning(
            "database_transaction_rolled_back",
            error=error,
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        """Record that the connection pool was closed."""
        self._logger.info("database_pool_closed", **self._get_context_kwargs())
