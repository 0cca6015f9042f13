"""Domain probe for reconciler startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class StartupProbe(Protocol):
    """Domain probe for reconciler lifecycle operations."""

    def reconciler_started(self, app_name: str, version: str, server_name: str) -> None:
        """Record that the reconciler finished initializing."""
        ...

    def reconciler_stopped(self, app_name: str) -> None:
        """Record that the reconciler released its resources."""
        ...

    def shutdown_step_failed(self, step: str, error: str) -> None:
        """Record that releasing one resource failed during shutdown."""
        ...

    def with_context(self, context: ObservationContext) -> StartupProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultStartupProbe:
        """Create a new probe with observation context bound."""
        return DefaultStartupProbe(logger=self._logger, context=context)

    def reconciler_started(self, app_name: str, version: str, server_name: str) -> None:
        """Record that the reconciler finished initializing."""
        self._logger.info(
            "reconciler_started",
            app_name=app_name,
            version=version,
            server_name=server_name,
            **self._get_context_kwargs(),
        )

    def reconciler_stopped(self, app_name: str) -> None:
        """Record that the reconciler released its resources."""
        self._logger.info(
            "reconciler_stopped",
            app_name=app_name,
            **self._get_context_kwargs(),
        )

    def shutdown_step_failed(self, step: str, error: str) -> None:
        """Record that releasing one resource failed during shutdown."""
        self._logger.warning(
            "shutdown_step_failed",
            step=step,
            error=error,
            **self._get_context_kwargs(),
        )
