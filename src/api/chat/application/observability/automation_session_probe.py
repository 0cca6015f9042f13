"""Protocol for automation identity session observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AutomationSessionProbe(Protocol):
    """Domain probe for automation identity authentication."""

    def automation_authenticated(self, tenant_id: str, identity: str) -> None:
        """Record that the automation identity authenticated for a tenant."""
        ...

    def automation_authentication_failed(self, tenant_id: str, error: str) -> None:
        """Record that the automation identity failed to authenticate."""
        ...

    def with_context(self, context: ObservationContext) -> AutomationSessionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAutomationSessionProbe:
    """Default implementation of AutomationSessionProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultAutomationSessionProbe:
        """Create a new probe with observation context bound."""
        return DefaultAutomationSessionProbe(logger=self._logger, context=context)

    def automation_authenticated(self, tenant_id: str, identity: str) -> None:
        """Record that the automation identity authenticated for a tenant."""
        self._logger.info(
            "automation_authenticated",
            tenant_id=tenant_id,
            identity=identity,
            **self._get_context_kwargs(),
        )

    def automation_authentication_failed(self, tenant_id: str, error: str) -> None:
        """Record that the automation identity failed to authenticate."""
        self._logger.error(
            "automation_authentication_failed",
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )
