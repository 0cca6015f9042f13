"""Observation context for domain-oriented observability.

Observation contexts collect and manage contextual metadata for instrumentation,
following the Domain Oriented Observability pattern.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable context containing metadata for observability.

    Captures request-scoped metadata that should be included with all
    instrumentation events. Probes already log the tenant, entity and user
    an event concerns, so the context carries only what identifies the
    triggering operation.

    Attributes:
        request_id: Unique identifier for the current request/operation.
        correlation_id: Identifier of the inbound message that triggered the
            operation (e.g. a membership event's delivery id).
        actor_id: Identifier of whoever triggered the operation, if known.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", actor_id="alice")
        probe = DefaultRoomReconciliationProbe().with_context(context)
    """

    request_id: str | None = None
    correlation_id: str | None = None
    actor_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.correlation_id is not None:
            result["correlation_id"] = self.correlation_id
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id
        result.update(self.extra)
        return result

    def with_correlation(self, correlation_id: str) -> ObservationContext:
        """Create a new context with the correlation id set."""
        return ObservationContext(
            request_id=self.request_id,
            correlation_id=correlation_id,
            actor_id=self.actor_id,
            extra=self.extra,
        )

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        new_extra = {**self.extra, **kwargs}
        return ObservationContext(
            request_id=self.request_id,
            correlation_id=self.correlation_id,
            actor_id=self.actor_id,
            extra=new_extra,
        )
