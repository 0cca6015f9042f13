"""Domain probe for room registry operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to room persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoomRepositoryProbe(Protocol):
    """Domain probe for room repository operations."""

    def room_saved(self, room_id: str, member_count: int) -> None:
        """Record that a room was successfully saved."""
        ...

    def room_not_found(self, room_id: str) -> None:
        """Record that a room was not found."""
        ...

    def room_deleted(self, room_id: str) -> None:
        """Record that a room was deleted."""
        ...

    def duplicate_room(self, entity: str, tenant_id: str) -> None:
        """Record that a second room for the same entity was rejected."""
        ...

    def with_context(self, context: ObservationContext) -> RoomRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoomRepositoryProbe:
    """Default implementation of RoomRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoomRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoomRepositoryProbe(logger=self._logger, context=context)

    def room_saved(self, room_id: str, member_count: int) -> None:
        """Record that a room was successfully saved."""
        self._logger.info(
            "room_saved",
            room_id=room_id,
            member_count=member_count,
            **self._get_context_kwargs(),
        )

    def room_not_found(self, room_id: str) -> None:
        """Record that a room was not found."""
        self._logger.debug(
            "room_not_found",
            room_id=room_id,
            **self._get_context_kwargs(),
        )

    def room_deleted(self, room_id: str) -> None:
        """Record that a room was deleted."""
        self._logger.info(
            "room_record_deleted",
            room_id=room_id,
            **self._get_context_kwargs(),
        )

    def duplicate_room(self, entity: str, tenant_id: str) -> None:
        """Record that a second room for the same entity was rejected."""
        self._logger.warning(
            "duplicate_room",
            entity=entity,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )
