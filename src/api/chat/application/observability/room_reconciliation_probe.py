"""Protocol for room reconciliation observability.

Defines the interface for domain probes that capture reconciliation outcomes,
including the degraded conditions the engine absorbs instead of raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoomReconciliationProbe(Protocol):
    """Domain probe for room reconciliation operations."""

    def room_created(
        self,
        room_id: str,
        remote_room_id: str,
        room_alias: str,
        entity: str,
        tenant_id: str,
    ) -> None:
        """Record that a room was provisioned for an entity."""
        ...

    def room_recreation_started(
        self,
        entity: str,
        stale_remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that a stale or empty room reference is being replaced."""
        ...

    def room_creation_conflict(
        self,
        entity: str,
        orphan_remote_room_id: str,
        winner_remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that a concurrent creator won and its room was adopted."""
        ...

    def orphan_room_cleanup_failed(
        self,
        remote_room_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that an orphaned backend room could not be deleted."""
        ...

    def member_added(
        self,
        entity: str,
        user_id: str,
        remote_room_id: str,
        tenant_id: str,
        already_present: bool,
    ) -> None:
        """Record that a user was granted access to a room."""
        ...

    def invite_retried_after_recreation(
        self,
        entity: str,
        user_id: str,
        remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that an invite hit a missing room and is being retried."""
        ...

    def member_add_failed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that a user could not be added to a room."""
        ...

    def privilege_applied(
        self,
        entity: str,
        user_id: str,
        level: int,
        tenant_id: str,
    ) -> None:
        """Record that a power level was applied to a member."""
        ...

    def privilege_sync_failed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that a power level could not be applied (degraded)."""
        ...

    def member_removed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        remote_removed: bool,
    ) -> None:
        """Record that a user's access to a room was revoked."""
        ...

    def room_deleted(
        self,
        room_id: str,
        remote_room_id: str,
        entity: str,
        tenant_id: str,
    ) -> None:
        """Record that a room record was deleted."""
        ...

    def room_deletion_warning(
        self,
        entity: str,
        tenant_id: str,
        warning: str,
    ) -> None:
        """Record a best-effort deletion step that failed."""
        ...

    def with_context(self, context: ObservationContext) -> RoomReconciliationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoomReconciliationProbe:
    """Default implementation of RoomReconciliationProbe using structlog."""

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
    ) -> DefaultRoomReconciliationProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoomReconciliationProbe(logger=self._logger, context=context)

    def room_created(
        self,
        room_id: str,
        remote_room_id: str,
        room_alias: str,
        entity: str,
        tenant_id: str,
    ) -> None:
        """Record that a room was provisioned for an entity."""
        self._logger.info(
            "room_created",
            room_id=room_id,
            remote_room_id=remote_room_id,
            room_alias=room_alias,
            entity=entity,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def room_recreation_started(
        self,
        entity: str,
        stale_remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that a stale or empty room reference is being replaced."""
        self._logger.warning(
            "room_recreation_started",
            entity=entity,
            stale_remote_room_id=stale_remote_room_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def room_creation_conflict(
        self,
        entity: str,
        orphan_remote_room_id: str,
        winner_remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that a concurrent creator won and its room was adopted."""
        self._logger.warning(
            "room_creation_conflict",
            entity=entity,
            orphan_remote_room_id=orphan_remote_room_id,
            winner_remote_room_id=winner_remote_room_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def orphan_room_cleanup_failed(
        self,
        remote_room_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that an orphaned backend room could not be deleted."""
        self._logger.warning(
            "orphan_room_cleanup_failed",
            remote_room_id=remote_room_id,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def member_added(
        self,
        entity: str,
        user_id: str,
        remote_room_id: str,
        tenant_id: str,
        already_present: bool,
    ) -> None:
        """Record that a user was granted access to a room."""
        self._logger.info(
            "member_added",
            entity=entity,
            user_id=user_id,
            remote_room_id=remote_room_id,
            tenant_id=tenant_id,
            already_present=already_present,
            **self._get_context_kwargs(),
        )

    def invite_retried_after_recreation(
        self,
        entity: str,
        user_id: str,
        remote_room_id: str,
        tenant_id: str,
    ) -> None:
        """Record that an invite hit a missing room and is being retried."""
        self._logger.warning(
            "invite_retried_after_recreation",
            entity=entity,
            user_id=user_id,
            remote_room_id=remote_room_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def member_add_failed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that a user could not be added to a room."""
        self._logger.error(
            "member_add_failed",
            entity=entity,
            user_id=user_id,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def privilege_applied(
        self,
        entity: str,
        user_id: str,
        level: int,
        tenant_id: str,
    ) -> None:
        """Record that a power level was applied to a member."""
        self._logger.info(
            "privilege_applied",
            entity=entity,
            user_id=user_id,
            level=level,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def privilege_sync_failed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that a power level could not be applied (degraded)."""
        self._logger.warning(
            "privilege_sync_failed",
            entity=entity,
            user_id=user_id,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def member_removed(
        self,
        entity: str,
        user_id: str,
        tenant_id: str,
        remote_removed: bool,
    ) -> None:
        """Record that a user's access to a room was revoked."""
        self._logger.info(
            "member_removed",
            entity=entity,
            user_id=user_id,
            tenant_id=tenant_id,
            remote_removed=remote_removed,
            **self._get_context_kwargs(),
        )

    def room_deleted(
        self,
        room_id: str,
        remote_room_id: str,
        entity: str,
        tenant_id: str,
    ) -> None:
        """Record that a room record was deleted."""
        self._logger.info(
            "room_deleted",
            room_id=room_id,
            remote_room_id=remote_room_id,
            entity=entity,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def room_deletion_warning(
        self,
        entity: str,
        tenant_id: str,
        warning: str,
    ) -> None:
        """Record a best-effort deletion step that failed."""
        self._logger.warning(
            "room_deletion_warning",
            entity=entity,
            tenant_id=tenant_id,
            warning=warning,
            **self._get_context_kwargs(),
        )
