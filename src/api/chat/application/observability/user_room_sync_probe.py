"""Protocol for user room sync and membership event observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserRoomSyncProbe(Protocol):
    """Domain probe for syncing a user's rooms after chat sign-in."""

    def user_rooms_synced(
        self,
        user_id: str,
        tenant_id: str,
        synced: int,
        failed: int,
    ) -> None:
        """Record the outcome of a user room sync."""
        ...

    def user_room_sync_failed(
        self,
        user_id: str,
        entity: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that one of the user's rooms could not be synced."""
        ...

    def remote_identity_rejected(self, remote_user_id: str, reason: str) -> None:
        """Record that a remote identity could not be mapped to a user."""
        ...

    def with_context(self, context: ObservationContext) -> UserRoomSyncProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserRoomSyncProbe:
    """Default implementation of UserRoomSyncProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultUserRoomSyncProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserRoomSyncProbe(logger=self._logger, context=context)

    def user_rooms_synced(
        self,
        user_id: str,
        tenant_id: str,
        synced: int,
        failed: int,
    ) -> None:
        """Record the outcome of a user room sync."""
        self._logger.info(
            "user_rooms_synced",
            user_id=user_id,
            tenant_id=tenant_id,
            synced=synced,
            failed=failed,
            **self._get_context_kwargs(),
        )

    def user_room_sync_failed(
        self,
        user_id: str,
        entity: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that one of the user's rooms could not be synced."""
        self._logger.warning(
            "user_room_sync_failed",
            user_id=user_id,
            entity=entity,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def remote_identity_rejected(self, remote_user_id: str, reason: str) -> None:
        """Record that a remote identity could not be mapped to a user."""
        self._logger.warning(
            "remote_identity_rejected",
            remote_user_id=remote_user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )


class MembershipEventProbe(Protocol):
    """Domain probe for inbound membership event handling."""

    def membership_event_handled(self, event_type: str, tenant_id: str) -> None:
        """Record that a membership event was applied."""
        ...

    def membership_event_failed(
        self,
        event_type: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that applying a membership event failed."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipEventProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMembershipEventProbe:
    """Default implementation of MembershipEventProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultMembershipEventProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipEventProbe(logger=self._logger, context=context)

    def membership_event_handled(self, event_type: str, tenant_id: str) -> None:
        """Record that a membership event was applied."""
        self._logger.debug(
            "membership_event_handled",
            event_type=event_type,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def membership_event_failed(
        self,
        event_type: str,
        tenant_id: str,
        error: str,
    ) -> None:
        """Record that applying a membership event failed."""
        self._logger.error(
            "membership_event_failed",
            event_type=event_type,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )
