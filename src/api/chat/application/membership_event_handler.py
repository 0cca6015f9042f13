"""Membership event handler for the chat room bounded context.

Translates attendance, membership and identity events published by the rest
of the application into reconciliation operations.
"""

from __future__ import annotations

from typing import get_args

from chat.application.observability import (
    DefaultMembershipEventProbe,
    MembershipEventProbe,
)
from chat.application.services import RoomReconciliationService, UserRoomSyncService
from chat.domain.events import (
    AttendeeAdded,
    AttendeeRemoved,
    AttendeeRoleChanged,
    ChatIdentityProvisioned,
    EventDeleted,
    GroupDeleted,
    GroupMemberAdded,
    GroupMemberRemoved,
    GroupMemberRoleChanged,
    MembershipEvent,
)
from chat.domain.value_objects import EntityRef, TenantId, UserId

# Derive supported events from the MembershipEvent type alias
_SUPPORTED_EVENTS: frozenset[str] = frozenset(
    cls.__name__ for cls in get_args(MembershipEvent)
)


class MembershipEventHandler:
    """Applies membership events to chat rooms.

    Errors from the reconciliation engine propagate so the caller's delivery
    mechanism can retry; every operation it triggers is idempotent.
    """

    def __init__(
        self,
        reconciliation: RoomReconciliationService,
        user_room_sync: UserRoomSyncService,
        probe: MembershipEventProbe | None = None,
    ):
        self._reconciliation = reconciliation
        self._user_room_sync = user_room_sync
        self._probe = probe or DefaultMembershipEventProbe()

    def supported_event_types(self) -> frozenset[str]:
        """Return the event type names this handler applies."""
        return _SUPPORTED_EVENTS

    async def handle(self, event: MembershipEvent) -> None:
        """Apply one membership event.

        Args:
            event: The event to apply

        Raises:
            ValueError: If the event type is not supported
        """
        event_type = type(event).__name__
        if event_type not in _SUPPORTED_EVENTS:
            raise ValueError(f"Unsupported event type: {event_type}")

        tenant_id = TenantId(event.tenant_id)
        try:
            await self._dispatch(event, tenant_id)
        except Exception as e:
            self._probe.membership_event_failed(
                event_type=event_type,
                tenant_id=tenant_id.value,
                error=str(e),
            )
            raise

        self._probe.membership_event_handled(
            event_type=event_type, tenant_id=tenant_id.value
        )

    async def _dispatch(self, event: MembershipEvent, tenant_id: TenantId) -> None:
        match event:
            case AttendeeAdded(event_slug=slug, user_id=user_id):
                await self._reconciliation.add_member(
                    EntityRef.event(slug), UserId(user_id), tenant_id
                )
            case GroupMemberAdded(group_slug=slug, user_id=user_id):
                await self._reconciliation.add_member(
                    EntityRef.group(slug), UserId(user_id), tenant_id
                )
            case AttendeeRemoved(event_slug=slug, user_id=user_id):
                await self._reconciliation.remove_member(
                    EntityRef.event(slug), UserId(user_id), tenant_id
                )
            case GroupMemberRemoved(group_slug=slug, user_id=user_id):
                await self._reconciliation.remove_member(
                    EntityRef.group(slug), UserId(user_id), tenant_id
                )
            case AttendeeRoleChanged(event_slug=slug, user_id=user_id):
                await self._reconciliation.sync_member_privilege(
                    EntityRef.event(slug), UserId(user_id), tenant_id
                )
            case GroupMemberRoleChanged(group_slug=slug, user_id=user_id):
                await self._reconciliation.sync_member_privilege(
                    EntityRef.group(slug), UserId(user_id), tenant_id
                )
            case EventDeleted(event_slug=slug):
                await self._reconciliation.delete_rooms_for_entity(
                    EntityRef.event(slug), tenant_id
                )
            case GroupDeleted(group_slug=slug):
                await self._reconciliation.delete_rooms_for_entity(
                    EntityRef.group(slug), tenant_id
                )
            case ChatIdentityProvisioned(remote_user_id=remote_user_id):
                await self._user_room_sync.sync_by_remote_identity(
                    remote_user_id, tenant_id
                )
