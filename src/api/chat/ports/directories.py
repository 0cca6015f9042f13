"""Lookup protocols for application entities, users and roles.

Events, groups, users and their roles are owned by other services. The chat
room context only reads them, and writes back a single denormalized field:
the entity's reference to its backend room.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from chat.domain.value_objects import EntityRef, MemberRole, TenantId, UserId


@dataclass(frozen=True)
class ChatEntity:
    """Read-only view of an event or group as needed for room provisioning.

    Attributes:
        ref: Entity reference (type + slug)
        name: Display name
        description: Free-text description, used as the room topic
        visibility: Entity visibility ("public", "authenticated", "private")
        room_reference: The entity's denormalized backend room id, if any
        owner_id: User who owns the entity; rooms are created on their behalf
    """

    ref: EntityRef
    name: str
    description: str | None = None
    visibility: str = "public"
    room_reference: str | None = None
    owner_id: UserId | None = None


@dataclass(frozen=True)
class ChatUser:
    """Read-only view of an application user.

    Attributes:
        user_id: Application user reference
        chat_handle: Localpart of the user's chat identity, None until the
            user has completed chat-backend provisioning
    """

    user_id: UserId
    chat_handle: str | None = None


class IEntityDirectory(Protocol):
    """Tenant-scoped lookup of events and groups."""

    async def get_entity(self, ref: EntityRef, tenant_id: TenantId) -> ChatEntity | None:
        """Fetch an event or group.

        Returns:
            The entity view, or None if it does not exist in the tenant
        """
        ...

    async def set_room_reference(
        self,
        ref: EntityRef,
        tenant_id: TenantId,
        remote_room_id: str | None,
    ) -> None:
        """Set or clear (None) the entity's denormalized room reference."""
        ...


class IUserDirectory(Protocol):
    """Tenant-scoped lookup of users and their chat identities."""

    async def get_user(self, user_id: UserId, tenant_id: TenantId) -> ChatUser | None:
        """Fetch a user by application reference."""
        ...

    async def find_by_chat_handle(self, handle: str, tenant_id: TenantId) -> ChatUser | None:
        """Fetch the user owning a chat handle."""
        ...


class IRoleDirectory(Protocol):
    """Tenant-scoped lookup of attendance and membership roles."""

    async def get_member_role(
        self,
        ref: EntityRef,
        user_id: UserId,
        tenant_id: TenantId,
    ) -> MemberRole | None:
        """Fetch the user's current role in an entity, None if they hold none."""
        ...

    async def list_memberships(self, user_id: UserId, tenant_id: TenantId) -> list[EntityRef]:
        """List every event the user attends and group the user belongs to."""
        ...
