"""Repository protocols (ports) for the chat room bounded context.

The room registry is the durable mapping from entity to room, plus the
materialized membership list the application treats as its source of truth.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chat.domain.aggregates import Room
from chat.domain.value_objects import EntityRef, RoomId, TenantId, UserId


@runtime_checkable
class IRoomRepository(Protocol):
    """Repository for Room aggregate persistence.

    Rooms are always returned with their members loaded.
    """

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        """Retrieve a room by its local ID.

        Args:
            room_id: The registry identifier of the room

        Returns:
            The Room aggregate, or None if not found
        """
        ...

    async def get_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> Room | None:
        """Retrieve the room for an entity.

        Args:
            entity: The owning event or group
            tenant_id: The tenant to search within

        Returns:
            The Room aggregate, or None if the entity has no room
        """
        ...

    async def list_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> list[Room]:
        """List every room recorded for an entity.

        Normally there is at most one, but historical duplicates are tolerated.
        """
        ...

    async def list_by_member(self, user_id: UserId, tenant_id: TenantId) -> list[Room]:
        """List rooms where the user is a registry member."""
        ...

    async def create(self, room: Room) -> None:
        """Insert a new room record.

        Raises:
            DuplicateRoomError: If the entity already has a room in the tenant
        """
        ...

    async def save(self, room: Room) -> None:
        """Persist changes to an existing room, including its member list."""
        ...

    async def delete(self, room: Room) -> bool:
        """Delete a room record and its membership rows.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IRegistryTransaction(Protocol):
    """Commit point for the registry's open transaction.

    A registry write that records a backend mutation already made must
    survive a failure later in the same operation. The engine commits such
    writes before it continues; anything after the last commit is still
    rolled back by the caller's unit of work.

    An AsyncSession satisfies this protocol.
    """

    async def commit(self) -> None:
        """Make every registry write issued so far durable."""
        ...
