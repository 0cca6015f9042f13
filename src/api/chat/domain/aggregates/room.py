"""Room aggregate for the chat room context."""

from __future__ import annotations

from dataclasses import dataclass, field

from chat.domain.value_objects import (
    EntityRef,
    RoomId,
    RoomSettings,
    RoomVisibility,
    TenantId,
    UserId,
)


@dataclass
class Room:
    """Registry record binding one entity to one chat-backend room.

    The member list is the application's intent: a user listed here is meant
    to have access to the backend room, whether or not the backend has caught
    up yet.

    Business rules:
    - A room belongs to exactly one entity (event or group)
    - Members are unique; adding or removing is idempotent
    - An empty remote_room_id marks an inconsistent record that must be
      recreated on next access
    """

    id: RoomId
    tenant_id: TenantId
    entity: EntityRef
    remote_room_id: str
    name: str
    visibility: RoomVisibility
    settings: RoomSettings
    topic: str | None = None
    creator_id: UserId | None = None
    members: list[UserId] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        tenant_id: TenantId,
        entity: EntityRef,
        remote_room_id: str,
        name: str,
        visibility: RoomVisibility,
        topic: str | None = None,
        creator_id: UserId | None = None,
    ) -> Room:
        """Factory method for a freshly provisioned room.

        Settings are derived from the visibility once, here, and never
        reconciled afterwards.

        Args:
            tenant_id: The tenant the entity lives in
            entity: The owning event or group
            remote_room_id: Identifier returned by the chat backend
            name: Deterministic room name
            visibility: Room visibility derived from the entity
            topic: Room topic
            creator_id: User on whose behalf the room was created

        Returns:
            A new Room aggregate
        """
        return cls(
            id=RoomId.generate(),
            tenant_id=tenant_id,
            entity=entity,
            remote_room_id=remote_room_id,
            name=name,
            visibility=visibility,
            settings=RoomSettings.for_visibility(visibility),
            topic=topic,
            creator_id=creator_id,
        )

    @property
    def needs_recreation(self) -> bool:
        """True when the record never received a backend room id."""
        return not self.remote_room_id

    def has_member(self, user_id: UserId) -> bool:
        """Check if a user is a registry member of this room."""
        return user_id in self.members

    def add_member(self, user_id: UserId) -> bool:
        """Add a member.

        Returns:
            True if the member was added, False if already present
        """
        if self.has_member(user_id):
            return False
        self.members.append(user_id)
        return True

    def remove_member(self, user_id: UserId) -> bool:
        """Remove a member.

        Returns:
            True if the member was removed, False if not present
        """
        if not self.has_member(user_id):
            return False
        self.members = [m for m in self.members if m != user_id]
        return True

    def clear_members(self) -> None:
        """Drop every registry member."""
        self.members = []
