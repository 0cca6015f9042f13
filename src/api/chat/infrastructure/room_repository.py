"""PostgreSQL implementation of IRoomRepository.

Rooms and their member rows are loaded together; the repository never hands
out a Room with an unloaded member list. Writes are flushed but not committed:
the caller owns the transaction.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from chat.domain.aggregates import Room
from chat.domain.value_objects import (
    EntityRef,
    EntityType,
    RoomId,
    RoomSettings,
    RoomVisibility,
    TenantId,
    UserId,
)
from chat.infrastructure.models import RoomMemberModel, RoomModel
from chat.infrastructure.observability import (
    DefaultRoomRepositoryProbe,
    RoomRepositoryProbe,
)
from chat.ports.exceptions import DuplicateRoomError
from chat.ports.repositories import IRoomRepository


class RoomRepository(IRoomRepository):
    """Repository persisting Room aggregates in PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: RoomRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession owned by the caller's unit of work
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultRoomRepositoryProbe()

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        """Retrieve a room by its local ID."""
        model = await self._get_model(room_id.value)
        if model is None:
            self._probe.room_not_found(room_id.value)
            return None
        return self._to_domain(model)

    async def get_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> Room | None:
        """Retrieve the room for an entity, the oldest if duplicates exist."""
        rooms = await self.list_by_entity(entity, tenant_id)
        return rooms[0] if rooms else None

    async def list_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> list[Room]:
        """List every room recorded for an entity, oldest first."""
        stmt = (
            select(RoomModel)
            .options(selectinload(RoomModel.members))
            .where(
                RoomModel.tenant_id == tenant_id.value,
                RoomModel.entity_type == entity.entity_type.value,
                RoomModel.entity_slug == entity.slug,
            )
            .order_by(RoomModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_by_member(self, user_id: UserId, tenant_id: TenantId) -> list[Room]:
        """List rooms where the user is a registry member."""
        stmt = (
            select(RoomModel)
            .options(selectinload(RoomModel.members))
            .join(RoomMemberModel, RoomMemberModel.room_id == RoomModel.id)
            .where(
                RoomModel.tenant_id == tenant_id.value,
                RoomMemberModel.user_id == user_id.value,
            )
            .order_by(RoomModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create(self, room: Room) -> None:
        """Insert a new room record.

        The insert runs in a savepoint so that a uniqueness conflict leaves
        the caller's transaction usable.

        Raises:
            DuplicateRoomError: If the entity already has a room in the tenant
        """
        model = RoomModel(
            id=room.id.value,
            tenant_id=room.tenant_id.value,
            entity_type=room.entity.entity_type.value,
            entity_slug=room.entity.slug,
            remote_room_id=room.remote_room_id,
            name=room.name,
            topic=room.topic,
            visibility=room.visibility.value,
            settings=room.settings.as_dict(),
            creator_id=room.creator_id.value if room.creator_id else None,
            members=[RoomMemberModel(user_id=m.value) for m in room.members],
        )

        try:
            async with self._session.begin_nested():
                self._session.add(model)
                await self._session.flush()
        except IntegrityError as e:
            self._probe.duplicate_room(str(room.entity), room.tenant_id.value)
            raise DuplicateRoomError(
                f"A room for {room.entity} already exists in tenant {room.tenant_id}"
            ) from e

        self._probe.room_saved(room.id.value, len(room.members))

    async def save(self, room: Room) -> None:
        """Persist changes to an existing room, including its member list.

        Raises:
            ValueError: If the room has no record
        """
        model = await self._get_model(room.id.value)
        if model is None:
            raise ValueError(f"Room {room.id} has no record to update")

        model.remote_room_id = room.remote_room_id
        model.name = room.name
        model.topic = room.topic

        # Sync member rows to the aggregate's member list
        wanted = {m.value for m in room.members}
        model.members = [m for m in model.members if m.user_id in wanted]
        existing = {m.user_id for m in model.members}
        for user_id in room.members:
            if user_id.value not in existing:
                model.members.append(RoomMemberModel(user_id=user_id.value))

        await self._session.flush()
        self._probe.room_saved(room.id.value, len(room.members))

    async def delete(self, room: Room) -> bool:
        """Delete a room record; member rows are removed with it."""
        model = await self._get_model(room.id.value)
        if model is None:
            self._probe.room_not_found(room.id.value)
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.room_deleted(room.id.value)
        return True

    async def _get_model(self, room_id: str) -> RoomModel | None:
        stmt = (
            select(RoomModel)
            .options(selectinload(RoomModel.members))
            .where(RoomModel.id == room_id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_domain(self, model: RoomModel) -> Room:
        """Convert a RoomModel (with members loaded) to a Room aggregate."""
        return Room(
            id=RoomId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            entity=EntityRef(
                entity_type=EntityType(model.entity_type),
                slug=model.entity_slug,
            ),
            remote_room_id=model.remote_room_id,
            name=model.name,
            visibility=RoomVisibility(model.visibility),
            settings=RoomSettings.from_dict(model.settings),
            topic=model.topic,
            creator_id=UserId(value=model.creator_id) if model.creator_id else None,
            members=[UserId(value=m.user_id) for m in model.members],
        )
