"""Room reconciliation service for the chat room bounded context.

Keeps exactly one chat-backend room per event or group, and keeps backend
membership and power levels in line with the application's roles. The local
registry is the source of truth for intent; the backend converges on it.

Every operation is idempotent. Re-running after any failure either finds the
work already done or finishes it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from chat.application.automation_session import AutomationIdentitySession
from chat.application.observability import (
    DefaultRoomReconciliationProbe,
    RoomReconciliationProbe,
)
from chat.application.value_objects import ReconciliationConfig, RoomDeletionReport
from chat.domain.aggregates import Room
from chat.domain.role_projection import privilege_for
from chat.domain.room_naming import parse_room_alias, room_alias, room_name
from chat.domain.value_objects import (
    EntityRef,
    PrivilegeLevel,
    RoomVisibility,
    TenantId,
    UserId,
)
from chat.ports.directories import (
    ChatEntity,
    IEntityDirectory,
    IRoleDirectory,
    IUserDirectory,
)
from chat.ports.exceptions import (
    DuplicateRoomError,
    EntityNotFoundError,
    MissingChatIdentityError,
    RemoteErrorKind,
    RemoteRoomError,
    RemoteUnavailableError,
    RoomNotFoundError,
    UserNotFoundError,
    classify_remote_error,
)
from chat.ports.remote import IRemoteRoomClient, RoomCreationRequest
from chat.ports.repositories import IRegistryTransaction, IRoomRepository


@contextmanager
def _remote_failures(action: str) -> Iterator[None]:
    """Translate backend rejections into RemoteUnavailableError."""
    try:
        yield
    except RemoteRoomError as e:
        raise RemoteUnavailableError(f"{action} failed: {e}") from e


class RoomReconciliationService:
    """Application service reconciling entity rooms with the chat backend.

    Holds no per-call state and is safe for concurrent use. Racing room
    creation for the same entity is settled by the registry's uniqueness
    constraint: the loser deletes its backend room and adopts the winner's.

    Registry writes that record a backend mutation are committed as soon as
    they are made, so an error raised later in the same operation cannot
    roll them back and orphan the backend state they describe.
    """

    def __init__(
        self,
        room_repository: IRoomRepository,
        registry_transaction: IRegistryTransaction,
        entity_directory: IEntityDirectory,
        user_directory: IUserDirectory,
        role_directory: IRoleDirectory,
        remote_client: IRemoteRoomClient,
        automation_session: AutomationIdentitySession,
        config: ReconciliationConfig,
        probe: RoomReconciliationProbe | None = None,
    ):
        """Initialize RoomReconciliationService with dependencies.

        Args:
            room_repository: Registry of entity rooms and their members
            registry_transaction: Commit point of the registry's transaction
            entity_directory: Lookup of events and groups
            user_directory: Lookup of users and their chat handles
            role_directory: Lookup of attendance and membership roles
            remote_client: Chat backend room administration client
            automation_session: Authenticated automation identity
            config: Injected reconciliation configuration
            probe: Optional domain probe for observability
        """
        self._rooms = room_repository
        self._registry = registry_transaction
        self._entities = entity_directory
        self._users = user_directory
        self._roles = role_directory
        self._remote = remote_client
        self._session = automation_session
        self._config = config
        self._probe = probe or DefaultRoomReconciliationProbe()

    async def ensure_room(
        self,
        entity: EntityRef,
        creator_id: UserId | None,
        tenant_id: TenantId,
    ) -> Room:
        """Return the entity's room, creating or recreating it if needed.

        An existing record is always verified against the backend. A record
        whose backend room is gone, or which never received one, is replaced.

        Args:
            entity: The owning event or group
            creator_id: User on whose behalf a new room is created; the
                entity owner is used when omitted
            tenant_id: The tenant context

        Returns:
            The live Room record

        Raises:
            EntityNotFoundError: If the entity does not exist
            RemoteUnavailableError: If the backend fails
            AutomationAuthenticationError: If the automation identity cannot
                authenticate
        """
        chat_entity = await self._load_entity(entity, tenant_id)
        room = await self._rooms.get_by_entity(entity, tenant_id)
        if room is not None and await self._room_is_live(room):
            return room
        if room is not None:
            await self._discard_stale_room(room)
        return await self._create_room(chat_entity, creator_id, tenant_id)

    async def verify_and_heal(
        self,
        entity: EntityRef,
        creator_id: UserId | None,
        tenant_id: TenantId,
    ) -> Room:
        """Verify an existing room against the backend and recreate it if gone.

        Intended for repair jobs that walk known rooms.

        Raises:
            EntityNotFoundError: If the entity does not exist
            RoomNotFoundError: If the entity has no room record
            RemoteUnavailableError: If the backend fails
        """
        chat_entity = await self._load_entity(entity, tenant_id)
        room = await self._rooms.get_by_entity(entity, tenant_id)
        if room is None:
            raise RoomNotFoundError(f"No room recorded for {entity} in tenant {tenant_id}")
        if await self._room_is_live(room):
            return room
        await self._discard_stale_room(room)
        return await self._create_room(chat_entity, creator_id, tenant_id)

    async def ensure_room_for_alias(
        self,
        alias: str,
        tenant_id: TenantId | None = None,
    ) -> Room | None:
        """Provision the room a backend alias query asks for.

        The homeserver asks about aliases nobody has claimed yet; an alias in
        the reconciler's format names the entity and tenant whose room should
        exist, and that room is ensured on the entity owner's behalf.

        Args:
            alias: Queried alias, e.g. "#event-evt-42-acme:matrix.test"
            tenant_id: Tenant the alias belongs to, when known; required for
                tenant ids that contain dashes

        Returns:
            The live Room record, or None if the alias is not one of ours

        Raises:
            EntityNotFoundError: If the alias names an unknown entity
        """
        info = parse_room_alias(
            alias, server_name=self._config.server_name, tenant_id=tenant_id
        )
        if info is None:
            return None
        return await self.ensure_room(info.entity, None, info.tenant_id)

    async def add_member(
        self,
        entity: EntityRef,
        user_id: UserId,
        tenant_id: TenantId,
    ) -> Room:
        """Give a user access to the entity's room.

        Ensures the room, invites the user, grants moderator power when their
        role earns it, then records the membership. An invite that finds the
        room gone triggers one recreation and one retry. A room created or
        recreated along the way stays recorded even when the user cannot be
        invited.

        Args:
            entity: The owning event or group
            user_id: The user to add
            tenant_id: The tenant context

        Returns:
            The (possibly recreated) Room record

        Raises:
            EntityNotFoundError: If the entity does not exist
            UserNotFoundError: If the user does not exist
            MissingChatIdentityError: If the user has no chat identity
            RemoteUnavailableError: If the backend fails
        """
        room = await self.ensure_room(entity, None, tenant_id)
        remote_user_id = await self._require_remote_identity(user_id, tenant_id)

        try:
            room = await self._invite(room, entity, user_id, remote_user_id, tenant_id)
        except Exception as e:
            self._probe.member_add_failed(
                entity=str(entity),
                user_id=user_id.value,
                tenant_id=tenant_id.value,
                error=str(e),
            )
            raise

        await self._apply_privilege(room, entity, user_id, remote_user_id, tenant_id)

        added = room.add_member(user_id)
        if added:
            await self._rooms.save(room)

        self._probe.member_added(
            entity=str(entity),
            user_id=user_id.value,
            remote_room_id=room.remote_room_id,
            tenant_id=tenant_id.value,
            already_present=not added,
        )
        return room

    async def remove_member(
        self,
        entity: EntityRef,
        user_id: UserId,
        tenant_id: TenantId,
    ) -> None:
        """Revoke a user's access to the entity's room.

        Backend answers meaning the user is already gone count as success, as
        does a user without a chat identity or an entity without a room. The
        registry entry is always dropped and committed, even when the backend
        call fails; the failure is raised afterwards.

        Raises:
            EntityNotFoundError: If the entity does not exist
            UserNotFoundError: If the user does not exist
            RemoteUnavailableError: If the backend fails for any other reason
        """
        await self._load_entity(entity, tenant_id)
        user = await self._users.get_user(user_id, tenant_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found in tenant {tenant_id}")

        room = await self._rooms.get_by_entity(entity, tenant_id)
        if room is None:
            return

        remote_removed = False
        failure: RemoteUnavailableError | None = None
        if user.chat_handle and not room.needs_recreation:
            remote_user_id = self._config.remote_user_id(user.chat_handle)
            await self._session.ensure_authenticated(tenant_id)
            try:
                await self._remote.remove_user(room.remote_room_id, remote_user_id, tenant_id)
                remote_removed = True
            except RemoteRoomError as e:
                kind = classify_remote_error(e)
                if kind not in (RemoteErrorKind.NOT_MEMBER, RemoteErrorKind.ROOM_MISSING):
                    failure = RemoteUnavailableError(f"Removing {user_id} failed: {e}")
                    failure.__cause__ = e

        if room.remove_member(user_id):
            await self._rooms.save(room)
            await self._registry.commit()

        if failure is not None:
            raise failure

        self._probe.member_removed(
            entity=str(entity),
            user_id=user_id.value,
            tenant_id=tenant_id.value,
            remote_removed=remote_removed,
        )

    async def sync_member_privilege(
        self,
        entity: EntityRef,
        user_id: UserId,
        tenant_id: TenantId,
    ) -> PrivilegeLevel:
        """Re-project a member's role onto their room power level.

        Demotion is applied as well as promotion. Backend failures are
        degraded: they are reported through the probe and never raised. Users
        without a chat identity and entities without a live room are skipped.

        Returns:
            The privilege level the user's current role earns

        Raises:
            EntityNotFoundError: If the entity does not exist
            UserNotFoundError: If the user does not exist
        """
        await self._load_entity(entity, tenant_id)
        user = await self._users.get_user(user_id, tenant_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found in tenant {tenant_id}")

        role = await self._roles.get_member_role(entity, user_id, tenant_id)
        level = privilege_for(entity.entity_type, role)

        room = await self._rooms.get_by_entity(entity, tenant_id)
        if room is None or room.needs_recreation or not user.chat_handle:
            return level

        remote_user_id = self._config.remote_user_id(user.chat_handle)
        try:
            await self._session.ensure_authenticated(tenant_id)
            await self._remote.set_power_levels(
                room.remote_room_id, {remote_user_id: int(level)}, tenant_id
            )
        except Exception as e:
            self._probe.privilege_sync_failed(
                entity=str(entity),
                user_id=user_id.value,
                tenant_id=tenant_id.value,
                error=str(e),
            )
            return level

        self._probe.privilege_applied(
            entity=str(entity),
            user_id=user_id.value,
            level=int(level),
            tenant_id=tenant_id.value,
        )
        return level

    async def delete_rooms_for_entity(
        self,
        entity: EntityRef,
        tenant_id: TenantId,
    ) -> RoomDeletionReport:
        """Delete every room recorded for an entity.

        Each room is handled independently: a failed backend deletion is
        recorded as a warning and the record is still removed.

        Returns:
            Report of deleted record ids and warnings

        Raises:
            Exception: If the rooms cannot be enumerated
        """
        rooms = await self._rooms.list_by_entity(entity, tenant_id)
        deleted: list[str] = []
        warnings: list[str] = []

        for room in rooms:
            if room.remote_room_id:
                try:
                    await self._session.ensure_authenticated(tenant_id)
                    await self._remote.delete_room(room.remote_room_id, tenant_id)
                except Exception as e:
                    warnings.append(
                        f"Backend deletion of {room.remote_room_id} failed: {e}"
                    )

            try:
                room.clear_members()
                await self._rooms.delete(room)
            except Exception as e:
                warnings.append(f"Deleting room record {room.id} failed: {e}")
                continue

            deleted.append(room.id.value)
            self._probe.room_deleted(
                room_id=room.id.value,
                remote_room_id=room.remote_room_id,
                entity=str(entity),
                tenant_id=tenant_id.value,
            )

        try:
            await self._entities.set_room_reference(entity, tenant_id, None)
        except Exception as e:
            warnings.append(f"Clearing room reference of {entity} failed: {e}")

        for warning in warnings:
            self._probe.room_deletion_warning(
                entity=str(entity),
                tenant_id=tenant_id.value,
                warning=warning,
            )

        return RoomDeletionReport(
            deleted_room_ids=tuple(deleted),
            warnings=tuple(warnings),
        )

    async def is_member(
        self,
        entity: EntityRef,
        user_id: UserId,
        tenant_id: TenantId,
    ) -> bool:
        """Check registry membership without contacting the backend."""
        room = await self._rooms.get_by_entity(entity, tenant_id)
        return room is not None and room.has_member(user_id)

    async def list_rooms(self, entity: EntityRef, tenant_id: TenantId) -> list[Room]:
        """List every room recorded for an entity."""
        return await self._rooms.list_by_entity(entity, tenant_id)

    async def get_room_members(
        self,
        entity: EntityRef,
        tenant_id: TenantId,
    ) -> list[UserId]:
        """List registry members of the entity's room.

        Raises:
            RoomNotFoundError: If the entity has no room record
        """
        room = await self._rooms.get_by_entity(entity, tenant_id)
        if room is None:
            raise RoomNotFoundError(f"No room recorded for {entity} in tenant {tenant_id}")
        return list(room.members)

    async def _load_entity(self, entity: EntityRef, tenant_id: TenantId) -> ChatEntity:
        chat_entity = await self._entities.get_entity(entity, tenant_id)
        if chat_entity is None:
            raise EntityNotFoundError(f"{entity} not found in tenant {tenant_id}")
        return chat_entity

    async def _room_is_live(self, room: Room) -> bool:
        if room.needs_recreation:
            return False
        await self._session.ensure_authenticated(room.tenant_id)
        with _remote_failures(f"Verifying room {room.remote_room_id}"):
            return await self._remote.room_exists(room.remote_room_id, room.tenant_id)

    async def _discard_stale_room(self, room: Room) -> None:
        """Drop a record whose backend room is gone.

        The old backend room, if any, is left orphaned.
        """
        self._probe.room_recreation_started(
            entity=str(room.entity),
            stale_remote_room_id=room.remote_room_id,
            tenant_id=room.tenant_id.value,
        )
        await self._entities.set_room_reference(room.entity, room.tenant_id, None)
        await self._rooms.delete(room)

    async def _optional_remote_identity(
        self,
        user_id: UserId | None,
        tenant_id: TenantId,
    ) -> str | None:
        if user_id is None:
            return None
        user = await self._users.get_user(user_id, tenant_id)
        if user is None or not user.chat_handle:
            return None
        return self._config.remote_user_id(user.chat_handle)

    async def _require_remote_identity(self, user_id: UserId, tenant_id: TenantId) -> str:
        user = await self._users.get_user(user_id, tenant_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found in tenant {tenant_id}")
        if not user.chat_handle:
            raise MissingChatIdentityError(user_id=user_id.value, tenant_id=tenant_id.value)
        return self._config.remote_user_id(user.chat_handle)

    async def _create_room(
        self,
        chat_entity: ChatEntity,
        creator_id: UserId | None,
        tenant_id: TenantId,
    ) -> Room:
        entity = chat_entity.ref
        creator_id = creator_id or chat_entity.owner_id
        automation_id = await self._session.current_identity(tenant_id)
        creator_remote_id = await self._optional_remote_identity(creator_id, tenant_id)

        name = room_name(entity, tenant_id)
        visibility = RoomVisibility.from_entity_visibility(chat_entity.visibility)
        topic = chat_entity.description or f"Discussion for {chat_entity.name}"

        power_levels = {automation_id: int(PrivilegeLevel.ADMIN)}
        invite: tuple[str, ...] = ()
        # The automation identity creates the room and keeps admin power
        if creator_remote_id is not None and creator_remote_id != automation_id:
            power_levels[creator_remote_id] = int(PrivilegeLevel.MODERATOR)
            invite = (creator_remote_id,)

        request = RoomCreationRequest(
            name=name,
            alias_localpart=name,
            topic=topic,
            is_public=visibility == RoomVisibility.PUBLIC,
            encrypted=False,
            invite=invite,
            power_levels=power_levels,
        )
        with _remote_failures(f"Creating room for {entity}"):
            remote_room_id = await self._remote.create_room(request, tenant_id)

        room = Room.create(
            tenant_id=tenant_id,
            entity=entity,
            remote_room_id=remote_room_id,
            name=name,
            visibility=visibility,
            topic=topic,
            creator_id=creator_id,
        )
        if creator_remote_id is not None and creator_id is not None:
            room.add_member(creator_id)

        try:
            await self._rooms.create(room)
        except DuplicateRoomError:
            return await self._adopt_winner(entity, remote_room_id, tenant_id)
        await self._registry.commit()

        await self._entities.set_room_reference(entity, tenant_id, remote_room_id)
        self._probe.room_created(
            room_id=room.id.value,
            remote_room_id=remote_room_id,
            room_alias=room_alias(entity, tenant_id, self._config.server_name),
            entity=str(entity),
            tenant_id=tenant_id.value,
        )
        return room

    async def _adopt_winner(
        self,
        entity: EntityRef,
        orphan_remote_room_id: str,
        tenant_id: TenantId,
    ) -> Room:
        """Settle a lost creation race by adopting the concurrent record."""
        winner = await self._rooms.get_by_entity(entity, tenant_id)
        if winner is None:
            raise DuplicateRoomError(
                f"Room for {entity} conflicted but no winning record was found"
            )

        self._probe.room_creation_conflict(
            entity=str(entity),
            orphan_remote_room_id=orphan_remote_room_id,
            winner_remote_room_id=winner.remote_room_id,
            tenant_id=tenant_id.value,
        )
        try:
            await self._remote.delete_room(orphan_remote_room_id, tenant_id)
        except Exception as e:
            self._probe.orphan_room_cleanup_failed(
                remote_room_id=orphan_remote_room_id,
                tenant_id=tenant_id.value,
                error=str(e),
            )
        return winner

    async def _invite(
        self,
        room: Room,
        entity: EntityRef,
        user_id: UserId,
        remote_user_id: str,
        tenant_id: TenantId,
    ) -> Room:
        """Invite a user, healing the room once if the backend lost it."""
        await self._session.ensure_authenticated(tenant_id)
        try:
            await self._remote.invite_user(room.remote_room_id, remote_user_id, tenant_id)
            return room
        except RemoteRoomError as e:
            kind = classify_remote_error(e)
            if kind == RemoteErrorKind.ALREADY_MEMBER:
                return room
            if kind != RemoteErrorKind.ROOM_MISSING:
                raise RemoteUnavailableError(f"Inviting {user_id} failed: {e}") from e

        self._probe.invite_retried_after_recreation(
            entity=str(entity),
            user_id=user_id.value,
            remote_room_id=room.remote_room_id,
            tenant_id=tenant_id.value,
        )
        room = await self.verify_and_heal(entity, None, tenant_id)
        try:
            await self._remote.invite_user(room.remote_room_id, remote_user_id, tenant_id)
        except RemoteRoomError as e:
            if classify_remote_error(e) != RemoteErrorKind.ALREADY_MEMBER:
                raise RemoteUnavailableError(
                    f"Inviting {user_id} failed after room recreation: {e}"
                ) from e
        return room

    async def _apply_privilege(
        self,
        room: Room,
        entity: EntityRef,
        user_id: UserId,
        remote_user_id: str,
        tenant_id: TenantId,
    ) -> None:
        """Grant moderator power when the user's role earns it (degraded on failure)."""
        try:
            role = await self._roles.get_member_role(entity, user_id, tenant_id)
            level = privilege_for(entity.entity_type, role)
            if level != PrivilegeLevel.MODERATOR:
                return
            await self._remote.set_power_levels(
                room.remote_room_id, {remote_user_id: int(level)}, tenant_id
            )
        except Exception as e:
            self._probe.privilege_sync_failed(
                entity=str(entity),
                user_id=user_id.value,
                tenant_id=tenant_id.value,
                error=str(e),
            )
            return

        self._probe.privilege_applied(
            entity=str(entity),
            user_id=user_id.value,
            level=int(level),
            tenant_id=tenant_id.value,
        )
