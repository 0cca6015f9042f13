"""Fixtures for chat room application service tests."""

from __future__ import annotations

import copy
from unittest.mock import create_autospec

import pytest

from chat.application.automation_session import AutomationIdentitySession
from chat.application.observability import RoomReconciliationProbe
from chat.application.services import RoomReconciliationService
from chat.application.value_objects import ReconciliationConfig
from chat.domain.aggregates import Room
from chat.domain.value_objects import EntityRef, RoomId, TenantId, UserId
from chat.ports.directories import (
    ChatEntity,
    ChatUser,
    IEntityDirectory,
    IRoleDirectory,
    IUserDirectory,
)
from chat.ports.exceptions import DuplicateRoomError
from chat.ports.remote import IAutomationAuthenticator, IRemoteRoomClient

AUTOMATION_ID = "@room-bot:matrix.test"


class InMemoryRoomRepository:
    """Room registry keeping copies of rooms in a dict.

    Enforces one room per (tenant, entity) like the database index does, and
    doubles as the registry transaction: `rollback` restores the state of
    the last `commit`, the way a failing unit of work does.
    """

    def __init__(self) -> None:
        self.rooms: dict[str, Room] = {}
        self.commits = 0
        self._committed: dict[str, Room] = {}

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        room = self.rooms.get(room_id.value)
        return copy.deepcopy(room) if room else None

    async def get_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> Room | None:
        rooms = await self.list_by_entity(entity, tenant_id)
        return rooms[0] if rooms else None

    async def list_by_entity(self, entity: EntityRef, tenant_id: TenantId) -> list[Room]:
        return [
            copy.deepcopy(r)
            for r in self.rooms.values()
            if r.entity == entity and r.tenant_id == tenant_id
        ]

    async def list_by_member(self, user_id: UserId, tenant_id: TenantId) -> list[Room]:
        return [
            copy.deepcopy(r)
            for r in self.rooms.values()
            if r.tenant_id == tenant_id and r.has_member(user_id)
        ]

    async def create(self, room: Room) -> None:
        if await self.get_by_entity(room.entity, room.tenant_id) is not None:
            raise DuplicateRoomError(f"Room for {room.entity} exists")
        self.rooms[room.id.value] = copy.deepcopy(room)

    async def save(self, room: Room) -> None:
        self.rooms[room.id.value] = copy.deepcopy(room)

    async def delete(self, room: Room) -> bool:
        return self.rooms.pop(room.id.value, None) is not None

    def seed(self, room: Room) -> Room:
        """Insert a room directly, bypassing the uniqueness check."""
        self.rooms[room.id.value] = copy.deepcopy(room)
        self._committed[room.id.value] = copy.deepcopy(room)
        return room

    async def commit(self) -> None:
        self.commits += 1
        self._committed = copy.deepcopy(self.rooms)

    def rollback(self) -> None:
        """Discard everything written since the last commit."""
        self.rooms = copy.deepcopy(self._committed)

    def only_room(self) -> Room:
        """Return the single stored room."""
        assert len(self.rooms) == 1
        return next(iter(self.rooms.values()))


@pytest.fixture
def room_repository() -> InMemoryRoomRepository:
    return InMemoryRoomRepository()


@pytest.fixture
def users() -> dict[str, ChatUser]:
    """Users known to the user directory, keyed by user id."""
    return {
        "alice": ChatUser(user_id=UserId("alice"), chat_handle="alice"),
        "bob": ChatUser(user_id=UserId("bob"), chat_handle="bob"),
        "carol": ChatUser(user_id=UserId("carol"), chat_handle=None),
    }


@pytest.fixture
def mock_user_directory(users):
    """User directory answering from the users fixture."""
    directory = create_autospec(IUserDirectory, instance=True)

    async def get_user(user_id, tenant_id):
        return users.get(user_id.value)

    async def find_by_chat_handle(handle, tenant_id):
        return next((u for u in users.values() if u.chat_handle == handle), None)

    directory.get_user.side_effect = get_user
    directory.find_by_chat_handle.side_effect = find_by_chat_handle
    return directory


@pytest.fixture
def launch_party(event_ref) -> ChatEntity:
    return ChatEntity(
        ref=event_ref,
        name="Launch Party",
        description=None,
        visibility="private",
        owner_id=UserId("alice"),
    )


@pytest.fixture
def hiking_group(group_ref) -> ChatEntity:
    return ChatEntity(
        ref=group_ref,
        name="Hikers",
        description="Weekend hikes",
        visibility="public",
        owner_id=UserId("bob"),
    )


@pytest.fixture
def mock_entity_directory(launch_party, hiking_group):
    """Entity directory knowing the launch party event and the hiking group."""
    directory = create_autospec(IEntityDirectory, instance=True)
    entities = {e.ref: e for e in (launch_party, hiking_group)}

    async def get_entity(ref, tenant_id):
        return entities.get(ref)

    directory.get_entity.side_effect = get_entity
    return directory


@pytest.fixture
def mock_role_directory():
    directory = create_autospec(IRoleDirectory, instance=True)
    directory.get_member_role.return_value = None
    directory.list_memberships.return_value = []
    return directory


@pytest.fixture
def mock_remote():
    """Remote client whose rooms exist and whose created ids count up."""
    remote = create_autospec(IRemoteRoomClient, instance=True)
    remote.create_room.side_effect = [f"!room{i}:matrix.test" for i in range(1, 10)]
    remote.room_exists.return_value = True
    remote.delete_room.return_value = True
    return remote


@pytest.fixture
def mock_authenticator():
    authenticator = create_autospec(IAutomationAuthenticator, instance=True)
    authenticator.is_authenticated.return_value = True
    authenticator.identity.return_value = AUTOMATION_ID
    return authenticator


@pytest.fixture
def automation_session(mock_authenticator) -> AutomationIdentitySession:
    return AutomationIdentitySession(authenticator=mock_authenticator)


@pytest.fixture
def mock_probe():
    return create_autospec(RoomReconciliationProbe, instance=True)


@pytest.fixture
def config() -> ReconciliationConfig:
    return ReconciliationConfig(server_name="matrix.test")


@pytest.fixture
def service(
    room_repository,
    mock_entity_directory,
    mock_user_directory,
    mock_role_directory,
    mock_remote,
    automation_session,
    config,
    mock_probe,
) -> RoomReconciliationService:
    return RoomReconciliationService(
        room_repository=room_repository,
        registry_transaction=room_repository,
        entity_directory=mock_entity_directory,
        user_directory=mock_user_directory,
        role_directory=mock_role_directory,
        remote_client=mock_remote,
        automation_session=automation_session,
        config=config,
        probe=mock_probe,
    )


@pytest.fixture
def automation_id() -> str:
    return AUTOMATION_ID
