"""Integration tests for room reconciliation inside a unit of work.

These tests require PostgreSQL to be running. The registry and its
transaction are real; the chat backend and the host directories are mocked.
"""

from unittest.mock import create_autospec

import pytest

from chat.application.automation_session import AutomationIdentitySession
from chat.application.services import RoomReconciliationService
from chat.application.value_objects import ReconciliationConfig
from chat.domain.aggregates import Room
from chat.domain.value_objects import EntityRef, RoomVisibility, TenantId, UserId
from chat.infrastructure.room_repository import RoomRepository
from chat.ports.directories import (
    ChatEntity,
    ChatUser,
    IEntityDirectory,
    IRoleDirectory,
    IUserDirectory,
)
from chat.ports.exceptions import (
    MissingChatIdentityError,
    RemoteRoomError,
    RemoteUnavailableError,
)
from chat.ports.remote import IAutomationAuthenticator, IRemoteRoomClient
from infrastructure.database import unit_of_work

pytestmark = pytest.mark.integration

TENANT = TenantId("tenant-a")
EVENT = EntityRef.event("evt-42")


@pytest.fixture
def mock_remote():
    remote = create_autospec(IRemoteRoomClient, instance=True)
    remote.create_room.side_effect = [f"!room{i}:matrix.test" for i in range(1, 10)]
    remote.room_exists.return_value = True
    return remote


@pytest.fixture
def build_service(mock_remote):
    """Build a service bound to the session of one unit of work."""
    entities = create_autospec(IEntityDirectory, instance=True)
    entities.get_entity.return_value = ChatEntity(
        ref=EVENT,
        name="Launch Party",
        visibility="private",
        owner_id=UserId("alice"),
    )

    known_users = {
        "alice": ChatUser(user_id=UserId("alice"), chat_handle="alice"),
        "bob": ChatUser(user_id=UserId("bob"), chat_handle="bob"),
        "carol": ChatUser(user_id=UserId("carol"), chat_handle=None),
    }
    users = create_autospec(IUserDirectory, instance=True)

    async def get_user(user_id, tenant_id):
        return known_users.get(user_id.value)

    users.get_user.side_effect = get_user

    roles = create_autospec(IRoleDirectory, instance=True)
    roles.get_member_role.return_value = None

    authenticator = create_autospec(IAutomationAuthenticator, instance=True)
    authenticator.is_authenticated.return_value = True
    authenticator.identity.return_value = "@room-bot:matrix.test"
    automation_session = AutomationIdentitySession(authenticator=authenticator)

    def build(session) -> RoomReconciliationService:
        return RoomReconciliationService(
            room_repository=RoomRepository(session=session),
            registry_transaction=session,
            entity_directory=entities,
            user_directory=users,
            role_directory=roles,
            remote_client=mock_remote,
            automation_session=automation_session,
            config=ReconciliationConfig(server_name="matrix.test"),
        )

    return build


async def _stored_room() -> Room | None:
    async with unit_of_work() as session:
        return await RoomRepository(session=session).get_by_entity(EVENT, TENANT)


class TestAddMemberDurability:
    """Registry writes made before add_member fails are committed."""

    @pytest.mark.asyncio
    async def test_room_survives_rejected_member(
        self, build_service, mock_remote, shared_engine
    ):
        """Redelivery after a rejected add reuses the room created the first time."""
        with pytest.raises(MissingChatIdentityError):
            async with unit_of_work() as session:
                await build_service(session).add_member(EVENT, UserId("carol"), TENANT)

        async with unit_of_work() as session:
            await build_service(session).add_member(EVENT, UserId("bob"), TENANT)

        mock_remote.create_room.assert_awaited_once()
        room = await _stored_room()
        assert room is not None
        assert room.remote_room_id == "!room1:matrix.test"
        assert room.has_member(UserId("bob"))

    @pytest.mark.asyncio
    async def test_room_survives_failed_invite(
        self, build_service, mock_remote, shared_engine
    ):
        """A backend failure on invite leaves the new room recorded."""
        mock_remote.invite_user.side_effect = RemoteRoomError(
            "Server overloaded", status_code=503
        )

        with pytest.raises(RemoteUnavailableError):
            async with unit_of_work() as session:
                await build_service(session).add_member(EVENT, UserId("bob"), TENANT)

        room = await _stored_room()
        assert room is not None
        assert room.remote_room_id == "!room1:matrix.test"
        assert not room.has_member(UserId("bob"))


class TestRemoveMemberDurability:
    """The local drop made by remove_member is committed."""

    @pytest.mark.asyncio
    async def test_local_removal_survives_remote_failure(
        self, build_service, mock_remote, shared_engine
    ):
        """The user leaves the registry even though the kick failed."""
        room = Room.create(
            tenant_id=TENANT,
            entity=EVENT,
            remote_room_id="!existing:matrix.test",
            name="event-evt-42-tenant-a",
            visibility=RoomVisibility.PRIVATE,
        )
        room.add_member(UserId("bob"))
        room.add_member(UserId("alice"))
        async with unit_of_work() as session:
            await RoomRepository(session=session).create(room)

        mock_remote.remove_user.side_effect = RemoteRoomError("Bad gateway", status_code=502)
        with pytest.raises(RemoteUnavailableError):
            async with unit_of_work() as session:
                await build_service(session).remove_member(EVENT, UserId("bob"), TENANT)

        stored = await _stored_room()
        assert stored is not None
        assert not stored.has_member(UserId("bob"))
        assert stored.has_member(UserId("alice"))
