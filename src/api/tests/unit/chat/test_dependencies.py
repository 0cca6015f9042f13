"""Unit tests for chat room composition helpers."""

from unittest.mock import AsyncMock, create_autospec, patch

import httpx
import pytest

from chat import dependencies
from chat.application.membership_event_handler import MembershipEventHandler
from chat.application.services import RoomReconciliationService
from chat.infrastructure.matrix import MatrixAutomationAuthenticator, MatrixRoomClient
from chat.ports.directories import IEntityDirectory, IRoleDirectory, IUserDirectory


def _clear_caches() -> None:
    for getter in (
        dependencies.get_reconciliation_config,
        dependencies.get_matrix_http_client,
        dependencies.get_matrix_authenticator,
        dependencies.get_automation_session,
        dependencies.get_matrix_room_client,
    ):
        getter.cache_clear()


@pytest.fixture(autouse=True)
def patched_settings(mock_matrix_settings):
    _clear_caches()
    with patch.object(dependencies, "get_matrix_settings", return_value=mock_matrix_settings):
        yield
    _clear_caches()


@pytest.fixture
def directories():
    return (
        create_autospec(IEntityDirectory, instance=True),
        create_autospec(IUserDirectory, instance=True),
        create_autospec(IRoleDirectory, instance=True),
    )


class TestSingletons:
    """Tests for cached adapters."""

    def test_http_client_uses_homeserver_url(self):
        client = dependencies.get_matrix_http_client()

        assert isinstance(client, httpx.AsyncClient)
        assert str(client.base_url).startswith("https://matrix.test")
        assert client.timeout.connect == 10.0

    def test_authenticator_uses_password(self, tenant_id):
        authenticator = dependencies.get_matrix_authenticator()

        assert isinstance(authenticator, MatrixAutomationAuthenticator)
        assert authenticator.identity(tenant_id) == "@room-bot:matrix.test"

    def test_room_client_is_cached(self):
        assert dependencies.get_matrix_room_client() is dependencies.get_matrix_room_client()
        assert isinstance(dependencies.get_matrix_room_client(), MatrixRoomClient)

    def test_config_uses_server_name(self):
        assert dependencies.get_reconciliation_config().server_name == "matrix.test"


class TestBuilders:
    """Tests for per-session builders."""

    def test_build_reconciliation_service(self, directories):
        session = AsyncMock()
        service = dependencies.build_reconciliation_service(session, *directories)

        assert isinstance(service, RoomReconciliationService)
        assert service._registry is session

    def test_build_membership_event_handler(self, directories):
        handler = dependencies.build_membership_event_handler(AsyncMock(), *directories)

        assert isinstance(handler, MembershipEventHandler)
        assert "AttendeeAdded" in handler.supported_event_types()


class TestCloseMatrixClient:
    """Tests for close_matrix_client."""

    @pytest.mark.asyncio
    async def test_closes_and_resets(self):
        client = dependencies.get_matrix_http_client()

        await dependencies.close_matrix_client()

        assert client.is_closed
        assert dependencies.get_matrix_http_client() is not client

    @pytest.mark.asyncio
    async def test_noop_when_never_created(self):
        await dependencies.close_matrix_client()

        assert dependencies.get_matrix_http_client.cache_info().currsize == 0
