"""Unit tests for MatrixAutomationAuthenticator."""

import json

import httpx
import pytest

from chat.domain.value_objects import TenantId
from chat.infrastructure.matrix import MatrixAutomationAuthenticator
from chat.ports.exceptions import RemoteRoomError
from chat.ports.remote import IAutomationAuthenticator


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url="http://matrix.test", transport=httpx.MockTransport(handler)
    )


def _authenticator(handler, **kwargs) -> MatrixAutomationAuthenticator:
    kwargs.setdefault("appservice_token", "as-token")
    return MatrixAutomationAuthenticator(
        http_client=_client(handler),
        automation_user="room-bot",
        server_name="matrix.test",
        **kwargs,
    )


class TestConstruction:
    """Tests for construction."""

    def test_requires_a_credential(self):
        """Should refuse to build without a token or password."""
        with pytest.raises(ValueError, match="appservice_token or password"):
            MatrixAutomationAuthenticator(
                http_client=_client(lambda r: httpx.Response(200)),
                automation_user="room-bot",
                server_name="matrix.test",
            )

    def test_implements_protocol(self):
        authenticator = _authenticator(lambda r: httpx.Response(200))
        assert isinstance(authenticator, IAutomationAuthenticator)

    def test_identity(self, tenant_id):
        authenticator = _authenticator(lambda r: httpx.Response(200))
        assert authenticator.identity(tenant_id) == "@room-bot:matrix.test"


class TestAuthenticate:
    """Tests for authenticate."""

    @pytest.mark.asyncio
    async def test_appservice_login(self, tenant_id):
        """Should log in as an application service and cache the token."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok-1"})

        authenticator = _authenticator(handler)
        assert not authenticator.is_authenticated(tenant_id)

        await authenticator.authenticate(tenant_id)

        assert authenticator.is_authenticated(tenant_id)
        assert authenticator.access_token(tenant_id) == "tok-1"
        request = seen[0]
        assert request.url.path == "/_matrix/client/v3/login"
        assert request.headers["Authorization"] == "Bearer as-token"
        body = json.loads(request.content)
        assert body["type"] == "m.login.application_service"
        assert body["identifier"] == {"type": "m.id.user", "user": "room-bot"}

    @pytest.mark.asyncio
    async def test_password_login(self, tenant_id):
        """Should fall back to password login."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": "tok-2"})

        authenticator = _authenticator(handler, appservice_token=None, password="hunter2")

        await authenticator.authenticate(tenant_id)

        body = json.loads(seen[0].content)
        assert body["type"] == "m.login.password"
        assert body["password"] == "hunter2"
        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_tokens_are_per_tenant(self, tenant_id):
        """Authenticating one tenant leaves others unauthenticated."""
        authenticator = _authenticator(
            lambda r: httpx.Response(200, json={"access_token": "tok"})
        )

        await authenticator.authenticate(tenant_id)

        assert not authenticator.is_authenticated(TenantId("tenant-b"))

    @pytest.mark.asyncio
    async def test_rejected_login(self, tenant_id):
        """Should raise RemoteRoomError carrying the backend errcode."""
        authenticator = _authenticator(
            lambda r: httpx.Response(
                403, json={"errcode": "M_FORBIDDEN", "error": "Invalid password"}
            )
        )

        with pytest.raises(RemoteRoomError, match="Invalid password") as exc_info:
            await authenticator.authenticate(tenant_id)

        assert exc_info.value.errcode == "M_FORBIDDEN"
        assert exc_info.value.status_code == 403
        assert not authenticator.is_authenticated(tenant_id)

    @pytest.mark.asyncio
    async def test_missing_token_in_response(self, tenant_id):
        """A 200 without an access token is a failure."""
        authenticator = _authenticator(lambda r: httpx.Response(200, json={}))

        with pytest.raises(RemoteRoomError, match="access token"):
            await authenticator.authenticate(tenant_id)

    @pytest.mark.asyncio
    async def test_transport_error(self, tenant_id):
        """Connection failures surface as RemoteRoomError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        authenticator = _authenticator(handler)

        with pytest.raises(RemoteRoomError, match="Login request failed"):
            await authenticator.authenticate(tenant_id)


class TestTokens:
    """Tests for token access and invalidation."""

    def test_access_token_before_login(self, tenant_id):
        """Should raise with M_MISSING_TOKEN."""
        authenticator = _authenticator(lambda r: httpx.Response(200))

        with pytest.raises(RemoteRoomError) as exc_info:
            authenticator.access_token(tenant_id)

        assert exc_info.value.errcode == "M_MISSING_TOKEN"

    @pytest.mark.asyncio
    async def test_invalidate(self, tenant_id):
        """Invalidated tenants must log in again."""
        authenticator = _authenticator(
            lambda r: httpx.Response(200, json={"access_token": "tok"})
        )
        await authenticator.authenticate(tenant_id)

        authenticator.invalidate(tenant_id)

        assert not authenticator.is_authenticated(tenant_id)
