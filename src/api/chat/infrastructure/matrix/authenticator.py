"""Automation identity authentication against a Matrix homeserver.

Access tokens are held in memory, one per tenant. An application-service
token is preferred when configured; otherwise the automation user logs in
with its password.
"""

from __future__ import annotations

from typing import Any

import httpx

from chat.domain.value_objects import TenantId
from chat.ports.exceptions import RemoteRoomError
from chat.ports.remote import IAutomationAuthenticator

LOGIN_PATH = "/_matrix/client/v3/login"


class MatrixAutomationAuthenticator(IAutomationAuthenticator):
    """Obtains and caches automation access tokens per tenant."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        automation_user: str,
        server_name: str,
        appservice_token: str | None = None,
        password: str | None = None,
    ):
        """Initialize the authenticator.

        Args:
            http_client: Client with base_url set to the homeserver
            automation_user: Localpart of the automation user
            server_name: Homeserver server name
            appservice_token: Application service token, if registered
            password: Automation user password, used without an appservice token

        Raises:
            ValueError: If neither an appservice token nor a password is given
        """
        if not appservice_token and not password:
            raise ValueError("Either appservice_token or password is required")

        self._http = http_client
        self._automation_user = automation_user
        self._server_name = server_name
        self._appservice_token = appservice_token
        self._password = password
        self._tokens: dict[str, str] = {}

    def is_authenticated(self, tenant_id: TenantId) -> bool:
        """Whether an access token is held for the tenant."""
        return tenant_id.value in self._tokens

    def identity(self, tenant_id: TenantId) -> str:
        """Remote user id of the automation user."""
        return f"@{self._automation_user}:{self._server_name}"

    def access_token(self, tenant_id: TenantId) -> str:
        """Return the tenant's access token.

        Raises:
            RemoteRoomError: If the tenant has not been authenticated
        """
        token = self._tokens.get(tenant_id.value)
        if token is None:
            raise RemoteRoomError(
                f"Automation identity is not authenticated for tenant {tenant_id}",
                errcode="M_MISSING_TOKEN",
            )
        return token

    def invalidate(self, tenant_id: TenantId) -> None:
        """Forget the tenant's token so the next call logs in again."""
        self._tokens.pop(tenant_id.value, None)

    async def authenticate(self, tenant_id: TenantId) -> None:
        """Log the automation user in and cache the access token.

        Raises:
            RemoteRoomError: If the homeserver rejects the login
        """
        body: dict[str, Any] = {
            "identifier": {"type": "m.id.user", "user": self._automation_user},
            "initial_device_display_name": f"room-automation-{tenant_id.value}",
        }
        headers: dict[str, str] = {}
        if self._appservice_token:
            body["type"] = "m.login.application_service"
            headers["Authorization"] = f"Bearer {self._appservice_token}"
        else:
            body["type"] = "m.login.password"
            body["password"] = self._password

        try:
            response = await self._http.post(LOGIN_PATH, json=body, headers=headers)
        except httpx.HTTPError as e:
            raise RemoteRoomError(f"Login request failed: {e}") from e

        if response.status_code != 200:
            error = parse_error_body(response)
            raise RemoteRoomError(
                error.get("error", f"Login failed with HTTP {response.status_code}"),
                errcode=error.get("errcode"),
                status_code=response.status_code,
            )

        token = response.json().get("access_token")
        if not token:
            raise RemoteRoomError("Login response did not include an access token")
        self._tokens[tenant_id.value] = token


def parse_error_body(response: httpx.Response) -> dict[str, Any]:
    """Parse a Matrix error body, tolerating non-JSON responses."""
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
