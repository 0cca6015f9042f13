"""Matrix client-server API implementation of IRemoteRoomClient.

Room deletion uses the Synapse admin API, so the automation user must be a
homeserver admin for entity deletion to remove backend rooms.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from chat.domain.value_objects import TenantId
from chat.infrastructure.matrix.authenticator import (
    MatrixAutomationAuthenticator,
    parse_error_body,
)
from chat.ports.exceptions import RemoteRoomError
from chat.ports.remote import IRemoteRoomClient, RoomCreationRequest

CLIENT_API = "/_matrix/client/v3"
ADMIN_API = "/_synapse/admin/v2"


def _room_path(room_id: str) -> str:
    return f"{CLIENT_API}/rooms/{quote(room_id, safe='')}"


class MatrixRoomClient(IRemoteRoomClient):
    """Administers rooms as the automation user over HTTP."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        authenticator: MatrixAutomationAuthenticator,
    ):
        """Initialize the client.

        Args:
            http_client: Client with base_url set to the homeserver
            authenticator: Source of per-tenant automation access tokens
        """
        self._http = http_client
        self._authenticator = authenticator

    async def create_room(self, request: RoomCreationRequest, tenant_id: TenantId) -> str:
        """Create a room with its name, alias, invites and power levels in one call."""
        initial_state: list[dict[str, Any]] = [
            {
                "type": "m.room.history_visibility",
                "state_key": "",
                "content": {"history_visibility": "shared"},
            },
            {
                "type": "m.room.guest_access",
                "state_key": "",
                "content": {"guest_access": "forbidden"},
            },
        ]
        if request.encrypted:
            initial_state.append(
                {
                    "type": "m.room.encryption",
                    "state_key": "",
                    "content": {"algorithm": "m.megolm.v1.aes-sha2"},
                }
            )

        body: dict[str, Any] = {
            "name": request.name,
            "preset": "public_chat" if request.is_public else "private_chat",
            "visibility": "public" if request.is_public else "private",
            "invite": list(request.invite),
            "initial_state": initial_state,
        }
        if request.topic:
            body["topic"] = request.topic
        if request.alias_localpart:
            body["room_alias_name"] = request.alias_localpart
        if request.power_levels:
            body["power_level_content_override"] = {"users": dict(request.power_levels)}

        response = await self._request("POST", f"{CLIENT_API}/createRoom", tenant_id, body)
        room_id = response.json().get("room_id")
        if not room_id:
            raise RemoteRoomError("createRoom response did not include a room_id")
        return room_id

    async def invite_user(self, room_id: str, user_id: str, tenant_id: TenantId) -> None:
        """Invite a user to a room."""
        await self._request(
            "POST", f"{_room_path(room_id)}/invite", tenant_id, {"user_id": user_id}
        )

    async def remove_user(self, room_id: str, user_id: str, tenant_id: TenantId) -> None:
        """Kick a user from a room."""
        await self._request(
            "POST",
            f"{_room_path(room_id)}/kick",
            tenant_id,
            {"user_id": user_id, "reason": "Membership revoked"},
        )

    async def set_power_levels(
        self,
        room_id: str,
        levels: dict[str, int],
        tenant_id: TenantId,
    ) -> None:
        """Merge user power levels into the room's current power-level state."""
        path = f"{_room_path(room_id)}/state/m.room.power_levels/"
        current = (await self._request("GET", path, tenant_id)).json()
        users = dict(current.get("users", {}))
        users.update(levels)
        current["users"] = users
        await self._request("PUT", path, tenant_id, current)

    async def delete_room(self, room_id: str, tenant_id: TenantId) -> bool:
        """Delete and purge a room through the Synapse admin API."""
        try:
            await self._request(
                "DELETE",
                f"{ADMIN_API}/rooms/{quote(room_id, safe='')}",
                tenant_id,
                {"purge": True},
            )
        except RemoteRoomError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    async def room_exists(self, room_id: str, tenant_id: TenantId) -> bool:
        """Check the room's state is readable by the automation user."""
        try:
            await self._request("GET", f"{_room_path(room_id)}/state", tenant_id)
        except RemoteRoomError as e:
            if e.status_code in (403, 404):
                return False
            raise
        return True

    async def _request(
        self,
        method: str,
        path: str,
        tenant_id: TenantId,
        body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send an authenticated request and raise RemoteRoomError on failure."""
        token = self._authenticator.access_token(tenant_id)
        try:
            response = await self._http.request(
                method,
                path,
                json=body,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise RemoteRoomError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response

        error = parse_error_body(response)
        errcode = error.get("errcode")
        if response.status_code == 401 and errcode in ("M_UNKNOWN_TOKEN", "M_MISSING_TOKEN"):
            self._authenticator.invalidate(tenant_id)
        raise RemoteRoomError(
            error.get("error", f"{method} {path} returned HTTP {response.status_code}"),
            errcode=errcode,
            status_code=response.status_code,
        )
