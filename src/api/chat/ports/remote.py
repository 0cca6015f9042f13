"""Chat backend protocols.

Defines the call contract for the remote room client and the authenticator
behind the automation identity. All administrative room operations go through
the automation identity, never through end-user credentials.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from chat.domain.value_objects import TenantId


@dataclass(frozen=True)
class RoomCreationRequest:
    """Everything the backend needs to create a room in one call.

    Attributes:
        name: Room name
        alias_localpart: Local part of the room alias to claim, if any
        topic: Room topic
        is_public: Whether the room is published and joinable
        encrypted: Whether to enable end-to-end encryption
        invite: Remote user ids to invite at creation
        power_levels: Remote user id -> power level, applied at creation
    """

    name: str
    alias_localpart: str | None = None
    topic: str | None = None
    is_public: bool = False
    encrypted: bool = False
    invite: tuple[str, ...] = ()
    power_levels: dict[str, int] = field(default_factory=dict)


@runtime_checkable
class IRemoteRoomClient(Protocol):
    """Room administration calls against the chat backend.

    Every call may raise RemoteRoomError. Callers classify the error to tell
    semantic successes ("already in the room") from real failures.
    """

    async def create_room(self, request: RoomCreationRequest, tenant_id: TenantId) -> str:
        """Create a room and return its remote id."""
        ...

    async def invite_user(self, room_id: str, user_id: str, tenant_id: TenantId) -> None:
        """Invite a remote user to a room."""
        ...

    async def remove_user(self, room_id: str, user_id: str, tenant_id: TenantId) -> None:
        """Remove (kick) a remote user from a room."""
        ...

    async def set_power_levels(
        self,
        room_id: str,
        levels: dict[str, int],
        tenant_id: TenantId,
    ) -> None:
        """Merge user power levels into the room's power-level state."""
        ...

    async def delete_room(self, room_id: str, tenant_id: TenantId) -> bool:
        """Delete a room. Returns False if the room was already gone."""
        ...

    async def room_exists(self, room_id: str, tenant_id: TenantId) -> bool:
        """Check whether the room exists and is reachable by the automation identity."""
        ...


@runtime_checkable
class IAutomationAuthenticator(Protocol):
    """Authentication bootstrap for the automation identity, per tenant."""

    def is_authenticated(self, tenant_id: TenantId) -> bool:
        """Whether a usable credential is already held for the tenant."""
        ...

    async def authenticate(self, tenant_id: TenantId) -> None:
        """Obtain a credential for the tenant.

        Raises:
            Exception: Any failure; the session wraps it in
                AutomationAuthenticationError
        """
        ...

    def identity(self, tenant_id: TenantId) -> str:
        """Remote user id of the automation identity for the tenant."""
        ...
