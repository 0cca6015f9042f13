"""User room sync service for the chat room bounded context.

When a user signs in to the chat backend for the first time, their earlier
attendance and memberships could not produce invitations (they had no chat
identity yet). This service replays them.
"""

from __future__ import annotations

from chat.application.observability import (
    DefaultUserRoomSyncProbe,
    UserRoomSyncProbe,
)
from chat.application.services.room_reconciliation_service import (
    RoomReconciliationService,
)
from chat.application.value_objects import ReconciliationConfig, RoomSyncReport
from chat.domain.value_objects import EntityRef, TenantId, UserId
from chat.ports.directories import IRoleDirectory, IUserDirectory
from chat.ports.exceptions import ChatRoomError


class UserRoomSyncService:
    """Adds a user to the rooms of every entity they belong to."""

    def __init__(
        self,
        reconciliation: RoomReconciliationService,
        user_directory: IUserDirectory,
        role_directory: IRoleDirectory,
        config: ReconciliationConfig,
        probe: UserRoomSyncProbe | None = None,
    ):
        self._reconciliation = reconciliation
        self._users = user_directory
        self._roles = role_directory
        self._config = config
        self._probe = probe or DefaultUserRoomSyncProbe()

    async def sync_user_rooms(self, user_id: UserId, tenant_id: TenantId) -> RoomSyncReport:
        """Add the user to every room their memberships call for.

        Each entity is reconciled independently; a failure on one is recorded
        in the report and does not stop the others.

        Args:
            user_id: The user to sync
            tenant_id: The tenant context

        Returns:
            Report of synced and failed entities
        """
        memberships = await self._roles.list_memberships(user_id, tenant_id)

        synced: list[EntityRef] = []
        failed: dict[EntityRef, str] = {}
        for entity in memberships:
            try:
                await self._reconciliation.add_member(entity, user_id, tenant_id)
            except ChatRoomError as e:
                failed[entity] = str(e)
                self._probe.user_room_sync_failed(
                    user_id=user_id.value,
                    entity=str(entity),
                    tenant_id=tenant_id.value,
                    error=str(e),
                )
                continue
            synced.append(entity)

        self._probe.user_rooms_synced(
            user_id=user_id.value,
            tenant_id=tenant_id.value,
            synced=len(synced),
            failed=len(failed),
        )
        return RoomSyncReport(synced=tuple(synced), failed=failed)

    async def sync_by_remote_identity(
        self,
        remote_user_id: str,
        tenant_id: TenantId,
    ) -> RoomSyncReport:
        """Sync rooms for the application user behind a chat-backend identity.

        Identities from other servers, malformed identities and handles that
        map to no user are rejected with an empty report.

        Args:
            remote_user_id: Remote user id ("@handle:server")
            tenant_id: The tenant context

        Returns:
            Report of synced and failed entities
        """
        handle = self._parse_handle(remote_user_id)
        if handle is None:
            return RoomSyncReport()

        user = await self._users.find_by_chat_handle(handle, tenant_id)
        if user is None:
            self._probe.remote_identity_rejected(
                remote_user_id=remote_user_id,
                reason="no user owns this chat handle",
            )
            return RoomSyncReport()

        return await self.sync_user_rooms(user.user_id, tenant_id)

    def _parse_handle(self, remote_user_id: str) -> str | None:
        if not remote_user_id.startswith("@"):
            self._probe.remote_identity_rejected(
                remote_user_id=remote_user_id, reason="malformed user id"
            )
            return None

        handle, sep, server = remote_user_id[1:].partition(":")
        if not sep or not handle or not server:
            self._probe.remote_identity_rejected(
                remote_user_id=remote_user_id, reason="malformed user id"
            )
            return None

        if server != self._config.server_name:
            self._probe.remote_identity_rejected(
                remote_user_id=remote_user_id, reason="foreign server"
            )
            return None

        return handle
