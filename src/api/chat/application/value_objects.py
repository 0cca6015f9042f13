"""Application-layer value objects for the chat room bounded context.

Read-only results and injected configuration; none of these are persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from chat.domain.value_objects import EntityRef


@dataclass(frozen=True)
class ReconciliationConfig:
    """Configuration the reconciliation engine needs from the environment.

    Attributes:
        server_name: Chat backend server name used to qualify user ids
            (@handle:server_name) and room aliases (#name:server_name)
    """

    server_name: str

    def __post_init__(self) -> None:
        if not self.server_name:
            raise ValueError("server_name cannot be empty")

    def remote_user_id(self, handle: str) -> str:
        """Qualify a chat handle into a remote user id."""
        return f"@{handle}:{self.server_name}"


@dataclass(frozen=True)
class RoomDeletionReport:
    """Outcome of deleting every room of an entity.

    Attributes:
        deleted_room_ids: Registry ids of the room records that were deleted
        warnings: Best-effort steps that failed and were skipped
    """

    deleted_room_ids: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def clean(self) -> bool:
        """True when no step produced a warning."""
        return not self.warnings


@dataclass(frozen=True)
class RoomSyncReport:
    """Outcome of syncing a user into every room they belong to.

    Attributes:
        synced: Entities whose room now lists the user
        failed: Entity -> error message, for entities that could not be synced
    """

    synced: tuple[EntityRef, ...] = ()
    failed: dict[EntityRef, str] = field(default_factory=dict)
