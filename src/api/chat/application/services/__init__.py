"""Application services for the chat room bounded context.

Application services orchestrate the room aggregate, the registry, the
directories and the chat backend to fulfill use cases. They are the "front
door" to the chat room context.
"""

from chat.application.services.room_reconciliation_service import (
    RoomReconciliationService,
)
from chat.application.services.user_room_sync_service import UserRoomSyncService

__all__ = [
    "RoomReconciliationService",
    "UserRoomSyncService",
]
