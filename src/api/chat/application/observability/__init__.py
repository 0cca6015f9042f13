"""Domain-Oriented Observability for the chat room application layer.

Probes for application service operations following Domain-Oriented Observability patterns.
"""

from chat.application.observability.automation_session_probe import (
    AutomationSessionProbe,
    DefaultAutomationSessionProbe,
)
from chat.application.observability.room_reconciliation_probe import (
    DefaultRoomReconciliationProbe,
    RoomReconciliationProbe,
)
from chat.application.observability.user_room_sync_probe import (
    DefaultMembershipEventProbe,
    DefaultUserRoomSyncProbe,
    MembershipEventProbe,
    UserRoomSyncProbe,
)

__all__ = [
    "AutomationSessionProbe",
    "DefaultAutomationSessionProbe",
    "RoomReconciliationProbe",
    "DefaultRoomReconciliationProbe",
    "UserRoomSyncProbe",
    "DefaultUserRoomSyncProbe",
    "MembershipEventProbe",
    "DefaultMembershipEventProbe",
]
