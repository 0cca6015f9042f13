"""SQLAlchemy ORM models for the chat room bounded context.

These models map to database tables and are used by repository implementations.
"""

from chat.infrastructure.models.room import RoomMemberModel, RoomModel

__all__ = [
    "RoomMemberModel",
    "RoomModel",
]
