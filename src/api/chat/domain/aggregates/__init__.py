"""Domain aggregates for the chat room context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from chat.domain.aggregates.room import Room

__all__ = [
    "Room",
]
