"""Domain-Oriented Observability for chat room infrastructure."""

from chat.infrastructure.observability.repository_probe import (
    DefaultRoomRepositoryProbe,
    RoomRepositoryProbe,
)

__all__ = [
    "DefaultRoomRepositoryProbe",
    "RoomRepositoryProbe",
]
