"""Ports for the chat room bounded context.

Protocols for the room registry, entity/user/role directories and the chat
backend, plus the context's exception taxonomy.
"""

from chat.ports.directories import (
    ChatEntity,
    ChatUser,
    IEntityDirectory,
    IRoleDirectory,
    IUserDirectory,
)
from chat.ports.remote import (
    IAutomationAuthenticator,
    IRemoteRoomClient,
    RoomCreationRequest,
)
from chat.ports.repositories import IRegistryTransaction, IRoomRepository

__all__ = [
    "ChatEntity",
    "ChatUser",
    "IAutomationAuthenticator",
    "IEntityDirectory",
    "IRegistryTransaction",
    "IRemoteRoomClient",
    "IRoleDirectory",
    "IRoomRepository",
    "IUserDirectory",
    "RoomCreationRequest",
]
