"""Matrix homeserver adapters for the chat room bounded context."""

from chat.infrastructure.matrix.authenticator import MatrixAutomationAuthenticator
from chat.infrastructure.matrix.client import MatrixRoomClient

__all__ = [
    "MatrixAutomationAuthenticator",
    "MatrixRoomClient",
]
