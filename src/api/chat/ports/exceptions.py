"""Exceptions for the chat room bounded context.

The taxonomy separates outcomes the caller must see (not found, remote
unavailable, precondition failed, authentication failed) from conditions the
reconciliation engine absorbs itself (duplicate room on racing creation).
Degraded outcomes such as a failed moderator sync are never raised; they are
reported through the domain probes.
"""

from __future__ import annotations

from enum import StrEnum


class ChatRoomError(Exception):
    """Base exception for chat room reconciliation errors."""

    pass


class NotFoundError(ChatRoomError):
    """Raised when an entity, user or room is absent. Terminal for the call."""

    pass


class EntityNotFoundError(NotFoundError):
    """Raised when the event or group referenced by an operation does not exist."""

    pass


class UserNotFoundError(NotFoundError):
    """Raised when the user referenced by an operation does not exist."""

    pass


class RoomNotFoundError(NotFoundError):
    """Raised when no registry room exists where one is required."""

    pass


class RemoteUnavailableError(ChatRoomError):
    """Raised when the chat backend fails for a reason that is not a recognized success.

    The originating RemoteRoomError is chained as __cause__.
    """

    pass


class PreconditionFailedError(ChatRoomError):
    """Raised when an operation's precondition does not hold."""

    pass


class MissingChatIdentityError(PreconditionFailedError):
    """Raised when a user has not completed chat-backend identity provisioning.

    No identifier is ever fabricated for such a user: an invitation to an
    unverified identity could never be accepted.
    """

    def __init__(self, user_id: str, tenant_id: str):
        self.user_id = user_id
        self.tenant_id = tenant_id
        super().__init__(
            f"User {user_id} has no chat identity in tenant {tenant_id}; "
            "they must sign in to the chat backend first"
        )


class AutomationAuthenticationError(ChatRoomError):
    """Raised when the automation identity cannot authenticate for a tenant."""

    def __init__(self, tenant_id: str, reason: str):
        self.tenant_id = tenant_id
        self.reason = reason
        super().__init__(
            f"Automation identity failed to authenticate for tenant {tenant_id}: {reason}"
        )


class DuplicateRoomError(ChatRoomError):
    """Raised when a room record already exists for the entity in the tenant.

    Signals that a concurrent creator won the race; the reconciliation engine
    adopts the winning record.
    """

    pass


class RemoteRoomError(Exception):
    """Raised by remote room clients when the chat backend rejects a call.

    Attributes:
        errcode: Backend error code (e.g. "M_FORBIDDEN"), if provided
        status_code: HTTP status code, if the failure came from a response
    """

    def __init__(
        self,
        message: str,
        errcode: str | None = None,
        status_code: int | None = None,
    ):
        self.errcode = errcode
        self.status_code = status_code
        super().__init__(message)


class RemoteErrorKind(StrEnum):
    """Classification of a chat backend failure."""

    ALREADY_MEMBER = "already_member"
    ROOM_MISSING = "room_missing"
    NOT_MEMBER = "not_member"
    OTHER = "other"


_ALREADY_MEMBER_MARKERS = ("already in the room", "already a member", "already joined")
_ROOM_MISSING_MARKERS = ("does not exist", "unknown room")
_NOT_MEMBER_MARKERS = ("not in the room", "not a member")


def classify_remote_error(error: Exception) -> RemoteErrorKind:
    """Classify a backend failure by its message and error code.

    Matching is case-insensitive. Membership markers are checked before the
    room-missing markers so that "already a member" is never read as a
    missing room.
    """
    message = str(error).lower()
    errcode = getattr(error, "errcode", None)

    if any(marker in message for marker in _ALREADY_MEMBER_MARKERS):
        return RemoteErrorKind.ALREADY_MEMBER
    if any(marker in message for marker in _NOT_MEMBER_MARKERS):
        return RemoteErrorKind.NOT_MEMBER
    if errcode == "M_NOT_FOUND" or any(
        marker in message for marker in _ROOM_MISSING_MARKERS
    ):
        return RemoteErrorKind.ROOM_MISSING
    return RemoteErrorKind.OTHER
