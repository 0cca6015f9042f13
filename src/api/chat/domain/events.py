"""Membership change events consumed by the chat room context.

These events are published by the events, groups and identity services when
attendance, membership or chat identity changes. The membership event handler
turns each one into a reconciliation operation.

Slugs rather than numeric ids are carried so that handlers can run outside
any request scope.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AttendeeAdded:
    """Event raised when a user starts attending an event.

    Attributes:
        tenant_id: Tenant the event lives in
        event_slug: Slug of the event
        user_id: Application user reference of the attendee
        occurred_at: When the event occurred (UTC)
    """

    tenant_id: str
    event_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class AttendeeRemoved:
    """Event raised when a user stops attending an event."""

    tenant_id: str
    event_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class AttendeeRoleChanged:
    """Event raised when an attendee's role changes.

    The new role itself is not carried: privilege is always recomputed from
    the role directory.
    """

    tenant_id: str
    event_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class EventDeleted:
    """Event raised when an event is deleted."""

    tenant_id: str
    event_slug: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupMemberAdded:
    """Event raised when a user joins a group."""

    tenant_id: str
    group_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupMemberRemoved:
    """Event raised when a user leaves or is removed from a group."""

    tenant_id: str
    group_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupMemberRoleChanged:
    """Event raised when a group member's role changes."""

    tenant_id: str
    group_slug: str
    user_id: str
    occurred_at: datetime


@dataclass(frozen=True)
class GroupDeleted:
    """Event raised when a group is deleted."""

    tenant_id: str
    group_slug: str
    occurred_at: datetime


@dataclass(frozen=True)
class ChatIdentityProvisioned:
    """Event raised when a user completes chat-backend identity provisioning.

    Attributes:
        tenant_id: Tenant the user belongs to
        remote_user_id: Fully qualified chat user id (e.g. "@alice:chat.example")
        occurred_at: When the event occurred (UTC)
    """

    tenant_id: str
    remote_user_id: str
    occurred_at: datetime


# Type alias for all events the chat room context consumes
MembershipEvent = (
    AttendeeAdded
    | AttendeeRemoved
    | AttendeeRoleChanged
    | EventDeleted
    | GroupMemberAdded
    | GroupMemberRemoved
    | GroupMemberRoleChanged
    | GroupDeleted
    | ChatIdentityProvisioned
)

__all__ = [
    "AttendeeAdded",
    "AttendeeRemoved",
    "AttendeeRoleChanged",
    "EventDeleted",
    "GroupMemberAdded",
    "GroupMemberRemoved",
    "GroupMemberRoleChanged",
    "GroupDeleted",
    "ChatIdentityProvisioned",
    "MembershipEvent",
]
