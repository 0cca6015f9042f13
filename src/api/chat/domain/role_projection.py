"""Projection of application roles onto chat-backend privilege levels.

Privilege is never stored: it is recomputed from the user's current role
every time membership is reconciled.
"""

from __future__ import annotations

from enum import StrEnum

from chat.domain.value_objects import EntityType, MemberRole, PrivilegeLevel


class EventAttendeeRole(StrEnum):
    """Attendee roles defined by the events service."""

    PARTICIPANT = "participant"
    HOST = "host"
    SPEAKER = "speaker"
    MODERATOR = "moderator"
    GUEST = "guest"


class EventAttendeePermission(StrEnum):
    """Attendee permissions relevant to room moderation."""

    MANAGE_EVENT = "MANAGE_EVENT"


class GroupMemberRole(StrEnum):
    """Group membership roles defined by the groups service."""

    OWNER = "owner"
    ADMIN = "admin"
    MODERATOR = "moderator"
    MEMBER = "member"
    GUEST = "guest"


_EVENT_MODERATOR_ROLES = frozenset({EventAttendeeRole.HOST, EventAttendeeRole.MODERATOR})
_GROUP_MODERATOR_ROLES = frozenset(
    {GroupMemberRole.OWNER, GroupMemberRole.ADMIN, GroupMemberRole.MODERATOR}
)


def privilege_for(entity_type: EntityType, role: MemberRole | None) -> PrivilegeLevel:
    """Compute the room privilege a role earns.

    Events require both a moderating role name and the MANAGE_EVENT
    permission. Groups decide on the role name alone; the groups service does
    not expose per-role permission flags to this projection.

    Args:
        entity_type: Kind of entity the role belongs to
        role: The user's role in the entity, or None if they hold none

    Returns:
        MODERATOR or NONE
    """
    if role is None:
        return PrivilegeLevel.NONE

    role_name = role.name.lower()

    if entity_type == EntityType.EVENT:
        if role_name in _EVENT_MODERATOR_ROLES and role.has_permission(
            EventAttendeePermission.MANAGE_EVENT
        ):
            return PrivilegeLevel.MODERATOR
        return PrivilegeLevel.NONE

    if entity_type == EntityType.GROUP and role_name in _GROUP_MODERATOR_ROLES:
        return PrivilegeLevel.MODERATOR

    return PrivilegeLevel.NONE
