"""Value objects for the chat room domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any

from ulid import ULID


@dataclass(frozen=True)
class TenantId:
    """Opaque tenant context threaded through every room operation."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("TenantId cannot be empty")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(frozen=True)
class RoomId:
    """Identifier for a Room aggregate in the local registry.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RoomId:
        """Generate a new RoomId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> RoomId:
        """Create RoomId from string value.

        Args:
            value: ULID string

        Returns:
            RoomId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid RoomId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class UserId:
    """Reference to an application user.

    Users are owned by the application, so the value is whatever the user
    directory uses as its key (typically the user slug).
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("UserId cannot be empty")

    def __str__(self) -> str:
        """Return string representation."""
        return self.value


class EntityType(StrEnum):
    """Kinds of application entity that own a room."""

    EVENT = "event"
    GROUP = "group"


@dataclass(frozen=True)
class EntityRef:
    """Reference to exactly one event or group within a tenant."""

    entity_type: EntityType
    slug: str

    def __post_init__(self) -> None:
        if not self.slug:
            raise ValueError("Entity slug cannot be empty")

    def __str__(self) -> str:
        """Return string representation (e.g. "event:evt-42")."""
        return f"{self.entity_type.value}:{self.slug}"

    @classmethod
    def event(cls, slug: str) -> EntityRef:
        """Reference an event by slug."""
        return cls(entity_type=EntityType.EVENT, slug=slug)

    @classmethod
    def group(cls, slug: str) -> EntityRef:
        """Reference a group by slug."""
        return cls(entity_type=EntityType.GROUP, slug=slug)


class RoomVisibility(StrEnum):
    """Visibility of a room, derived from its entity at creation time."""

    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def from_entity_visibility(cls, visibility: str | None) -> RoomVisibility:
        """Map an entity visibility string to a room visibility.

        Only an explicit "public" entity yields a public room; "authenticated",
        "private" and unknown values all yield private rooms.
        """
        if visibility is not None and visibility.lower() == "public":
            return cls.PUBLIC
        return cls.PRIVATE


@dataclass(frozen=True)
class RoomSettings:
    """Policy bag set once at room creation and never reconciled."""

    history_visibility: str = "shared"
    guest_access: bool = False
    require_invitation: bool = True
    encrypted: bool = False

    @classmethod
    def for_visibility(cls, visibility: RoomVisibility) -> RoomSettings:
        """Build the creation-time settings for a room visibility."""
        return cls(require_invitation=visibility != RoomVisibility.PUBLIC)

    def as_dict(self) -> dict[str, Any]:
        """Serialize for JSON persistence."""
        return {
            "history_visibility": self.history_visibility,
            "guest_access": self.guest_access,
            "require_invitation": self.require_invitation,
            "encrypted": self.encrypted,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RoomSettings:
        """Deserialize from JSON persistence, tolerating missing keys."""
        data = data or {}
        return cls(
            history_visibility=data.get("history_visibility", "shared"),
            guest_access=bool(data.get("guest_access", False)),
            require_invitation=bool(data.get("require_invitation", True)),
            encrypted=bool(data.get("encrypted", False)),
        )


class PrivilegeLevel(IntEnum):
    """Room-scoped power levels used by the chat backend.

    ADMIN is held only by the automation identity.
    """

    NONE = 0
    MODERATOR = 50
    ADMIN = 100


@dataclass(frozen=True)
class MemberRole:
    """A user's application role in an entity, with its permission names."""

    name: str
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, permission: str) -> bool:
        """Check whether the role grants a permission."""
        return permission in self.permissions
