"""Unit tests for the Room aggregate."""

import pytest

from chat.domain.aggregates import Room
from chat.domain.value_objects import (
    EntityRef,
    RoomVisibility,
    TenantId,
    UserId,
)


@pytest.fixture
def room() -> Room:
    return Room.create(
        tenant_id=TenantId("tenant-a"),
        entity=EntityRef.event("evt-42"),
        remote_room_id="!abc:matrix.test",
        name="event-evt-42-tenant-a",
        visibility=RoomVisibility.PRIVATE,
        topic="Discussion for Launch Party",
        creator_id=UserId("alice"),
    )


class TestRoomCreation:
    """Tests for Room.create factory."""

    def test_generates_id(self, room):
        """Should assign a fresh registry id."""
        assert room.id.value
        assert len(room.id.value) == 26

    def test_derives_settings_from_visibility(self, room):
        """Private room settings should require invitation."""
        assert room.settings.require_invitation is True

    def test_starts_without_members(self, room):
        """New rooms have no registry members."""
        assert room.members == []

    def test_distinct_rooms_get_distinct_ids(self):
        """Each created room gets its own id."""
        kwargs = dict(
            tenant_id=TenantId("t"),
            entity=EntityRef.group("g"),
            remote_room_id="!r:s",
            name="group-g-t",
            visibility=RoomVisibility.PUBLIC,
        )
        assert Room.create(**kwargs).id != Room.create(**kwargs).id


class TestRoomMembership:
    """Tests for idempotent membership changes."""

    def test_add_member(self, room):
        """Should add a new member and report it."""
        assert room.add_member(UserId("bob")) is True
        assert room.has_member(UserId("bob"))

    def test_add_member_twice_keeps_one_entry(self, room):
        """Adding an existing member is a no-op."""
        room.add_member(UserId("bob"))
        assert room.add_member(UserId("bob")) is False
        assert room.members == [UserId("bob")]

    def test_remove_member(self, room):
        """Should remove an existing member and report it."""
        room.add_member(UserId("bob"))
        assert room.remove_member(UserId("bob")) is True
        assert not room.has_member(UserId("bob"))

    def test_remove_absent_member(self, room):
        """Removing a non-member is a no-op."""
        assert room.remove_member(UserId("carol")) is False

    def test_clear_members(self, room):
        """Should drop every member."""
        room.add_member(UserId("bob"))
        room.add_member(UserId("carol"))
        room.clear_members()
        assert room.members == []


class TestNeedsRecreation:
    """Tests for the inconsistent-record marker."""

    def test_room_with_remote_id_is_consistent(self, room):
        """A record with a backend id is usable."""
        assert room.needs_recreation is False

    def test_empty_remote_id_needs_recreation(self, room):
        """A record without a backend id must be recreated."""
        room.remote_room_id = ""
        assert room.needs_recreation is True
