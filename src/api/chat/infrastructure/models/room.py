"""SQLAlchemy ORM models for the chat_rooms and chat_room_members tables.

A room row is the registry record binding one entity to one backend room.
Member rows hold the application's membership intent for that room.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from infrastructure.database.models import Base, TimestampMixin


class RoomModel(Base, TimestampMixin):
    """ORM model for chat_rooms table.

    At most one row exists per (tenant_id, entity_type, entity_slug); the
    unique index is what settles concurrent creation of the same room.
    """

    __tablename__ = "chat_rooms"
    __table_args__ = (
        Index(
            "ix_chat_rooms_tenant_entity",
            "tenant_id",
            "entity_type",
            "entity_slug",
            unique=True,
        ),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(16), nullable=False)
    entity_slug: Mapped[str] = mapped_column(String(255), nullable=False)
    remote_room_id: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    topic: Mapped[str | None] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(String(16), nullable=False)
    settings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    creator_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    members: Mapped[list[RoomMemberModel]] = relationship(
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomMemberModel.created_at",
        lazy="raise",
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RoomModel(id={self.id}, tenant_id={self.tenant_id}, "
            f"entity={self.entity_type}:{self.entity_slug}, "
            f"remote_room_id={self.remote_room_id})>"
        )


class RoomMemberModel(Base, TimestampMixin):
    """ORM model for chat_room_members table."""

    __tablename__ = "chat_room_members"

    room_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("chat_rooms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True, index=True)

    room: Mapped[RoomModel] = relationship(back_populates="members")

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoomMemberModel(room_id={self.room_id}, user_id={self.user_id})>"
