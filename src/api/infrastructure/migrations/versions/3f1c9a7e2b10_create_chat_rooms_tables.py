"""create chat rooms tables

Revision ID: 3f1c9a7e2b10
Revises:
Create Date: 2026-10-17 09:12:44.201731

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7e2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "chat_rooms",
        sa.Column("id", sa.String(length=26), nullable=False),  # ULID
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("entity_type", sa.String(length=16), nullable=False),
        sa.Column("entity_slug", sa.String(length=255), nullable=False),
        sa.Column(
            "remote_room_id",
            sa.String(length=255),
            nullable=False,
            server_default="",
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("topic", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(length=16), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=False),
        sa.Column("creator_id", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_chat_rooms")),
    )
    op.create_index(
        op.f("ix_chat_rooms_tenant_id"), "chat_rooms", ["tenant_id"], unique=False
    )
    # At most one room per entity within a tenant
    op.create_index(
        "ix_chat_rooms_tenant_entity",
        "chat_rooms",
        ["tenant_id", "entity_type", "entity_slug"],
        unique=True,
    )

    op.create_table(
        "chat_room_members",
        sa.Column("room_id", sa.String(length=26), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["room_id"],
            ["chat_rooms.id"],
            name=op.f("fk_chat_room_members_room_id_chat_rooms"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("room_id", "user_id", name=op.f("pk_chat_room_members")),
    )
    op.create_index(
        op.f("ix_chat_room_members_user_id"),
        "chat_room_members",
        ["user_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(
        op.f("ix_chat_room_members_user_id"), table_name="chat_room_members"
    )
    op.drop_table("chat_room_members")
    op.drop_index("ix_chat_rooms_tenant_entity", table_name="chat_rooms")
    op.drop_index(op.f("ix_chat_rooms_tenant_id"), table_name="chat_rooms")
    op.drop_table("chat_rooms")
