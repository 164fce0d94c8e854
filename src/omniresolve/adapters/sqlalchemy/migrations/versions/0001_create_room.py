"""Create the room table.

Revision ID: 0001_create_room
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_room"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "room",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("multichannel_room_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_room")),
    )
    op.create_index(
        op.f("ix_room_multichannel_room_id"),
        "room",
        ["multichannel_room_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_room_multichannel_room_id"), table_name="room")
    op.drop_table("room")
