"""create mutes table

Revision ID: f13c6a0d2b58
Revises: e5907b3c8f42
Create Date: 2026-10-14 09:37:52.410286

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'f13c6a0d2b58'
down_revision: Union[str, Sequence[str], None] = 'e5907b3c8f42'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "mutes",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("conversation_id", sa.Integer, sa.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=True),
        sa.Column("group_id", sa.Integer, sa.ForeignKey("groups.id", ondelete="CASCADE"), nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=True),
        sa.UniqueConstraint("user_id", "conversation_id", name="uq_mute_conversation"),
        sa.UniqueConstraint("user_id", "group_id", name="uq_mute_group"),
        sa.CheckConstraint("(conversation_id IS NULL) <> (group_id IS NULL)", name="ck_mute_single_target"),
    )


def downgrade() -> None:
    op.drop_table("mutes")
