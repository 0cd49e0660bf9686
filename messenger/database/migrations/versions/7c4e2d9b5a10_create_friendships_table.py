"""create friendships table

Revision ID: 7c4e2d9b5a10
Revises: 3b1f0c7a9d21
Create Date: 2026-10-12 10:06:42.904117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7c4e2d9b5a10'
down_revision: Union[str, Sequence[str], None] = '3b1f0c7a9d21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "friendships",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("user_low_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_high_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("requested_by", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime, nullable=True),
        sa.Column("updated_at", sa.DateTime, nullable=True),
        sa.UniqueConstraint("user_low_id", "user_high_id", name="uq_friendship_pair"),
        sa.CheckConstraint("user_low_id < user_high_id", name="ck_friendship_order"),
    )
    op.create_index("ix_friendships_high_status", "friendships", ["user_high_id", "status"])
    op.create_index("ix_friendships_low_status", "friendships", ["user_low_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_friendships_low_status", table_name="friendships")
    op.drop_index("ix_friendships_high_status", table_name="friendships")
    op.drop_table("friendships")
