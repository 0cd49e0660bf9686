from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, CheckConstraint

from messenger.core.utils import utcnow
from messenger.database.database import Base


class Mute(Base):
    """A user's mute on one conversation or one group."""
    __tablename__ = "mutes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "conversation_id", name="uq_mute_conversation"),
        UniqueConstraint("user_id", "group_id", name="uq_mute_group"),
        CheckConstraint(
            "(conversation_id IS NULL) <> (group_id IS NULL)",
            name="ck_mute_single_target"
        ),
    )
