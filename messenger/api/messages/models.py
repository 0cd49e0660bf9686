from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Text, Index
from sqlalchemy.orm import relationship, declared_attr

from messenger.core.utils import utcnow
from messenger.database.database import Base


class MessageMixin:
    """Columns shared by direct and group messages."""

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="sent")  # sent, delivered, read

    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_for_everyone = Column(Boolean, nullable=False, default=False)

    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime, nullable=True)

    # Never updated; anchors the edit/delete window
    created_at = Column(DateTime, nullable=False, default=utcnow)

    @declared_attr
    def sender_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def reply_to_message_id(cls):
        return Column(Integer, ForeignKey(f"{cls.__tablename__}.id", ondelete="SET NULL"), nullable=True)

    @declared_attr
    def sender(cls):
        return relationship("User")


class Message(MessageMixin, Base):
    __tablename__ = "messages"

    conversation_id = Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index("ix_messages_conversation_created", "conversation_id", "created_at"),
    )
