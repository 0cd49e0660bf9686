import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.api.conversations.models import Conversation
from messenger.api.conversations.schemas import ConversationItem
from messenger.api.messages.lifecycle import visible_filter
from messenger.api.messages.models import Message
from messenger.api.messages.schemas import MessageItem, MessageStatus
from messenger.api.mutes.schemas import MuteTarget
from messenger.api.mutes.service import MuteService
from messenger.api.users.models import User
from messenger.api.users.schemas import UserShort
from messenger.core.errors import InvalidInput
from messenger.core.utils import canonical_pair, utcnow

logger = logging.getLogger(__name__)


class ConversationService:
    def __init__(self, db: Session):
        self.db = db

    def find(self, user_a: int, user_b: int) -> Optional[Conversation]:
        low, high = canonical_pair(user_a, user_b)
        return self.db.query(Conversation).filter(
            Conversation.user_low_id == low,
            Conversation.user_high_id == high
        ).first()

    def resolve(self, user_a: int, user_b: int) -> Conversation:
        """
        Returns the single conversation for the pair, creating it on first
        contact. Two callers racing on the same pair both get the row that
        won the unique constraint.
        """
        if user_a == user_b:
            raise InvalidInput("Cannot start a conversation with yourself")

        conversation = self.find(user_a, user_b)
        if conversation:
            return conversation

        low, high = canonical_pair(user_a, user_b)
        conversation = Conversation(user_low_id=low, user_high_id=high)
        self.db.add(conversation)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            conversation = self.find(user_a, user_b)
            if conversation is None:
                raise
            logger.debug(f"Conversation race for pair {low}-{high}, using {conversation.id}")
            return conversation

        self.db.refresh(conversation)
        logger.info(f"Conversation {conversation.id} created for users {low} and {high}")
        return conversation

    def touch(self, conversation_id: int):
        """Bumps updated_at; committed together with the caller's write."""
        self.db.query(Conversation).filter(
            Conversation.id == conversation_id
        ).update({"updated_at": utcnow()}, synchronize_session="fetch")

    def list_for(self, user_id: int) -> List[ConversationItem]:
        conversations = self.db.query(Conversation).filter(
            or_(Conversation.user_low_id == user_id, Conversation.user_high_id == user_id)
        ).order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()

        muted_ids = MuteService(self.db).muted_ids(user_id, MuteTarget.CONVERSATION)

        items = []
        for conversation in conversations:
            other_id = conversation.other_user_id(user_id)
            other_user = self.db.get(User, other_id)

            last_message = self.db.query(Message).filter(
                Message.conversation_id == conversation.id,
                visible_filter(Message, user_id)
            ).order_by(Message.created_at.desc(), Message.id.desc()).first()

            unread_count = self.db.query(Message).filter(
                Message.conversation_id == conversation.id,
                Message.sender_id == other_id,
                Message.status != MessageStatus.READ.value
            ).count()

            items.append(ConversationItem(
                id=conversation.id,
                other_user=UserShort.model_validate(other_user),
                created_at=conversation.created_at,
                updated_at=conversation.updated_at,
                last_message=MessageItem.model_validate(last_message) if last_message else None,
                unread_count=unread_count,
                is_muted=conversation.id in muted_ids
            ))
        return items
