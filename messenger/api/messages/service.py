import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from messenger.api.conversations.models import Conversation
from messenger.api.conversations.service import ConversationService
from messenger.api.friends.service import FriendshipService
from messenger.api.messages import lifecycle
from messenger.api.messages.models import Message
from messenger.api.messages.schemas import MessageItem, MessageStatus, ReplyPreview
from messenger.core.errors import InvalidInput, InvalidReply, InvalidState, Forbidden, NotFound
from messenger.core.utils import utcnow

logger = logging.getLogger(__name__)


def parse_status_target(status: Union[MessageStatus, str]) -> MessageStatus:
    try:
        target = MessageStatus(status)
    except ValueError:
        target = None
    if target not in (MessageStatus.DELIVERED, MessageStatus.READ):
        raise InvalidInput("Invalid status. Must be 'delivered' or 'read'")
    return target


class MessageService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.friendships = FriendshipService(db)
        self.conversations = ConversationService(db)

    def send_message(
            self,
            sender_id: int,
            recipient_id: int,
            content: str,
            reply_to_message_id: Optional[int] = None
    ) -> MessageItem:
        content = lifecycle.check_content(content)
        if sender_id == recipient_id:
            raise InvalidInput("Cannot send message to yourself")
        if not self.friendships.are_friends(sender_id, recipient_id):
            raise Forbidden("Can only send messages to friends")

        conversation = self.conversations.resolve(sender_id, recipient_id)

        if reply_to_message_id is not None:
            replied = self.db.get(Message, reply_to_message_id)
            if replied is None or replied.conversation_id != conversation.id:
                raise InvalidReply()

        message = Message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=content,
            status=MessageStatus.SENT.value,
            reply_to_message_id=reply_to_message_id,
            created_at=self.clock()
        )
        self.db.add(message)
        self.conversations.touch(conversation.id)
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Message sent: User {sender_id} -> User {recipient_id} (Conversation {conversation.id})")
        return self._to_item(message, sender_id)

    def get_messages(
            self,
            user_id: int,
            counterpart_id: int,
            limit: Optional[int] = None,
            before_id: Optional[int] = None
    ) -> List[MessageItem]:
        if not self.friendships.are_friends(user_id, counterpart_id):
            raise Forbidden("Can only view messages with friends")

        conversation = self.conversations.find(user_id, counterpart_id)
        if not conversation:
            return []

        query = self.db.query(Message).filter(
            Message.conversation_id == conversation.id,
            lifecycle.visible_filter(Message, user_id)
        )
        if before_id:
            query = query.filter(Message.id < before_id)

        if limit:
            messages = query.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit).all()
            messages.reverse()
        else:
            messages = query.order_by(Message.created_at.asc(), Message.id.asc()).all()

        return [self._to_item(m, user_id) for m in messages]

    def advance_status(self, actor_id: int, message_ids: List[int], status: Union[MessageStatus, str]) -> int:
        """
        Moves messages addressed to the actor forward to delivered/read.
        Messages the actor sent, messages outside the actor's conversations
        and status regressions are skipped; returns how many rows changed.
        """
        if not message_ids:
            raise InvalidInput("No message IDs provided")
        target = parse_status_target(status)

        own_conversations = select(Conversation.id).where(
            or_(Conversation.user_low_id == actor_id, Conversation.user_high_id == actor_id)
        )
        # Guard checked in SQL against the committed status
        changed = self.db.query(Message).filter(
            Message.id.in_(message_ids),
            Message.sender_id != actor_id,
            Message.conversation_id.in_(own_conversations),
            Message.status.in_(lifecycle.statuses_below(target))
        ).update({"status": target.value}, synchronize_session="fetch")
        self.db.commit()
        return changed

    def mark_conversation_read(self, actor_id: int, counterpart_id: int) -> int:
        conversation = self.conversations.find(actor_id, counterpart_id)
        if not conversation:
            return 0

        rows_affected = self.db.query(Message).filter(
            Message.conversation_id == conversation.id,
            Message.sender_id == counterpart_id,
            Message.status != MessageStatus.READ.value
        ).update({"status": MessageStatus.READ.value}, synchronize_session="fetch")
        self.db.commit()
        return rows_affected

    def edit_message(self, actor_id: int, message_id: int, content: str) -> MessageItem:
        now = self.clock()
        message = self._get_message(message_id)
        content = lifecycle.check_edit(message, actor_id, content, now)

        rows = self.db.query(Message).filter(
            Message.id == message_id,
            lifecycle.editable_filter(Message, actor_id, now)
        ).update(
            {"content": content, "is_edited": True, "edited_at": now},
            synchronize_session="fetch"
        )
        if not rows:
            # Changed after it was read; report the current state
            self.db.rollback()
            self.db.refresh(message)
            lifecycle.check_edit(message, actor_id, content, now)
            raise InvalidState("Message can no longer be edited")
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Message {message_id} edited by User {actor_id}")
        return self._to_item(message, actor_id)

    def delete_message(self, actor_id: int, message_id: int, for_everyone: bool) -> MessageItem:
        message = self._get_message(message_id)
        lifecycle.apply_delete(message, actor_id, for_everyone, self.clock())
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Message {message_id} deleted by User {actor_id} (for everyone: {for_everyone})")
        return self._to_item(message, actor_id)

    def _get_message(self, message_id: int) -> Message:
        # Locked and re-read even if the row is already in the session
        message = self.db.get(Message, message_id, with_for_update=True, populate_existing=True)
        if not message:
            raise NotFound("Message not found")
        return message

    def _to_item(self, message: Message, viewer_id: int) -> MessageItem:
        item = MessageItem.model_validate(message)
        if message.reply_to_message_id:
            replied = self.db.get(Message, message.reply_to_message_id)
            if replied and lifecycle.is_visible_to(replied, viewer_id):
                item.reply_to_message = ReplyPreview.model_validate(replied)
        return item
