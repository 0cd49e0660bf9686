"""
Message lifecycle rules shared by direct and group messages.

A message moves forward through sent -> delivered -> read and never back.
Edits and deletes-for-everyone are allowed only by the sender and only
inside the mutability window, which is measured from the immutable
``created_at``; editing does not restart it.

Checks run against a loaded row; the *_filter helpers repeat them as SQL
conditions for UPDATEs that must not act on a row changed in the meantime.
Nothing here touches the session: callers own the transaction.
"""
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import and_, not_

from messenger.api.messages.schemas import MessageStatus
from messenger.core.config import settings
from messenger.core.errors import (
    Forbidden, InvalidInput, InvalidState, EditWindowExpired, DeleteWindowExpired
)

EDIT_WINDOW = timedelta(minutes=settings.MESSAGE_EDIT_WINDOW_MINUTES)
MAX_MESSAGE_LENGTH = settings.MAX_MESSAGE_LENGTH
DELETED_PLACEHOLDER = "This message was deleted"

STATUS_RANK = {
    MessageStatus.SENT.value: 0,
    MessageStatus.DELIVERED.value: 1,
    MessageStatus.READ.value: 2,
}


def check_content(content: str) -> str:
    content = (content or "").strip()
    if not content:
        raise InvalidInput("Message content cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise InvalidInput(f"Message content exceeds {MAX_MESSAGE_LENGTH} characters")
    return content


def within_window(message, now: datetime) -> bool:
    return now - message.created_at <= EDIT_WINDOW


def check_edit(message, actor_id: int, content: str, now: datetime) -> str:
    if message.sender_id != actor_id:
        raise Forbidden("You can only edit your own messages")
    if message.is_deleted:
        raise InvalidState("Cannot edit a deleted message")
    if not within_window(message, now):
        raise EditWindowExpired()

    return check_content(content)


def editable_filter(model, actor_id: int, now: datetime):
    """
    Re-checks the edit rules inside the UPDATE so that a delete committed
    after the row was read turns the edit into a no-op.
    """
    return and_(
        model.sender_id == actor_id,
        model.is_deleted.is_(False),
        model.created_at >= now - EDIT_WINDOW
    )


def apply_delete(message, actor_id: int, for_everyone: bool, now: datetime):
    if message.sender_id != actor_id:
        raise Forbidden("You can only delete your own messages")

    if not for_everyone:
        message.is_deleted = True
        return message

    if message.deleted_for_everyone:
        return message
    if not within_window(message, now):
        raise DeleteWindowExpired()

    message.is_deleted = True
    message.deleted_for_everyone = True
    message.content = DELETED_PLACEHOLDER
    return message


def is_visible_to(message, viewer_id: int) -> bool:
    """A delete-for-me hides the message from the sender who deleted it."""
    if message.is_deleted and not message.deleted_for_everyone:
        return message.sender_id != viewer_id
    return True


def visible_filter(model, viewer_id: int):
    """SQL form of is_visible_to for the given message model."""
    return not_(and_(
        model.is_deleted.is_(True),
        model.deleted_for_everyone.is_(False),
        model.sender_id == viewer_id
    ))


def statuses_below(target: MessageStatus) -> List[str]:
    """Statuses a message may advance from; guards the bulk UPDATE against regressions."""
    return [s for s, rank in STATUS_RANK.items() if rank < STATUS_RANK[target.value]]
