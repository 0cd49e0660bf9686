from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.messages.schemas import (
    MessageCreate, MessageEdit, MessageItem, StatusUpdate, StatusUpdateResult
)
from messenger.api.messages.service import MessageService
from messenger.api.users.models import User
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    return MessageService(db)


@router.post("/", response_model=MessageItem, status_code=status.HTTP_201_CREATED)
def send_message(
        data: MessageCreate,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    return service.send_message(current_user.id, data.recipient_id, data.content, data.reply_to_message_id)


@router.get("/", response_model=List[MessageItem])
def get_messages(
        counterpart_id: int,
        limit: Optional[int] = None,
        before_id: Optional[int] = None,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    return service.get_messages(current_user.id, counterpart_id, limit, before_id)


@router.post("/status", response_model=StatusUpdateResult)
def update_status(
        data: StatusUpdate,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    rows = service.advance_status(current_user.id, data.message_ids, data.status)
    return StatusUpdateResult(rows_affected=rows, status=data.status)


@router.post("/read", response_model=StatusUpdateResult)
def mark_read(
        counterpart_id: int,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    rows = service.mark_conversation_read(current_user.id, counterpart_id)
    return StatusUpdateResult(rows_affected=rows, status="read")


@router.put("/{message_id}", response_model=MessageItem)
def edit_message(
        message_id: int,
        data: MessageEdit,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    return service.edit_message(current_user.id, message_id, data.content)


@router.delete("/{message_id}", response_model=MessageItem)
def delete_message(
        message_id: int,
        for_everyone: bool = False,
        current_user: User = Depends(get_current_user),
        service: MessageService = Depends(get_message_service)
):
    return service.delete_message(current_user.id, message_id, for_everyone)
