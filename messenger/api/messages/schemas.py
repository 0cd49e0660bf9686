from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict


class MessageStatus(str, Enum):
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class MessageCreate(BaseModel):
    recipient_id: int = Field(..., gt=0)
    content: str = Field(..., description="Message text")
    reply_to_message_id: Optional[int] = Field(None, gt=0)


class MessageEdit(BaseModel):
    content: str


class StatusUpdate(BaseModel):
    message_ids: List[int]
    status: MessageStatus


class ReplyPreview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    content: str
    created_at: datetime


class MessageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender_id: int
    content: str
    status: MessageStatus
    is_deleted: bool = False
    deleted_for_everyone: bool = False
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    reply_to_message_id: Optional[int] = None
    reply_to_message: Optional[ReplyPreview] = None
    created_at: datetime


class StatusUpdateResult(BaseModel):
    rows_affected: int
    status: Optional[MessageStatus] = None
