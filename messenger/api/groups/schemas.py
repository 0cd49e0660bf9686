from datetime import datetime
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field, ConfigDict

from messenger.api.messages.schemas import MessageStatus, ReplyPreview
from messenger.api.users.schemas import UserShort


class GroupRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class GroupCreate(BaseModel):
    name: str = Field(..., max_length=100)
    member_ids: List[int] = Field(default_factory=list)
    description: Optional[str] = None
    picture: Optional[str] = Field(None, max_length=255)


class GroupMemberAdd(BaseModel):
    user_id: int = Field(..., gt=0)


class GroupMessageCreate(BaseModel):
    content: str
    reply_to_message_id: Optional[int] = Field(None, gt=0)


class GroupMessageItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    group_id: int
    sender_id: int
    sender: Optional[UserShort] = None
    content: str
    status: MessageStatus
    is_deleted: bool = False
    deleted_for_everyone: bool = False
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    reply_to_message_id: Optional[int] = None
    reply_to_message: Optional[ReplyPreview] = None
    created_at: datetime


class GroupMemberItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user: UserShort
    role: GroupRole
    joined_at: datetime


class GroupItem(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    picture: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    user_role: GroupRole
    member_count: int
    last_message: Optional[GroupMessageItem] = None
    is_muted: bool = False


class GroupDetails(GroupItem):
    members: List[GroupMemberItem] = Field(default_factory=list)
