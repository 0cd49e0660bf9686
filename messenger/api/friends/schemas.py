from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, ConfigDict

from messenger.api.users.schemas import UserShort


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOCKED = "blocked"


class RelationStatus(str, Enum):
    """Friendship state as seen by one of the two users."""
    SELF = "self"
    NONE = "none"
    PENDING_SENT = "pending_sent"
    PENDING_RECEIVED = "pending_received"
    FRIEND = "friend"
    BLOCKED = "blocked"


class FriendAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class FriendRequestCreate(BaseModel):
    friend_id: int = Field(..., gt=0, description="ID of the user to befriend")


class FriendRequestRespond(BaseModel):
    friend_id: int = Field(..., gt=0)
    action: FriendAction


class FriendRequestItem(BaseModel):
    id: int
    status: FriendshipStatus
    requested_by: int
    user: UserShort
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FriendStatusResponse(BaseModel):
    user_id: int
    status: RelationStatus
