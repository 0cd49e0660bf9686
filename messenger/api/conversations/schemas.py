from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from messenger.api.messages.schemas import MessageItem
from messenger.api.users.schemas import UserShort


class ConversationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    other_user: UserShort
    created_at: datetime
    updated_at: datetime
    last_message: Optional[MessageItem] = None
    unread_count: int = 0
    is_muted: bool = False
