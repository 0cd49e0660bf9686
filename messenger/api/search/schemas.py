from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SearchSource(str, Enum):
    DIRECT = "direct"
    GROUP = "group"


class SearchHit(BaseModel):
    message_id: int
    source: SearchSource
    conversation_id: Optional[int] = None
    group_id: Optional[int] = None
    sender_id: int
    content: str
    created_at: datetime
    score: int
