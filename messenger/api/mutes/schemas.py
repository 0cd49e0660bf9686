from enum import Enum

from pydantic import BaseModel, Field


class MuteTarget(str, Enum):
    CONVERSATION = "conversation"
    GROUP = "group"


class MuteUpdate(BaseModel):
    target_type: MuteTarget
    target_id: int = Field(..., gt=0)
    muted: bool = True


class MuteState(BaseModel):
    target_type: MuteTarget
    target_id: int
    muted: bool
