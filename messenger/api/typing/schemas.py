from pydantic import BaseModel, Field


class TypingUpdate(BaseModel):
    counterpart_id: int = Field(..., gt=0)
    is_typing: bool


class TypingState(BaseModel):
    counterpart_id: int
    is_typing: bool
