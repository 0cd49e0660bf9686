from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict


class UserShort(BaseModel):
    """Short user card."""
    id: int = Field(gt=0)
    username: str = Field(min_length=1)
    display_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserShort):
    bio: Optional[str] = None
    created_at: datetime
    friend_status: str
