from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from messenger.api.users.models import User
from messenger.database.database import get_db


def get_current_user(
        x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
        db: Session = Depends(get_db)
) -> User:
    """
    Resolves the caller from the identifier set by the identity gateway.
    Credentials never reach this service.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    user = db.get(User, x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return user
