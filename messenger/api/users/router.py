from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.users.models import User
from messenger.api.users.schemas import UserProfile
from messenger.api.users.service import UserService
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/{user_id}", response_model=UserProfile)
def get_user_profile(
        user_id: int,
        current_user: User = Depends(get_current_user),
        user_service: UserService = Depends(get_user_service)
):
    return user_service.get_profile(user_id, current_user.id)
