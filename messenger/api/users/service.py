from sqlalchemy.orm import Session

from messenger.api.friends.service import FriendshipService
from messenger.api.users.models import User
from messenger.api.users.schemas import UserProfile
from messenger.core.errors import NotFound


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.friendships = FriendshipService(db)

    def get_profile(self, user_id: int, viewer_id: int) -> UserProfile:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFound("User not found")
        return UserProfile(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            bio=user.bio,
            created_at=user.created_at,
            friend_status=self.friendships.status_of(viewer_id, user.id).value
        )
