import logging
from typing import List, Optional, Union

from sqlalchemy import or_, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.api.friends.models import Friendship
from messenger.api.friends.schemas import (
    FriendshipStatus, RelationStatus, FriendAction, FriendRequestItem
)
from messenger.api.users.models import User
from messenger.api.users.schemas import UserShort
from messenger.core.errors import (
    InvalidTarget, InvalidInput, NotFound, Forbidden,
    AlreadyFriends, RequestPending, Blocked
)
from messenger.core.utils import canonical_pair, utcnow

logger = logging.getLogger(__name__)


class FriendshipService:
    def __init__(self, db: Session):
        self.db = db

    # ---- lookups ----

    def get_pair(self, user_a: int, user_b: int) -> Optional[Friendship]:
        low, high = canonical_pair(user_a, user_b)
        return self.db.query(Friendship).filter(
            Friendship.user_low_id == low,
            Friendship.user_high_id == high
        ).first()

    def status_of(self, viewer_id: int, other_id: int) -> RelationStatus:
        if viewer_id == other_id:
            return RelationStatus.SELF
        friendship = self.get_pair(viewer_id, other_id)
        if not friendship:
            return RelationStatus.NONE
        if friendship.status == FriendshipStatus.ACCEPTED.value:
            return RelationStatus.FRIEND
        if friendship.status == FriendshipStatus.BLOCKED.value:
            return RelationStatus.BLOCKED
        if friendship.requested_by == viewer_id:
            return RelationStatus.PENDING_SENT
        return RelationStatus.PENDING_RECEIVED

    def are_friends(self, user_a: int, user_b: int) -> bool:
        return self.status_of(user_a, user_b) == RelationStatus.FRIEND

    def get_friends(self, user_id: int) -> List[UserShort]:
        other_id = case(
            (Friendship.user_low_id == user_id, Friendship.user_high_id),
            else_=Friendship.user_low_id
        )
        friends = self.db.query(User).join(Friendship, User.id == other_id).filter(
            or_(Friendship.user_low_id == user_id, Friendship.user_high_id == user_id),
            Friendship.status == FriendshipStatus.ACCEPTED.value
        ).order_by(User.username.asc()).all()
        return [UserShort.model_validate(u) for u in friends]

    def get_friend_requests(self, user_id: int) -> List[FriendRequestItem]:
        """Incoming pending requests, newest first."""
        requests = self._pending_query(user_id).filter(
            Friendship.requested_by != user_id
        ).order_by(Friendship.created_at.desc(), Friendship.id.desc()).all()
        return [self._to_request_item(r, user_id) for r in requests]

    def get_sent_requests(self, user_id: int) -> List[FriendRequestItem]:
        requests = self._pending_query(user_id).filter(
            Friendship.requested_by == user_id
        ).order_by(Friendship.created_at.desc(), Friendship.id.desc()).all()
        return [self._to_request_item(r, user_id) for r in requests]

    # ---- state changes ----

    def send_request(self, requester_id: int, target_id: int) -> Friendship:
        self._check_target(requester_id, target_id)

        existing = self.get_pair(requester_id, target_id)
        if existing:
            self._raise_for_existing(existing)

        low, high = canonical_pair(requester_id, target_id)
        friendship = Friendship(
            user_low_id=low,
            user_high_id=high,
            requested_by=requester_id,
            status=FriendshipStatus.PENDING.value
        )
        self.db.add(friendship)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a request for the same pair
            self.db.rollback()
            winner = self.get_pair(requester_id, target_id)
            if winner is None:
                raise
            logger.debug(f"Friend request race for pair {low}-{high}, keeping row {winner.id}")
            self._raise_for_existing(winner)
        self.db.refresh(friendship)

        logger.info(f"Friend request sent: User {requester_id} -> User {target_id}")
        return friendship

    def respond(self, responder_id: int, other_id: int, action: Union[FriendAction, str]) -> Optional[Friendship]:
        try:
            action = FriendAction(action)
        except ValueError:
            raise InvalidInput("Action must be 'accept' or 'reject'")

        friendship = self.get_pair(responder_id, other_id)
        if not friendship or friendship.status != FriendshipStatus.PENDING.value:
            raise NotFound("Friend request not found")
        if friendship.requested_by == responder_id:
            raise Forbidden("Cannot respond to your own friend request")

        if action == FriendAction.ACCEPT:
            friendship.status = FriendshipStatus.ACCEPTED.value
            friendship.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(friendship)
            logger.info(f"Friend request accepted: ID {friendship.id}")
            return friendship

        self.db.delete(friendship)
        self.db.commit()
        logger.info(f"Friend request rejected: User {responder_id} rejected User {other_id}")
        return None

    def remove_friend(self, user_id: int, friend_id: int):
        friendship = self.get_pair(user_id, friend_id)
        if not friendship or friendship.status != FriendshipStatus.ACCEPTED.value:
            raise NotFound("Friend not found")
        self.db.delete(friendship)
        self.db.commit()
        logger.info(f"Friend removed: User {user_id} removed User {friend_id}")

    def block(self, actor_id: int, target_id: int) -> Friendship:
        self._check_target(actor_id, target_id)

        friendship = self.get_pair(actor_id, target_id)
        if friendship is None:
            low, high = canonical_pair(actor_id, target_id)
            friendship = Friendship(user_low_id=low, user_high_id=high)
            self.db.add(friendship)
        friendship.status = FriendshipStatus.BLOCKED.value
        friendship.requested_by = actor_id
        friendship.updated_at = utcnow()
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            friendship = self.get_pair(actor_id, target_id)
            if friendship is None:
                raise
            friendship.status = FriendshipStatus.BLOCKED.value
            friendship.requested_by = actor_id
            friendship.updated_at = utcnow()
            self.db.commit()
        self.db.refresh(friendship)

        logger.info(f"User {actor_id} blocked User {target_id}")
        return friendship

    # ---- helpers ----

    def _check_target(self, actor_id: int, target_id: int):
        if actor_id == target_id:
            raise InvalidTarget("Cannot send friend request to yourself")
        if self.db.get(User, target_id) is None:
            raise InvalidTarget("User not found")

    @staticmethod
    def _raise_for_existing(friendship: Friendship):
        if friendship.status == FriendshipStatus.ACCEPTED.value:
            raise AlreadyFriends()
        if friendship.status == FriendshipStatus.PENDING.value:
            raise RequestPending()
        raise Blocked()

    def _pending_query(self, user_id: int):
        return self.db.query(Friendship).filter(
            or_(Friendship.user_low_id == user_id, Friendship.user_high_id == user_id),
            Friendship.status == FriendshipStatus.PENDING.value
        )

    def _to_request_item(self, friendship: Friendship, user_id: int) -> FriendRequestItem:
        other = self.db.get(User, friendship.other_user_id(user_id))
        return FriendRequestItem(
            id=friendship.id,
            status=friendship.status,
            requested_by=friendship.requested_by,
            user=UserShort.model_validate(other),
            created_at=friendship.created_at
        )
