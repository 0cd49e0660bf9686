from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.friends.schemas import (
    FriendRequestCreate, FriendRequestRespond, FriendRequestItem, FriendStatusResponse
)
from messenger.api.friends.service import FriendshipService
from messenger.api.users.models import User
from messenger.api.users.schemas import UserShort
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/friends", tags=["friends"])


def get_friendship_service(db: Session = Depends(get_db)) -> FriendshipService:
    return FriendshipService(db)


@router.get("/", response_model=List[UserShort])
def get_friends(
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return friendship_service.get_friends(current_user.id)


@router.get("/requests", response_model=List[FriendRequestItem])
def get_requests(
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return friendship_service.get_friend_requests(current_user.id)


@router.get("/requests/sent", response_model=List[FriendRequestItem])
def get_sent_requests(
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return friendship_service.get_sent_requests(current_user.id)


@router.post("/requests", status_code=status.HTTP_201_CREATED)
def send_request(
        data: FriendRequestCreate,
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    friendship_service.send_request(current_user.id, data.friend_id)
    return {"message": "Friend request sent successfully"}


@router.post("/requests/respond")
def respond_request(
        data: FriendRequestRespond,
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    friendship_service.respond(current_user.id, data.friend_id, data.action)
    return {"message": f"Friend request {data.action.value}ed"}


@router.get("/status/{user_id}", response_model=FriendStatusResponse)
def friend_status(
        user_id: int,
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return FriendStatusResponse(
        user_id=user_id,
        status=friendship_service.status_of(current_user.id, user_id)
    )


@router.post("/{user_id}/block")
def block_user(
        user_id: int,
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    friendship_service.block(current_user.id, user_id)
    return {"message": "User blocked"}


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_friend_route(
        user_id: int,
        current_user: User = Depends(get_current_user),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    friendship_service.remove_friend(current_user.id, user_id)
