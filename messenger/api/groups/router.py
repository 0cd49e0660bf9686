from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.groups.schemas import (
    GroupCreate, GroupDetails, GroupItem, GroupMemberAdd, GroupMessageCreate, GroupMessageItem
)
from messenger.api.groups.service import GroupService
from messenger.api.messages.schemas import MessageEdit, StatusUpdate, StatusUpdateResult
from messenger.api.users.models import User
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


def get_group_service(db: Session = Depends(get_db)) -> GroupService:
    return GroupService(db)


@router.post("/", response_model=GroupDetails, status_code=status.HTTP_201_CREATED)
def create_group(
        data: GroupCreate,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.create_group(
        current_user.id, data.name, data.member_ids, data.description, data.picture
    )


@router.get("/", response_model=List[GroupItem])
def get_groups(
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.list_for(current_user.id)


@router.get("/{group_id}", response_model=GroupDetails)
def get_group(
        group_id: int,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.get_details(group_id, current_user.id)


@router.post("/{group_id}/members", status_code=status.HTTP_201_CREATED)
def add_member(
        group_id: int,
        data: GroupMemberAdd,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    service.add_member(current_user.id, group_id, data.user_id)
    return {"message": "Member added successfully"}


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
        group_id: int,
        user_id: int,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    service.remove_member(current_user.id, group_id, user_id)


@router.post("/{group_id}/leave")
def leave_group(
        group_id: int,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    service.leave(current_user.id, group_id)
    return {"message": "Left group successfully"}


@router.post("/{group_id}/messages", response_model=GroupMessageItem, status_code=status.HTTP_201_CREATED)
def send_group_message(
        group_id: int,
        data: GroupMessageCreate,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.send_message(current_user.id, group_id, data.content, data.reply_to_message_id)


@router.get("/{group_id}/messages", response_model=List[GroupMessageItem])
def get_group_messages(
        group_id: int,
        limit: Optional[int] = None,
        before_id: Optional[int] = None,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.list_messages(current_user.id, group_id, limit, before_id)


@router.post("/{group_id}/messages/status", response_model=StatusUpdateResult)
def update_group_message_status(
        group_id: int,
        data: StatusUpdate,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    rows = service.advance_status(current_user.id, group_id, data.message_ids, data.status)
    return StatusUpdateResult(rows_affected=rows, status=data.status)


@router.put("/{group_id}/messages/{message_id}", response_model=GroupMessageItem)
def edit_group_message(
        group_id: int,
        message_id: int,
        data: MessageEdit,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.edit_message(current_user.id, group_id, message_id, data.content)


@router.delete("/{group_id}/messages/{message_id}", response_model=GroupMessageItem)
def delete_group_message(
        group_id: int,
        message_id: int,
        for_everyone: bool = False,
        current_user: User = Depends(get_current_user),
        service: GroupService = Depends(get_group_service)
):
    return service.delete_message(current_user.id, group_id, message_id, for_everyone)
