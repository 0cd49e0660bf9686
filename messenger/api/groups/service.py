import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from messenger.api.friends.service import FriendshipService
from messenger.api.groups.models import Group, GroupMember, GroupMessage
from messenger.api.groups.schemas import (
    GroupRole, GroupItem, GroupDetails, GroupMemberItem, GroupMessageItem
)
from messenger.api.messages import lifecycle
from messenger.api.messages.schemas import MessageStatus, ReplyPreview
from messenger.api.messages.service import parse_status_target
from messenger.api.mutes.schemas import MuteTarget
from messenger.api.mutes.service import MuteService
from messenger.core.errors import (
    InvalidInput, InvalidReply, InvalidState, Forbidden, NotFound, AlreadyMember, MembersMustBeFriends
)
from messenger.core.utils import utcnow

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock
        self.friendships = FriendshipService(db)

    # ---- membership ----

    def create_group(
            self,
            creator_id: int,
            name: str,
            member_ids: List[int],
            description: Optional[str] = None,
            picture: Optional[str] = None
    ) -> GroupDetails:
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Group name is required")

        others = list(dict.fromkeys(m for m in member_ids if m != creator_id))
        if not others:
            raise InvalidInput("At least 2 members required (including you)")

        # Checked up front so that a rejected group leaves no rows behind
        for member_id in others:
            if not self.friendships.are_friends(creator_id, member_id):
                raise MembersMustBeFriends()

        now = self.clock()
        group = Group(
            name=name,
            description=description,
            picture=picture,
            created_by=creator_id,
            created_at=now,
            updated_at=now
        )
        self.db.add(group)
        try:
            self.db.flush()
            self.db.add(GroupMember(group_id=group.id, user_id=creator_id,
                                    role=GroupRole.ADMIN.value, joined_at=now))
            for member_id in others:
                self.db.add(GroupMember(group_id=group.id, user_id=member_id,
                                        role=GroupRole.MEMBER.value, joined_at=now))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Group created: ID {group.id} by User {creator_id}")
        return self.get_details(group.id, creator_id)

    def add_member(self, actor_id: int, group_id: int, user_id: int):
        self._get_group(group_id)
        self._require_member(group_id, actor_id)

        if not self.friendships.are_friends(actor_id, user_id):
            raise MembersMustBeFriends("Can only add your friends to the group")
        if self._get_membership(group_id, user_id):
            raise AlreadyMember()

        self.db.add(GroupMember(group_id=group_id, user_id=user_id,
                                role=GroupRole.MEMBER.value, joined_at=self.clock()))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyMember()

        logger.info(f"Member {user_id} added to group {group_id} by user {actor_id}")

    def remove_member(self, actor_id: int, group_id: int, user_id: int):
        membership = self._require_member(group_id, actor_id)
        if membership.role != GroupRole.ADMIN.value:
            raise Forbidden("Only admins can remove members")
        if user_id == actor_id:
            raise Forbidden("Use leave endpoint to remove yourself")

        target = self._get_membership(group_id, user_id)
        if not target:
            raise NotFound("Member not found in group")

        self.db.delete(target)
        self.db.commit()
        logger.info(f"User {user_id} removed from group {group_id} by admin {actor_id}")

    def leave(self, actor_id: int, group_id: int):
        membership = self._get_membership(group_id, actor_id)
        if not membership:
            raise NotFound("You are not a member of this group")

        self.db.delete(membership)
        self.db.commit()
        logger.info(f"User {actor_id} left group {group_id}")

    # ---- reads ----

    def get_details(self, group_id: int, requester_id: int) -> GroupDetails:
        group = self.db.get(Group, group_id)
        membership = self._get_membership(group_id, requester_id) if group else None
        if not group or not membership:
            # Same answer for both so membership does not leak
            raise NotFound("Group not found or you are not a member")

        members = self.db.query(GroupMember).filter(
            GroupMember.group_id == group_id
        ).order_by(GroupMember.joined_at.asc(), GroupMember.id.asc()).all()

        item = self._to_group_item(group, membership, requester_id)
        return GroupDetails(
            **item.model_dump(),
            members=[GroupMemberItem.model_validate(m) for m in members]
        )

    def list_for(self, user_id: int) -> List[GroupItem]:
        rows = self.db.query(Group, GroupMember).join(
            GroupMember, GroupMember.group_id == Group.id
        ).filter(
            GroupMember.user_id == user_id
        ).order_by(Group.updated_at.desc(), Group.id.desc()).all()
        return [self._to_group_item(group, membership, user_id) for group, membership in rows]

    # ---- messages ----

    def send_message(
            self,
            actor_id: int,
            group_id: int,
            content: str,
            reply_to_message_id: Optional[int] = None
    ) -> GroupMessageItem:
        content = lifecycle.check_content(content)
        self._require_member(group_id, actor_id)

        if reply_to_message_id is not None:
            replied = self.db.get(GroupMessage, reply_to_message_id)
            if replied is None or replied.group_id != group_id:
                raise InvalidReply()

        now = self.clock()
        message = GroupMessage(
            group_id=group_id,
            sender_id=actor_id,
            content=content,
            status=MessageStatus.SENT.value,
            reply_to_message_id=reply_to_message_id,
            created_at=now
        )
        self.db.add(message)
        self.db.query(Group).filter(Group.id == group_id).update(
            {"updated_at": now}, synchronize_session="fetch"
        )
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Group message sent: User {actor_id} -> Group {group_id}")
        return self._to_message_item(message, actor_id)

    def list_messages(
            self,
            actor_id: int,
            group_id: int,
            limit: Optional[int] = None,
            before_id: Optional[int] = None
    ) -> List[GroupMessageItem]:
        self._require_member(group_id, actor_id)

        query = self.db.query(GroupMessage).filter(
            GroupMessage.group_id == group_id,
            lifecycle.visible_filter(GroupMessage, actor_id)
        )
        if before_id:
            query = query.filter(GroupMessage.id < before_id)

        if limit:
            messages = query.order_by(GroupMessage.created_at.desc(), GroupMessage.id.desc()).limit(limit).all()
            messages.reverse()
        else:
            messages = query.order_by(GroupMessage.created_at.asc(), GroupMessage.id.asc()).all()

        return [self._to_message_item(m, actor_id) for m in messages]

    def edit_message(self, actor_id: int, group_id: int, message_id: int, content: str) -> GroupMessageItem:
        self._require_member(group_id, actor_id)
        now = self.clock()
        message = self._get_message(group_id, message_id)
        content = lifecycle.check_edit(message, actor_id, content, now)

        rows = self.db.query(GroupMessage).filter(
            GroupMessage.id == message_id,
            lifecycle.editable_filter(GroupMessage, actor_id, now)
        ).update(
            {"content": content, "is_edited": True, "edited_at": now},
            synchronize_session="fetch"
        )
        if not rows:
            # Changed after it was read; report the current state
            self.db.rollback()
            self.db.refresh(message)
            lifecycle.check_edit(message, actor_id, content, now)
            raise InvalidState("Message can no longer be edited")
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Group message {message_id} edited by User {actor_id}")
        return self._to_message_item(message, actor_id)

    def delete_message(self, actor_id: int, group_id: int, message_id: int, for_everyone: bool) -> GroupMessageItem:
        self._require_member(group_id, actor_id)
        message = self._get_message(group_id, message_id)
        lifecycle.apply_delete(message, actor_id, for_everyone, self.clock())
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Group message {message_id} deleted by User {actor_id} (for everyone: {for_everyone})")
        return self._to_message_item(message, actor_id)

    def advance_status(
            self,
            actor_id: int,
            group_id: int,
            message_ids: List[int],
            status: Union[MessageStatus, str]
    ) -> int:
        if not message_ids:
            raise InvalidInput("No message IDs provided")
        target = parse_status_target(status)
        self._require_member(group_id, actor_id)

        # Guard checked in SQL against the committed status
        changed = self.db.query(GroupMessage).filter(
            GroupMessage.id.in_(message_ids),
            GroupMessage.group_id == group_id,
            GroupMessage.sender_id != actor_id,
            GroupMessage.status.in_(lifecycle.statuses_below(target))
        ).update({"status": target.value}, synchronize_session="fetch")
        self.db.commit()
        return changed

    # ---- helpers ----

    def is_member(self, group_id: int, user_id: int) -> bool:
        return self._get_membership(group_id, user_id) is not None

    def _get_group(self, group_id: int) -> Group:
        group = self.db.get(Group, group_id)
        if not group:
            raise NotFound("Group not found")
        return group

    def _get_membership(self, group_id: int, user_id: int) -> Optional[GroupMember]:
        return self.db.query(GroupMember).filter(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id
        ).first()

    def _require_member(self, group_id: int, user_id: int) -> GroupMember:
        membership = self._get_membership(group_id, user_id)
        if not membership:
            raise Forbidden("You are not a member of this group")
        return membership

    def _get_message(self, group_id: int, message_id: int) -> GroupMessage:
        message = self.db.get(GroupMessage, message_id, with_for_update=True, populate_existing=True)
        if not message or message.group_id != group_id:
            raise NotFound("Message not found")
        return message

    def _to_group_item(self, group: Group, membership: GroupMember, user_id: int) -> GroupItem:
        member_count = self.db.query(func.count(GroupMember.id)).filter(
            GroupMember.group_id == group.id
        ).scalar()

        last_message = self.db.query(GroupMessage).filter(
            GroupMessage.group_id == group.id,
            lifecycle.visible_filter(GroupMessage, user_id)
        ).order_by(GroupMessage.created_at.desc(), GroupMessage.id.desc()).first()

        is_muted = MuteService(self.db).is_muted(user_id, MuteTarget.GROUP, group.id)

        return GroupItem(
            id=group.id,
            name=group.name,
            description=group.description,
            picture=group.picture,
            created_by=group.created_by,
            created_at=group.created_at,
            updated_at=group.updated_at,
            user_role=membership.role,
            member_count=member_count or 0,
            last_message=self._to_message_item(last_message, user_id) if last_message else None,
            is_muted=is_muted
        )

    def _to_message_item(self, message: GroupMessage, viewer_id: int) -> GroupMessageItem:
        item = GroupMessageItem.model_validate(message)
        if message.reply_to_message_id:
            replied = self.db.get(GroupMessage, message.reply_to_message_id)
            if replied and lifecycle.is_visible_to(replied, viewer_id):
                item.reply_to_message = ReplyPreview.model_validate(replied)
        return item
