import logging
from typing import Set, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from messenger.api.conversations.models import Conversation
from messenger.api.groups.models import GroupMember
from messenger.api.mutes.models import Mute
from messenger.api.mutes.schemas import MuteTarget
from messenger.core.errors import InvalidInput, NotFound

logger = logging.getLogger(__name__)


class MuteService:
    def __init__(self, db: Session):
        self.db = db

    def set_muted(self, user_id: int, target_type: Union[MuteTarget, str], target_id: int, muted: bool) -> bool:
        target_type = self._parse_target(target_type)
        self._check_access(user_id, target_type, target_id)

        existing = self._find(user_id, target_type, target_id)
        if muted:
            if existing:
                return True
            self.db.add(Mute(user_id=user_id, **self._target_columns(target_type, target_id)))
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.debug(f"Mute race for user {user_id} on {target_type.value} {target_id}")
                return True
            logger.info(f"User {user_id} muted {target_type.value} {target_id}")
            return True

        if existing:
            self.db.delete(existing)
            self.db.commit()
            logger.info(f"User {user_id} unmuted {target_type.value} {target_id}")
        return False

    def is_muted(self, user_id: int, target_type: Union[MuteTarget, str], target_id: int) -> bool:
        return self._find(user_id, self._parse_target(target_type), target_id) is not None

    def muted_ids(self, user_id: int, target_type: Union[MuteTarget, str]) -> Set[int]:
        target_type = self._parse_target(target_type)
        column = Mute.conversation_id if target_type == MuteTarget.CONVERSATION else Mute.group_id
        rows = self.db.query(column).filter(Mute.user_id == user_id, column.isnot(None)).all()
        return {row[0] for row in rows}

    @staticmethod
    def _parse_target(target_type) -> MuteTarget:
        try:
            return MuteTarget(target_type)
        except ValueError:
            raise InvalidInput("Invalid mute target. Must be 'conversation' or 'group'")

    @staticmethod
    def _target_columns(target_type: MuteTarget, target_id: int) -> dict:
        if target_type == MuteTarget.CONVERSATION:
            return {"conversation_id": target_id}
        return {"group_id": target_id}

    def _find(self, user_id: int, target_type: MuteTarget, target_id: int):
        return self.db.query(Mute).filter_by(
            user_id=user_id, **self._target_columns(target_type, target_id)
        ).first()

    def _check_access(self, user_id: int, target_type: MuteTarget, target_id: int):
        if target_type == MuteTarget.CONVERSATION:
            conversation = self.db.get(Conversation, target_id)
            if not conversation or not conversation.includes(user_id):
                raise NotFound("Conversation not found")
            return

        membership = self.db.query(GroupMember).filter(
            GroupMember.group_id == target_id,
            GroupMember.user_id == user_id
        ).first()
        if not membership:
            raise NotFound("Group not found or you are not a member")
