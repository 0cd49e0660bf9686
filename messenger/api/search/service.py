"""
Full-text lookup over the messages a user can see.

Matching is a case-insensitive substring test done in SQL and capped to the
most recent SEARCH_SCAN_LIMIT rows per source; ranking of those candidates
happens in Python so that it behaves the same on every backend.
"""
import logging
import re
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from messenger.api.conversations.models import Conversation
from messenger.api.groups.models import GroupMember, GroupMessage
from messenger.api.messages import lifecycle
from messenger.api.messages.models import Message
from messenger.api.search.schemas import SearchHit, SearchSource
from messenger.core.config import settings
from messenger.core.errors import InvalidInput

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
WHOLE_WORD_BONUS = 1


def score(content: str, query: str) -> int:
    text = content.lower()
    needle = query.lower()
    occurrences = text.count(needle)
    if not occurrences:
        return 0
    points = occurrences * 2
    if re.search(r"\b" + re.escape(needle) + r"\b", text):
        points += WHOLE_WORD_BONUS
    return points


class SearchService:
    def __init__(self, db: Session, scan_limit: Optional[int] = None):
        self.db = db
        self.scan_limit = scan_limit or settings.SEARCH_SCAN_LIMIT

    def search(self, user_id: int, query: str, limit: Optional[int] = None) -> List[SearchHit]:
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise InvalidInput(f"Search query must be at least {MIN_QUERY_LENGTH} characters")
        limit = limit or settings.SEARCH_RESULT_LIMIT

        hits = self._direct_hits(user_id, query) + self._group_hits(user_id, query)
        hits.sort(key=lambda h: (h.score, h.created_at, h.message_id), reverse=True)

        logger.debug(f"Search by User {user_id}: {len(hits)} hits for '{query}'")
        return hits[:limit]

    def _direct_hits(self, user_id: int, query: str) -> List[SearchHit]:
        messages = self.db.query(Message).join(Conversation).filter(
            or_(Conversation.user_low_id == user_id, Conversation.user_high_id == user_id),
            Message.deleted_for_everyone.is_(False),
            lifecycle.visible_filter(Message, user_id),
            func.lower(Message.content).contains(query.lower(), autoescape=True)
        ).order_by(Message.created_at.desc(), Message.id.desc()).limit(self.scan_limit).all()
        return [
            self._to_hit(m, SearchSource.DIRECT, query, conversation_id=m.conversation_id)
            for m in messages
        ]

    def _group_hits(self, user_id: int, query: str) -> List[SearchHit]:
        group_ids = select(GroupMember.group_id).where(GroupMember.user_id == user_id)
        messages = self.db.query(GroupMessage).filter(
            GroupMessage.group_id.in_(group_ids),
            GroupMessage.deleted_for_everyone.is_(False),
            lifecycle.visible_filter(GroupMessage, user_id),
            func.lower(GroupMessage.content).contains(query.lower(), autoescape=True)
        ).order_by(GroupMessage.created_at.desc(), GroupMessage.id.desc()).limit(self.scan_limit).all()
        return [
            self._to_hit(m, SearchSource.GROUP, query, group_id=m.group_id)
            for m in messages
        ]

    @staticmethod
    def _to_hit(message, source: SearchSource, query: str, **target) -> SearchHit:
        return SearchHit(
            message_id=message.id,
            source=source,
            sender_id=message.sender_id,
            content=message.content,
            created_at=message.created_at,
            score=score(message.content, query),
            **target
        )
