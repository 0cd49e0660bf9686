from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.conversations.schemas import ConversationItem
from messenger.api.conversations.service import ConversationService
from messenger.api.users.models import User
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/conversations", tags=["conversations"])


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


@router.get("/", response_model=List[ConversationItem])
def get_conversations(
        current_user: User = Depends(get_current_user),
        service: ConversationService = Depends(get_conversation_service)
):
    return service.list_for(current_user.id)
