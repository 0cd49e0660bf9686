from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.search.schemas import SearchHit
from messenger.api.search.service import SearchService
from messenger.api.users.models import User
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/search", tags=["search"])


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(db)


@router.get("/messages", response_model=List[SearchHit])
def search_messages(
        query: str,
        limit: Optional[int] = Query(None, gt=0, le=200),
        current_user: User = Depends(get_current_user),
        service: SearchService = Depends(get_search_service)
):
    return service.search(current_user.id, query, limit)
