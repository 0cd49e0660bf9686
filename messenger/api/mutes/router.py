from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from messenger.api.auth.dependencies import get_current_user
from messenger.api.mutes.schemas import MuteUpdate, MuteState
from messenger.api.mutes.service import MuteService
from messenger.api.users.models import User
from messenger.database.database import get_db

router = APIRouter(prefix="/api/v1/mutes", tags=["mutes"])


def get_mute_service(db: Session = Depends(get_db)) -> MuteService:
    return MuteService(db)


@router.put("/", response_model=MuteState)
def set_muted(
        data: MuteUpdate,
        current_user: User = Depends(get_current_user),
        service: MuteService = Depends(get_mute_service)
):
    muted = service.set_muted(current_user.id, data.target_type, data.target_id, data.muted)
    return MuteState(target_type=data.target_type, target_id=data.target_id, muted=muted)
