from fastapi import APIRouter, Depends, Request

from messenger.api.auth.dependencies import get_current_user
from messenger.api.typing.schemas import TypingUpdate, TypingState
from messenger.api.users.models import User
from messenger.presence.typing_store import TypingStore

router = APIRouter(prefix="/api/v1/typing", tags=["typing"])


def get_typing_store(request: Request) -> TypingStore:
    return request.app.state.typing_store


@router.post("/", response_model=TypingState)
def set_typing(
        data: TypingUpdate,
        current_user: User = Depends(get_current_user),
        store: TypingStore = Depends(get_typing_store)
):
    store.set_typing(current_user.id, data.counterpart_id, data.is_typing)
    return TypingState(counterpart_id=data.counterpart_id, is_typing=data.is_typing)


@router.get("/", response_model=TypingState)
def get_typing(
        counterpart_id: int,
        current_user: User = Depends(get_current_user),
        store: TypingStore = Depends(get_typing_store)
):
    return TypingState(
        counterpart_id=counterpart_id,
        is_typing=store.is_typing(current_user.id, counterpart_id)
    )
