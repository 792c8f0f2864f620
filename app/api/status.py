from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_participant_name
from app.schemas import ParticipantResponse
from app.core.errors import NotFoundError, participant_not_found_error
from app.services.presence_tracker import PresenceTracker, get_presence_tracker

router = APIRouter(tags=["Presence"])


@router.post("/status", response_model=ParticipantResponse)
async def heartbeat(
    name: str = Depends(get_current_participant_name),
    tracker: PresenceTracker = Depends(get_presence_tracker)
) -> ParticipantResponse:
    """
    접속 유지 heartbeat

    클라이언트는 비활성 기준 시간보다 짧은 주기로 호출해야 하며, 그렇지 않으면
    다음 sweep에서 퇴장 처리됩니다.
    """
    try:
        return await tracker.touch(name)
    except NotFoundError:
        raise participant_not_found_error(name)
