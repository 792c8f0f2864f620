import logging
from typing import List
from fastapi import APIRouter, Depends, status

from app.schemas import ParticipantCreate, ParticipantResponse
from app.core.errors import ConflictError, ConflictException
from app.services.presence_tracker import PresenceTracker, get_presence_tracker
from app.services.store import ChatStore, get_chat_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/participants", tags=["Participants"])


@router.post("", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def join_room(
    participant_data: ParticipantCreate,
    tracker: PresenceTracker = Depends(get_presence_tracker)
) -> ParticipantResponse:
    """
    채팅방 입장

    - **name**: 참가자 이름 (채팅방 내 고유, 전체 수신자 이름은 사용 불가)

    입장과 함께 전체 수신자에게 입장 알림(status 메시지)이 전송됩니다.
    """
    try:
        return await tracker.join(participant_data.name)
    except ConflictError as e:
        raise ConflictException(str(e), details={"name": participant_data.name})


@router.get("", response_model=List[ParticipantResponse])
async def list_participants(
    store: ChatStore = Depends(get_chat_store)
) -> List[ParticipantResponse]:
    """현재 참가자 목록"""
    return await store.list_participants()
