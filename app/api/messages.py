import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_current_participant_name
from app.schemas import MessageCreate, MessageResponse, MessageUpdate
from app.core.errors import (
    NotFoundError,
    PermissionDeniedError,
    message_not_found_error,
    not_message_author_error,
    unknown_sender_error
)
from app.services import message_service
from app.services.store import ChatStore, get_chat_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    sender: str = Depends(get_current_participant_name),
    store: ChatStore = Depends(get_chat_store)
) -> MessageResponse:
    """
    메시지 전송

    - **to**: 수신자 이름 또는 전체 수신자
    - **text**: 메시지 내용
    - **type**: message (공개) 또는 private_message (비공개)
    - **user** (헤더): 발신자, 현재 참가자여야 함
    """
    if not await message_service.is_participant(store, sender):
        raise unknown_sender_error(sender)

    return await message_service.send_message(store, sender, message_data)


@router.get("", response_model=List[MessageResponse])
async def get_messages(
    limit: Optional[int] = Query(None, gt=0, description="가장 최근 메시지 수"),
    name: str = Depends(get_current_participant_name),
    store: ChatStore = Depends(get_chat_store)
) -> List[MessageResponse]:
    """
    메시지 목록 조회

    공개/상태 메시지와 요청자가 보내거나 받은 비공개 메시지를 오래된 것부터
    반환합니다. limit이 있으면 가장 최근 limit개만 반환합니다.
    """
    return await message_service.get_visible_messages(store, name, limit)


@router.put("/{message_id}", response_model=MessageResponse)
async def edit_message(
    message_id: str,
    message_data: MessageUpdate,
    author: str = Depends(get_current_participant_name),
    store: ChatStore = Depends(get_chat_store)
) -> MessageResponse:
    """메시지 수정 (작성자 본인만)"""
    if not await message_service.is_participant(store, author):
        raise unknown_sender_error(author)

    try:
        return await message_service.edit_message(store, author, message_id, message_data)
    except NotFoundError:
        raise message_not_found_error(message_id)
    except PermissionDeniedError:
        logger.warning(f"{author} tried to edit message {message_id} they did not send")
        raise not_message_author_error()


@router.delete("/{message_id}")
async def delete_message(
    message_id: str,
    author: str = Depends(get_current_participant_name),
    store: ChatStore = Depends(get_chat_store)
):
    """메시지 삭제 (작성자 본인만)"""
    try:
        await message_service.delete_message(store, author, message_id)
    except NotFoundError:
        raise message_not_found_error(message_id)
    except PermissionDeniedError:
        logger.warning(f"{author} tried to delete message {message_id} they did not send")
        raise not_message_author_error()

    return {"message": "Message deleted", "id": message_id}
