"""
Message service layer.

Handles chat message sending, listing and author-owned edits on top of the
chat store. Status messages are only created by the presence tracker.
"""

from typing import List, Optional

from app.core.errors import NotFoundError, PermissionDeniedError
from app.schemas import MessageCreate, MessageDraft, MessageKind, MessageResponse, MessageUpdate
from app.services.store import ChatStore
from app.utils.time_utils import format_clock_time, now_ms


async def is_participant(store: ChatStore, name: str) -> bool:
    """현재 채팅방 참가자인지 확인"""
    return await store.find_participant(name) is not None


async def send_message(store: ChatStore, sender: str, message_data: MessageCreate) -> MessageResponse:
    """메시지 전송 (발신자 확인은 호출 측에서)"""
    return await store.append_message(
        MessageDraft(
            sender=sender,
            to=message_data.to,
            text=message_data.text,
            message_type=message_data.message_type,
            time=format_clock_time(now_ms()),
        )
    )


async def get_visible_messages(store: ChatStore, name: str, limit: Optional[int] = None) -> List[MessageResponse]:
    """사용자에게 보이는 최근 메시지 목록"""
    return await store.list_messages_for(name, limit)


async def _find_own_message(store: ChatStore, message_id: str, author: str) -> MessageResponse:
    message = await store.find_message(message_id)
    if not message:
        raise NotFoundError(f"Message '{message_id}' not found")
    if message.sender != author:
        raise PermissionDeniedError(f"{author} is not the author of message '{message_id}'")
    if message.message_type == MessageKind.STATUS:
        # 입장/퇴장 알림은 시스템 기록
        raise PermissionDeniedError(f"Status message '{message_id}' cannot be changed")
    return message


async def edit_message(
    store: ChatStore,
    author: str,
    message_id: str,
    message_data: MessageUpdate
) -> MessageResponse:
    """메시지 수정 (작성자 본인만)"""
    await _find_own_message(store, message_id, author)
    return await store.update_message(
        message_id,
        to=message_data.to,
        text=message_data.text,
        message_type=message_data.message_type,
    )


async def delete_message(store: ChatStore, author: str, message_id: str) -> None:
    """메시지 삭제 (작성자 본인만)"""
    await _find_own_message(store, message_id, author)
    await store.delete_message(message_id)
