"""
Chat store layer for MongoDB operations.

Defines the document store contract used by the presence tracker and the
request handlers, and its MongoDB implementation. Every persistence failure
is reported as ``StoreError``; callers never see pymongo exceptions.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.errors import ConflictError, NotFoundError, StoreError
from app.database.mongodb import check_mongo_connection
from app.models import Participant, Message
from app.schemas import MessageDraft, MessageKind, MessageResponse, ParticipantResponse


class ChatStore(ABC):
    """참가자/메시지 컬렉션에 대한 단일 문서 단위 저장소 계약"""

    # =========================================================================
    # Participants
    # =========================================================================

    @abstractmethod
    async def create_participant(self, name: str, last_seen: int) -> ParticipantResponse:
        """참가자 생성. 같은 이름이 있으면 ConflictError"""

    @abstractmethod
    async def find_participant(self, name: str) -> Optional[ParticipantResponse]:
        """이름으로 참가자 조회"""

    @abstractmethod
    async def update_last_seen(self, name: str, timestamp: int) -> ParticipantResponse:
        """
        last_seen 갱신. 저장된 값은 항상 증가합니다 (max(timestamp, 이전 값 + 1)).

        Raises:
            NotFoundError: 참가자가 없는 경우
        """

    @abstractmethod
    async def delete_participant(self, name: str, stale_before: Optional[int] = None) -> None:
        """
        참가자 삭제.

        Args:
            name: 참가자 이름
            stale_before: 주어지면 last_seen <= stale_before 인 경우에만 삭제

        Raises:
            NotFoundError: 삭제 조건에 맞는 참가자가 없는 경우
        """

    @abstractmethod
    async def list_participants(self) -> List[ParticipantResponse]:
        """전체 참가자 목록 (sweep 스냅샷용)"""

    # =========================================================================
    # Messages
    # =========================================================================

    @abstractmethod
    async def append_message(self, draft: MessageDraft) -> MessageResponse:
        """새 메시지 추가"""

    @abstractmethod
    async def find_message(self, message_id: str) -> Optional[MessageResponse]:
        """메시지 ID로 조회 (잘못된 ID 형식이면 None)"""

    @abstractmethod
    async def list_messages_for(self, name: str, limit: Optional[int] = None) -> List[MessageResponse]:
        """
        사용자에게 보이는 메시지 목록.

        공개/상태 메시지와 본인이 보내거나 받은 비공개 메시지 중 최근 limit개를
        오래된 것부터 반환합니다.
        """

    @abstractmethod
    async def update_message(
        self,
        message_id: str,
        to: str,
        text: str,
        message_type: MessageKind
    ) -> MessageResponse:
        """메시지 수신자/내용/타입 수정. 없으면 NotFoundError"""

    @abstractmethod
    async def delete_message(self, message_id: str) -> None:
        """메시지 삭제. 없으면 NotFoundError"""

    # =========================================================================
    # Health
    # =========================================================================

    @abstractmethod
    async def ping(self) -> bool:
        """저장소 연결 상태 확인 (예외 대신 False 반환)"""


def is_visible_to(message: MessageResponse, name: str) -> bool:
    """비공개 메시지는 발신자와 수신자에게만 보입니다."""
    if message.message_type != MessageKind.PRIVATE_CHAT:
        return True
    return name in (message.sender, message.to)


def _participant_record(document) -> ParticipantResponse:
    if isinstance(document, dict):
        return ParticipantResponse(name=document["name"], last_seen=document["last_seen"])
    return ParticipantResponse(name=document.name, last_seen=document.last_seen)


def _message_record(message: Message) -> MessageResponse:
    return MessageResponse(
        id=str(message.id),
        sender=message.sender,
        to=message.to,
        text=message.text,
        message_type=message.message_type,
        time=message.time,
    )


def _object_id(message_id: str) -> Optional[PydanticObjectId]:
    try:
        return PydanticObjectId(message_id)
    except (InvalidId, TypeError):
        return None


class MongoChatStore(ChatStore):
    """Beanie/Motor 기반 ChatStore 구현"""

    async def create_participant(self, name: str, last_seen: int) -> ParticipantResponse:
        participant = Participant(name=name, last_seen=last_seen)
        try:
            await participant.insert()
        except DuplicateKeyError as e:
            raise ConflictError(f"Participant '{name}' already exists") from e
        except PyMongoError as e:
            raise StoreError(f"Failed to create participant '{name}': {e}") from e
        return _participant_record(participant)

    async def find_participant(self, name: str) -> Optional[ParticipantResponse]:
        try:
            participant = await Participant.find_one(Participant.name == name)
        except PyMongoError as e:
            raise StoreError(f"Failed to find participant '{name}': {e}") from e
        return _participant_record(participant) if participant else None

    async def update_last_seen(self, name: str, timestamp: int) -> ParticipantResponse:
        # 파이프라인 업데이트로 단일 문서 원자 연산 유지
        try:
            updated = await Participant.get_motor_collection().find_one_and_update(
                {"name": name},
                [{"$set": {"last_seen": {"$max": [timestamp, {"$add": ["$last_seen", 1]}]}}}],
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise StoreError(f"Failed to update participant '{name}': {e}") from e

        if updated is None:
            raise NotFoundError(f"Participant '{name}' not found")
        return _participant_record(updated)

    async def delete_participant(self, name: str, stale_before: Optional[int] = None) -> None:
        conditions = {"name": name}
        if stale_before is not None:
            conditions["last_seen"] = {"$lte": stale_before}

        try:
            result = await Participant.get_motor_collection().delete_one(conditions)
        except PyMongoError as e:
            raise StoreError(f"Failed to delete participant '{name}': {e}") from e

        if result.deleted_count == 0:
            raise NotFoundError(f"Participant '{name}' not found")

    async def list_participants(self) -> List[ParticipantResponse]:
        try:
            participants = await Participant.find_all().to_list()
        except PyMongoError as e:
            raise StoreError(f"Failed to list participants: {e}") from e
        return [_participant_record(participant) for participant in participants]

    async def append_message(self, draft: MessageDraft) -> MessageResponse:
        message = Message(
            sender=draft.sender,
            to=draft.to,
            text=draft.text,
            message_type=draft.message_type.value,
            time=draft.time,
        )
        try:
            await message.insert()
        except PyMongoError as e:
            raise StoreError(f"Failed to append message from '{draft.sender}': {e}") from e
        return _message_record(message)

    async def _get_message(self, message_id: str) -> Optional[Message]:
        object_id = _object_id(message_id)
        if object_id is None:
            return None
        try:
            return await Message.get(object_id)
        except PyMongoError as e:
            raise StoreError(f"Failed to find message '{message_id}': {e}") from e

    async def find_message(self, message_id: str) -> Optional[MessageResponse]:
        message = await self._get_message(message_id)
        return _message_record(message) if message else None

    async def list_messages_for(self, name: str, limit: Optional[int] = None) -> List[MessageResponse]:
        conditions = {
            "$or": [
                {"message_type": {"$ne": MessageKind.PRIVATE_CHAT.value}},
                {"sender": name},
                {"to": name},
            ]
        }
        query = Message.find(conditions).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        if limit:
            query = query.limit(limit)

        try:
            messages = await query.to_list()
        except PyMongoError as e:
            raise StoreError(f"Failed to list messages for '{name}': {e}") from e

        # 최신순으로 정렬된 것을 역순으로 변경 (오래된 것부터)
        return [_message_record(message) for message in reversed(messages)]

    async def update_message(
        self,
        message_id: str,
        to: str,
        text: str,
        message_type: MessageKind
    ) -> MessageResponse:
        message = await self._get_message(message_id)
        if not message:
            raise NotFoundError(f"Message '{message_id}' not found")

        message.to = to
        message.text = text
        message.message_type = message_type.value
        try:
            await message.save()
        except PyMongoError as e:
            raise StoreError(f"Failed to update message '{message_id}': {e}") from e
        return _message_record(message)

    async def delete_message(self, message_id: str) -> None:
        message = await self._get_message(message_id)
        if not message:
            raise NotFoundError(f"Message '{message_id}' not found")
        try:
            await message.delete()
        except PyMongoError as e:
            raise StoreError(f"Failed to delete message '{message_id}': {e}") from e

    async def ping(self) -> bool:
        return await check_mongo_connection()


# 싱글톤 인스턴스
_chat_store: Optional[ChatStore] = None


def get_chat_store() -> ChatStore:
    """ChatStore 싱글톤 인스턴스 반환"""
    global _chat_store
    if _chat_store is None:
        _chat_store = MongoChatStore()
    return _chat_store
