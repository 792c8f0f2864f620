from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator


class MessageKind(str, Enum):
    """메시지 종류"""
    CHAT = "message"
    PRIVATE_CHAT = "private_message"
    STATUS = "status"  # 시스템 생성 (입장/퇴장 알림)


class MessageBase(BaseModel):
    """메시지 기본 스키마"""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    to: str = Field(..., min_length=1, description="수신자 이름 또는 전체 수신자")
    text: str = Field(..., min_length=1, description="메시지 내용")
    message_type: MessageKind = Field(..., alias="type", description="메시지 타입: message, private_message")

    @field_validator("message_type")
    @classmethod
    def reject_status_kind(cls, value: MessageKind) -> MessageKind:
        if value == MessageKind.STATUS:
            raise ValueError("status messages are generated by the server")
        return value


class MessageCreate(MessageBase):
    """메시지 전송 스키마"""


class MessageUpdate(MessageBase):
    """메시지 수정 스키마 (전송과 동일한 필드)"""


class MessageDraft(BaseModel):
    """저장소에 추가할 새 메시지"""
    sender: str
    to: str
    text: str
    message_type: MessageKind
    time: str


class MessageResponse(BaseModel):
    """메시지 응답 스키마"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="메시지 ID")
    sender: str = Field(..., alias="from", description="발신자 이름")
    to: str = Field(..., description="수신자 이름 또는 전체 수신자")
    text: str = Field(..., description="메시지 내용")
    message_type: MessageKind = Field(..., alias="type", description="메시지 타입")
    time: str = Field(..., description="전송 시각 (HH:MM:SS)")
