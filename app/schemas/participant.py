from pydantic import BaseModel, Field, ConfigDict


class ParticipantCreate(BaseModel):
    """참가자 입장 요청 스키마"""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=50, description="참가자 이름 (채팅방 내 고유)")


class ParticipantResponse(BaseModel):
    """참가자 응답 스키마"""
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(..., description="참가자 이름")
    last_seen: int = Field(..., description="마지막 heartbeat 시각 (epoch ms)")
