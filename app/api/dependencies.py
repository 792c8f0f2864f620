"""
API Dependencies

FastAPI dependency functions for participant identity and shared services
"""

from typing import Optional
from fastapi import Header

from app.core.validators import Validator


async def get_current_participant_name(user: Optional[str] = Header(None)) -> str:
    """
    요청자 이름을 user 헤더에서 가져옵니다.

    Args:
        user: 요청자 참가자 이름

    Returns:
        str: 앞뒤 공백이 제거된 참가자 이름

    Raises:
        ValidationException: 헤더가 없거나 비어 있는 경우
    """
    return Validator.validate_user_header(user)
