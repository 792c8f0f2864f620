"""
시간 관련 유틸리티 함수
"""
import time
from datetime import datetime


def now_ms() -> int:
    """현재 시각을 epoch 밀리초로 반환합니다."""
    return int(time.time() * 1000)


def format_clock_time(timestamp_ms: int) -> str:
    """
    epoch 밀리초를 메시지에 표시할 시:분:초 문자열로 변환합니다.

    Args:
        timestamp_ms: epoch 밀리초 (서버 로컬 시간대 기준으로 변환)

    Returns:
        str: "HH:MM:SS" 형식의 시각

    Examples:
        >>> format_clock_time(now_ms())
        "14:03:27"
    """
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M:%S")
