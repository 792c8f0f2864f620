"""
Presence 모니터링 서비스

일정 주기로 PresenceTracker.sweep()을 실행하여 heartbeat가 끊긴 참가자를
퇴장 처리합니다.
"""

import asyncio
from typing import Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.services.presence_tracker import PresenceTracker, SweepResult, get_presence_tracker

logger = get_logger(__name__)


class PresenceMonitor:
    """주기적인 비활성 참가자 정리 작업"""

    def __init__(self, tracker: PresenceTracker, interval_seconds: float):
        self.tracker = tracker
        self.interval_seconds = interval_seconds
        self.running = False
        self.task: Optional[asyncio.Task] = None

    async def start(self):
        """모니터링 시작"""
        if self.running:
            logger.warning("Presence monitor is already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._run_periodically())
        logger.info(f"Presence monitor started (interval={self.interval_seconds}s)")

    async def stop(self):
        """모니터링 중지"""
        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        logger.info("Presence monitor stopped")

    async def run_once(self) -> SweepResult:
        """sweep 1회 즉시 실행"""
        return await self.tracker.sweep()

    async def _run_periodically(self):
        """interval마다 sweep 실행. 한 번의 실패가 이후 주기를 막지 않음"""
        try:
            while self.running:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.tracker.sweep()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Unexpected error in presence sweep")

        except asyncio.CancelledError:
            logger.info("Presence monitor cancelled")
            raise


# 싱글톤 인스턴스
_presence_monitor: Optional[PresenceMonitor] = None


def get_presence_monitor() -> PresenceMonitor:
    """PresenceMonitor 싱글톤 인스턴스 반환"""
    global _presence_monitor
    if _presence_monitor is None:
        _presence_monitor = PresenceMonitor(
            tracker=get_presence_tracker(),
            interval_seconds=settings.presence_sweep_interval_seconds,
        )
    return _presence_monitor
