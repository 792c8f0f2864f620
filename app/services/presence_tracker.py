"""
참가자 접속 상태(Presence) 추적 서비스

heartbeat(last_seen) 기록, 입장 처리, 그리고 일정 시간 동안 heartbeat가 없는
참가자를 정리하는 sweep을 담당합니다. sweep은 한 번 읽은 스냅샷과 시작 시점에
한 번 잡은 현재 시각을 기준으로 동작하며, 참가자마다 "삭제 후 퇴장 알림"을
독립적으로 처리합니다.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from app.core.config import settings
from app.core.errors import ConflictError, NotFoundError, StoreError
from app.core.logging import get_logger, log_presence_event
from app.schemas import MessageDraft, MessageKind, ParticipantResponse
from app.services.store import ChatStore, get_chat_store
from app.utils.time_utils import format_clock_time, now_ms

logger = get_logger(__name__)

JOIN_NOTICE = "entered the room"
LEAVE_NOTICE = "left the room"


@dataclass
class PendingDeparture:
    """삭제는 되었지만 퇴장 알림 저장에 실패한 참가자"""
    name: str
    evicted_at: int


@dataclass
class SweepResult:
    """sweep 1회 실행 결과"""
    started_at: int
    skipped: bool = False
    evicted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    deferred_notices: List[str] = field(default_factory=list)
    flushed_notices: List[str] = field(default_factory=list)


class PresenceTracker:
    """참가자 heartbeat 및 비활성 참가자 정리"""

    def __init__(
        self,
        store: ChatStore,
        stale_timeout_ms: int,
        broadcast_target: str,
        clock: Callable[[], int] = now_ms
    ):
        self.store = store
        self.stale_timeout_ms = stale_timeout_ms
        self.broadcast_target = broadcast_target
        self.clock = clock
        self._pending_departures: List[PendingDeparture] = []
        self._sweep_lock = asyncio.Lock()

    @property
    def pending_departures(self) -> List[PendingDeparture]:
        return list(self._pending_departures)

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_lock.locked()

    def is_stale(self, participant: ParticipantResponse, now: int) -> bool:
        return now - participant.last_seen >= self.stale_timeout_ms

    async def touch(self, name: str) -> ParticipantResponse:
        """
        참가자의 last_seen을 현재 시각으로 갱신합니다.

        Raises:
            NotFoundError: 참가자가 없는 경우
            StoreError: 저장소 오류
        """
        participant = await self.store.update_last_seen(name, self.clock())
        log_presence_event(logger, "heartbeat", name, level=logging.DEBUG, last_seen=participant.last_seen)
        return participant

    async def join(self, name: str) -> ParticipantResponse:
        """
        참가자를 생성하고 입장 알림을 남깁니다.

        아직 전송되지 못한 이전 퇴장 알림이 있으면 먼저 남겨서 퇴장 -> 입장
        순서를 유지합니다. 입장 알림 저장에 실패하면 방금 만든 참가자를
        삭제(롤백)하고 StoreError를 그대로 전달합니다.

        Raises:
            ConflictError: 같은 이름의 참가자가 있거나 예약된 이름인 경우
            StoreError: 저장소 오류
        """
        if name.casefold() == self.broadcast_target.casefold():
            raise ConflictError(f"'{name}' is reserved for room-wide messages")

        await self._settle_departure(name)

        now = self.clock()
        participant = await self.store.create_participant(name, now)

        try:
            await self._announce(name, JOIN_NOTICE, now)
        except StoreError:
            log_presence_event(logger, "join_rolled_back", name, level=logging.WARNING)
            try:
                await self.store.delete_participant(name)
            except (NotFoundError, StoreError) as e:
                logger.error(f"Failed to roll back participant {name} after join notice failure: {e}")
            raise

        log_presence_event(logger, "join", name, last_seen=now)
        return participant

    async def sweep(self) -> SweepResult:
        """
        비활성 참가자 정리 1회 실행

        이미 다른 sweep이 실행 중이면 건너뜁니다. 참가자 한 명의 저장소 오류는
        로그만 남기고 나머지 참가자 처리를 계속합니다.
        """
        if self._sweep_lock.locked():
            logger.warning("Presence sweep already in progress, skipping")
            return SweepResult(started_at=self.clock(), skipped=True)

        async with self._sweep_lock:
            now = self.clock()
            result = SweepResult(started_at=now)

            await self._flush_pending_departures(result)

            try:
                snapshot = await self.store.list_participants()
            except StoreError as e:
                logger.error(f"Presence sweep could not read participants: {e}")
                return result

            stale_before = now - self.stale_timeout_ms
            for participant in snapshot:
                if self.is_stale(participant, now):
                    await self._evict(participant.name, now, stale_before, result)

            if result.evicted or result.failed or result.flushed_notices:
                logger.info(
                    f"Presence sweep evicted {len(result.evicted)} participant(s)",
                    extra={
                        "event_type": "presence_sweep",
                        "checked": len(snapshot),
                        "evicted": result.evicted,
                        "failed": result.failed,
                        "deferred_notices": result.deferred_notices,
                        "flushed_notices": result.flushed_notices,
                    }
                )
            return result

    async def _evict(self, name: str, now: int, stale_before: int, result: SweepResult):
        try:
            # 스냅샷 이후 heartbeat가 들어온 참가자는 조건에 맞지 않아 삭제되지 않음
            await self.store.delete_participant(name, stale_before=stale_before)
        except NotFoundError:
            logger.info(f"Participant {name} was refreshed or removed during sweep, skipping")
            return
        except StoreError as e:
            log_presence_event(logger, "eviction_failed", name, level=logging.ERROR, error=str(e))
            result.failed.append(name)
            return

        result.evicted.append(name)
        log_presence_event(logger, "evicted", name, stale_before=stale_before)

        try:
            await self._announce(name, LEAVE_NOTICE, now)
        except StoreError as e:
            log_presence_event(logger, "leave_notice_deferred", name, level=logging.WARNING, error=str(e))
            self._pending_departures.append(PendingDeparture(name=name, evicted_at=now))
            result.deferred_notices.append(name)

    async def _settle_departure(self, name: str):
        pending = [p for p in self._pending_departures if p.name == name]
        if not pending:
            return
        self._pending_departures = [p for p in self._pending_departures if p.name != name]

        for index, departure in enumerate(pending):
            try:
                await self._announce(departure.name, LEAVE_NOTICE, departure.evicted_at)
            except StoreError:
                self._pending_departures.extend(pending[index:])
                raise
        log_presence_event(logger, "leave_notice_flushed", name)

    async def _flush_pending_departures(self, result: SweepResult):
        # 전송 중인 항목은 목록에서 빼 두어 join과 중복 전송되지 않도록 함
        pending, self._pending_departures = self._pending_departures, []
        for departure in pending:
            try:
                await self._announce(departure.name, LEAVE_NOTICE, departure.evicted_at)
            except StoreError as e:
                logger.error(f"Leave notice for {departure.name} still failing: {e}")
                self._pending_departures.append(departure)
                continue
            result.flushed_notices.append(departure.name)

    async def _announce(self, name: str, text: str, at_ms: int):
        await self.store.append_message(
            MessageDraft(
                sender=name,
                to=self.broadcast_target,
                text=text,
                message_type=MessageKind.STATUS,
                time=format_clock_time(at_ms),
            )
        )


# 싱글톤 인스턴스
_presence_tracker: Optional[PresenceTracker] = None


def get_presence_tracker() -> PresenceTracker:
    """PresenceTracker 싱글톤 인스턴스 반환"""
    global _presence_tracker
    if _presence_tracker is None:
        _presence_tracker = PresenceTracker(
            store=get_chat_store(),
            stale_timeout_ms=int(settings.presence_stale_timeout_seconds * 1000),
            broadcast_target=settings.broadcast_target,
        )
    return _presence_tracker
