import pytest
import pytest_asyncio
from typing import AsyncGenerator, Dict, List, Optional, Set
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.core.errors import ConflictError, NotFoundError, StoreError
from app.schemas import MessageDraft, MessageKind, MessageResponse, ParticipantResponse
from app.services.presence_tracker import PresenceTracker, get_presence_tracker
from app.services.store import ChatStore, get_chat_store, is_visible_to


STALE_TIMEOUT_MS = 10_000
BROADCAST_TARGET = "Todos"


class ManualClock:
    """테스트용 수동 시계 (epoch ms)"""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def set(self, value: int):
        self.now = value

    def advance(self, delta: int):
        self.now += delta


class FakeChatStore(ChatStore):
    """인메모리 ChatStore (장애 주입 가능)"""

    def __init__(self):
        self.participants: Dict[str, int] = {}
        self.messages: List[MessageResponse] = []
        self._next_id = 1

        # 장애 주입
        self.fail_appends = 0
        self.fail_deletes_for: Set[str] = set()
        self.fail_list = False
        self.reachable = True

    async def create_participant(self, name: str, last_seen: int) -> ParticipantResponse:
        if name in self.participants:
            raise ConflictError(f"Participant '{name}' already exists")
        self.participants[name] = last_seen
        return ParticipantResponse(name=name, last_seen=last_seen)

    async def find_participant(self, name: str) -> Optional[ParticipantResponse]:
        if name not in self.participants:
            return None
        return ParticipantResponse(name=name, last_seen=self.participants[name])

    async def update_last_seen(self, name: str, timestamp: int) -> ParticipantResponse:
        if name not in self.participants:
            raise NotFoundError(f"Participant '{name}' not found")
        self.participants[name] = max(timestamp, self.participants[name] + 1)
        return ParticipantResponse(name=name, last_seen=self.participants[name])

    async def delete_participant(self, name: str, stale_before: Optional[int] = None) -> None:
        if name in self.fail_deletes_for:
            raise StoreError(f"Injected delete failure for '{name}'")
        if name not in self.participants:
            raise NotFoundError(f"Participant '{name}' not found")
        if stale_before is not None and self.participants[name] > stale_before:
            raise NotFoundError(f"Participant '{name}' is not stale")
        del self.participants[name]

    async def list_participants(self) -> List[ParticipantResponse]:
        if self.fail_list:
            raise StoreError("Injected list failure")
        return [
            ParticipantResponse(name=name, last_seen=last_seen)
            for name, last_seen in self.participants.items()
        ]

    async def append_message(self, draft: MessageDraft) -> MessageResponse:
        if self.fail_appends:
            self.fail_appends -= 1
            raise StoreError(f"Injected append failure for '{draft.sender}'")
        message = MessageResponse(
            id=f"{self._next_id:024x}",
            sender=draft.sender,
            to=draft.to,
            text=draft.text,
            message_type=draft.message_type,
            time=draft.time,
        )
        self._next_id += 1
        self.messages.append(message)
        return message

    async def find_message(self, message_id: str) -> Optional[MessageResponse]:
        return next((m for m in self.messages if m.id == message_id), None)

    async def list_messages_for(self, name: str, limit: Optional[int] = None) -> List[MessageResponse]:
        visible = [m for m in self.messages if is_visible_to(m, name)]
        if limit:
            visible = visible[-limit:]
        return visible

    async def update_message(
        self,
        message_id: str,
        to: str,
        text: str,
        message_type: MessageKind
    ) -> MessageResponse:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                updated = message.model_copy(update={"to": to, "text": text, "message_type": message_type})
                self.messages[index] = updated
                return updated
        raise NotFoundError(f"Message '{message_id}' not found")

    async def delete_message(self, message_id: str) -> None:
        message = await self.find_message(message_id)
        if message is None:
            raise NotFoundError(f"Message '{message_id}' not found")
        self.messages.remove(message)

    async def ping(self) -> bool:
        return self.reachable

    def status_messages(self, sender: str, text: str) -> List[MessageResponse]:
        return [
            m for m in self.messages
            if m.sender == sender and m.message_type == MessageKind.STATUS and m.text == text
        ]


@pytest.fixture
def clock() -> ManualClock:
    """t=0에서 시작하는 수동 시계"""
    return ManualClock()


@pytest.fixture
def store() -> FakeChatStore:
    """인메모리 저장소"""
    return FakeChatStore()


@pytest.fixture
def tracker(store, clock) -> PresenceTracker:
    """timeout 10초 PresenceTracker"""
    return PresenceTracker(
        store=store,
        stale_timeout_ms=STALE_TIMEOUT_MS,
        broadcast_target=BROADCAST_TARGET,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(store, tracker) -> AsyncGenerator[AsyncClient, None]:
    """테스트용 비동기 HTTP 클라이언트"""
    app.dependency_overrides[get_chat_store] = lambda: store
    app.dependency_overrides[get_presence_tracker] = lambda: tracker

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )
