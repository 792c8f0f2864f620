import re
import pytest
import pytest_asyncio
from httpx import AsyncClient
from fastapi import status


@pytest_asyncio.fixture
async def room(client: AsyncClient):
    """Ana, Bruno, Carla가 입장한 채팅방"""
    for name in ("Ana", "Bruno", "Carla"):
        response = await client.post("/participants", json={"name": name})
        assert response.status_code == status.HTTP_201_CREATED
    return client


async def send(client: AsyncClient, sender: str, to: str, text: str, message_type: str = "message"):
    return await client.post(
        "/messages",
        json={"to": to, "text": text, "type": message_type},
        headers={"user": sender}
    )


class TestSendMessage:
    """메시지 전송 API 테스트"""

    @pytest.mark.asyncio
    async def test_send_message_success(self, room: AsyncClient):
        response = await send(room, "Ana", "Todos", "  oi galera  ")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["from"] == "Ana"
        assert data["to"] == "Todos"
        assert data["text"] == "oi galera"
        assert data["type"] == "message"
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", data["time"])
        assert "id" in data

    @pytest.mark.asyncio
    async def test_send_from_non_participant(self, room: AsyncClient, store):
        count = len(store.messages)

        response = await send(room, "Ghost", "Todos", "boo")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"
        assert len(store.messages) == count

    @pytest.mark.asyncio
    async def test_send_without_user_header(self, room: AsyncClient):
        response = await room.post("/messages", json={"to": "Todos", "text": "hi", "type": "message"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"to": "Todos", "text": "hi", "type": "status"},
        {"to": "Todos", "text": "hi", "type": "shout"},
        {"to": "Todos", "text": "   ", "type": "message"},
        {"to": "", "text": "hi", "type": "message"},
        {"text": "hi", "type": "message"},
    ])
    async def test_send_invalid_payload(self, room: AsyncClient, payload):
        response = await room.post("/messages", json=payload, headers={"user": "Ana"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestListMessages:
    """메시지 목록 API 테스트"""

    @pytest.mark.asyncio
    async def test_private_messages_visible_to_sender_and_recipient_only(self, room: AsyncClient):
        await send(room, "Ana", "Todos", "public")
        await send(room, "Ana", "Bruno", "secret", "private_message")

        for name, expected in (("Ana", True), ("Bruno", True), ("Carla", False)):
            response = await room.get("/messages", headers={"user": name})
            assert response.status_code == status.HTTP_200_OK
            texts = [m["text"] for m in response.json()]
            assert "public" in texts
            assert ("secret" in texts) is expected

    @pytest.mark.asyncio
    async def test_status_messages_are_listed(self, room: AsyncClient):
        response = await room.get("/messages", headers={"user": "Carla"})

        status_texts = [(m["from"], m["text"]) for m in response.json() if m["type"] == "status"]
        assert ("Ana", "entered the room") in status_texts

    @pytest.mark.asyncio
    async def test_limit_returns_most_recent_in_order(self, room: AsyncClient):
        for i in range(3):
            await send(room, "Ana", "Todos", f"Test message {i + 1}")

        response = await room.get("/messages?limit=2", headers={"user": "Ana"})

        assert response.status_code == status.HTTP_200_OK
        assert [m["text"] for m in response.json()] == ["Test message 2", "Test message 3"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", ["0", "-1", "abc"])
    async def test_invalid_limit(self, room: AsyncClient, limit):
        response = await room.get(f"/messages?limit={limit}", headers={"user": "Ana"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestEditAndDeleteMessage:
    """메시지 수정/삭제 API 테스트"""

    @pytest.mark.asyncio
    async def test_author_can_edit(self, room: AsyncClient):
        message_id = (await send(room, "Ana", "Todos", "typo")).json()["id"]

        response = await room.put(
            f"/messages/{message_id}",
            json={"to": "Bruno", "text": "fixed", "type": "private_message"},
            headers={"user": "Ana"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == message_id
        assert data["text"] == "fixed"
        assert data["to"] == "Bruno"
        assert data["type"] == "private_message"

    @pytest.mark.asyncio
    async def test_other_participant_cannot_edit(self, room: AsyncClient, store):
        message_id = (await send(room, "Ana", "Todos", "mine")).json()["id"]

        response = await room.put(
            f"/messages/{message_id}",
            json={"to": "Todos", "text": "hijacked", "type": "message"},
            headers={"user": "Bruno"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert (await store.find_message(message_id)).text == "mine"

    @pytest.mark.asyncio
    async def test_edit_unknown_message(self, room: AsyncClient):
        response = await room.put(
            "/messages/000000000000000000000999",
            json={"to": "Todos", "text": "hello", "type": "message"},
            headers={"user": "Ana"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_edit_invalid_payload(self, room: AsyncClient):
        message_id = (await send(room, "Ana", "Todos", "mine")).json()["id"]

        response = await room.put(
            f"/messages/{message_id}",
            json={"to": "Todos", "text": "", "type": "message"},
            headers={"user": "Ana"}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_author_can_delete(self, room: AsyncClient, store):
        message_id = (await send(room, "Ana", "Todos", "bye")).json()["id"]

        response = await room.delete(f"/messages/{message_id}", headers={"user": "Ana"})

        assert response.status_code == status.HTTP_200_OK
        assert await store.find_message(message_id) is None

    @pytest.mark.asyncio
    async def test_other_participant_cannot_delete(self, room: AsyncClient, store):
        message_id = (await send(room, "Ana", "Todos", "keep")).json()["id"]

        response = await room.delete(f"/messages/{message_id}", headers={"user": "Carla"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert await store.find_message(message_id) is not None

    @pytest.mark.asyncio
    async def test_delete_unknown_message(self, room: AsyncClient):
        response = await room.delete("/messages/not-an-id", headers={"user": "Ana"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "not found" in response.json()["message"].lower()

    @pytest.mark.asyncio
    async def test_status_notice_cannot_be_edited(self, room: AsyncClient, store):
        notice = store.status_messages("Ana", "entered the room")[0]

        response = await room.put(
            f"/messages/{notice.id}",
            json={"to": "Todos", "text": "never here", "type": "message"},
            headers={"user": "Ana"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert (await store.find_message(notice.id)).text == "entered the room"

    @pytest.mark.asyncio
    async def test_leave_notice_cannot_be_deleted_after_eviction(self, room: AsyncClient, store, tracker, clock):
        clock.set(20_000)
        await tracker.sweep()
        notice = store.status_messages("Ana", "left the room")[0]

        response = await room.delete(f"/messages/{notice.id}", headers={"user": "Ana"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert await store.find_message(notice.id) is not None
