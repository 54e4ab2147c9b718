"""Integration tests for ChatSessionManager against the in-process API.

The manager talks to the real app through ASGITransport. Outages are
simulated by making session saves raise OfflineError.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_check as check
from fastapi import FastAPI
from httpx import ASGITransport

from src.client import (
    APIError,
    ChatSessionManager,
    ConnectivityMonitor,
    LmsApiClient,
    OfflineError,
    OfflineWriteQueue,
    WriteState,
)
from src.client.session_manager import CHAT_ERROR_TEXT
from src.models.schemas import ChatRole


class Notifications(list):
    def __call__(self, message: str, kind: str) -> None:
        self.append((message, kind))

    @property
    def messages(self) -> list[str]:
        return [m for m, _ in self]


@pytest.fixture
async def api(app: FastAPI, signup) -> AsyncGenerator[LmsApiClient]:
    user = await signup(email="student@example.com")
    client = LmsApiClient("http://test", token=user["token"], transport=ASGITransport(app=app))
    client.uid = user["uid"]
    yield client
    await client.aclose()


@pytest.fixture
def queue(tmp_path: Path) -> OfflineWriteQueue:
    return OfflineWriteQueue(tmp_path / "queue.json", client_id="test-client")


@pytest.fixture
def notes() -> Notifications:
    return Notifications()


@pytest.fixture
def manager(
    api: LmsApiClient, queue: OfflineWriteQueue, notes: Notifications
) -> ChatSessionManager:
    return ChatSessionManager(api=api, queue=queue, user_id=api.uid, notify=notes)


def _go_offline(api: LmsApiClient) -> AsyncMock:
    real = api.save_session
    failing = AsyncMock(side_effect=OfflineError("Connection failed"))
    api.save_session = failing
    failing.real = real
    return failing


def _go_online(api: LmsApiClient, failing: AsyncMock) -> None:
    api.save_session = failing.real


class TestSendMessage:
    async def test_first_message_creates_session(
        self, manager: ChatSessionManager, api: LmsApiClient, notes: Notifications
    ) -> None:
        """A send appends user and assistant messages, then saves under a new id."""
        reply = await manager.send_message("  2+2?  ")

        assert reply.text == "Echo: 2+2?"
        assert [(m.role, m.text) for m in manager.messages] == [
            (ChatRole.USER, "2+2?"),
            (ChatRole.ASSISTANT, "Echo: 2+2?"),
        ]
        assert manager.current_session_id is not None
        assert manager.loading is False
        assert "Session created" in notes.messages

        stored = await api.get_session(manager.current_session_id)
        assert [m.text for m in stored.messages] == ["2+2?", "Echo: 2+2?"]

    async def test_follow_up_updates_same_session(
        self, manager: ChatSessionManager, api: LmsApiClient, notes: Notifications
    ) -> None:
        await manager.send_message("one")
        first_id = manager.current_session_id

        await manager.send_message("two")

        sessions = await api.list_sessions()
        assert [s.id for s in sessions] == [first_id]
        assert len(sessions[0].messages) == 4
        assert notes.messages.count("Session created") == 1

    async def test_blank_input_ignored(self, manager: ChatSessionManager) -> None:
        assert await manager.send_message("   ") is None
        assert manager.messages == []

    async def test_ai_error_appends_error_message_without_saving(
        self, manager: ChatSessionManager, api: LmsApiClient, notes: Notifications
    ) -> None:
        api.ai_chat = AsyncMock(side_effect=APIError("AI request failed.", 500))

        reply = await manager.send_message("hi")

        assert reply.text == CHAT_ERROR_TEXT
        assert [m.role for m in manager.messages] == [ChatRole.USER, ChatRole.ASSISTANT]
        assert ("AI service error", "negative") in notes
        assert manager.current_session_id is None
        assert manager.loading is False


class TestOfflineQueue:
    async def test_failed_save_is_queued_once(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
        notes: Notifications,
    ) -> None:
        failing = _go_offline(api)

        await manager.send_message("hi")

        items = queue.read()
        assert len(items) == 1
        failing.assert_awaited_once()
        check.equal(items[0].session_id, manager.current_session_id)
        check.equal(items[0].user_id, api.uid)
        check.equal(items[0].state, WriteState.PENDING)
        check.equal([m.text for m in items[0].messages], ["hi", "Echo: hi"])
        check.is_in("Saved to offline queue - will retry when online", notes.messages)
        # the optimistic messages stay visible
        check.equal(len(manager.messages), 2)

    async def test_reconnect_replays_queue(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
        notes: Notifications,
    ) -> None:
        """Going back online commits the queued save and refreshes the list."""
        failing = _go_offline(api)
        await manager.send_message("hi")
        _go_online(api, failing)
        monitor = ConnectivityMonitor(
            probe=AsyncMock(return_value=True), on_online=manager.on_online, online=False
        )

        await monitor.check()

        assert queue.read() == []
        assert "Queued session saved" in notes.messages
        assert [s.id for s in manager.sessions] == [manager.current_session_id]
        stored = await api.get_session(manager.current_session_id)
        assert [m.text for m in stored.messages] == ["hi", "Echo: hi"]

    async def test_start_flushes_queue(
        self, manager: ChatSessionManager, api: LmsApiClient, queue: OfflineWriteQueue
    ) -> None:
        failing = _go_offline(api)
        await manager.send_message("hi")
        session_id = manager.current_session_id
        _go_online(api, failing)

        fresh = ChatSessionManager(api=api, queue=queue, user_id=api.uid)
        await fresh.start()

        assert queue.read() == []
        assert [s.id for s in fresh.sessions] == [session_id]

    async def test_dropped_after_five_failed_retries(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
        notes: Notifications,
    ) -> None:
        failing = _go_offline(api)
        await manager.send_message("hi")

        for _ in range(5):
            await manager.on_online()

        # one failed save plus five failed replays
        assert failing.await_count == 6
        assert queue.read() == []
        assert notes.messages.count("Dropped a queued save after several failed attempts") == 1

        await manager.on_online()
        assert failing.await_count == 6

    async def test_replay_is_idempotent(
        self, manager: ChatSessionManager, api: LmsApiClient, queue: OfflineWriteQueue
    ) -> None:
        """The same queued save replayed twice leaves one session."""
        failing = _go_offline(api)
        await manager.send_message("hi")
        _go_online(api, failing)
        (item,) = queue.read()

        await api.save_session(item.session_id, item.messages, item.name)
        await manager.flush_queue()

        sessions = await api.list_sessions()
        assert [s.id for s in sessions] == [item.session_id]
        assert [m.text for m in sessions[0].messages] == ["hi", "Echo: hi"]


class TestSessionActions:
    async def test_new_load_rename_delete(
        self, manager: ChatSessionManager, api: LmsApiClient
    ) -> None:
        await manager.send_message("first")
        first_id = manager.current_session_id

        new_id = await manager.new_session()
        assert new_id != first_id
        assert manager.messages == []

        loaded = await manager.load_session(first_id)
        assert loaded.id == first_id
        assert [m.text for m in manager.messages] == ["first", "Echo: first"]

        assert await manager.rename_session(first_id, "Algebra") is True
        assert (await api.get_session(first_id)).name == "Algebra"
        assert await manager.rename_session(first_id, "   ") is False

        assert await manager.delete_session(first_id) is True
        assert manager.current_session_id is None
        assert manager.messages == []
        assert [s.id for s in manager.sessions] == [new_id]


class TestQueueConsistency:
    async def test_empty_notifier_still_receives_toasts(
        self, api: LmsApiClient, queue: OfflineWriteQueue
    ) -> None:
        """A notifier that is falsy (an empty list) is still called."""
        notes = Notifications()
        manager = ChatSessionManager(api=api, queue=queue, user_id=api.uid, notify=notes)

        await manager.send_message("hi")

        assert "Session created" in notes.messages

    async def test_later_save_supersedes_queued_snapshot(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
    ) -> None:
        """Offline save, then a successful save: reconnecting must not restore the old list."""
        failing = _go_offline(api)
        await manager.send_message("one")
        _go_online(api, failing)

        await manager.send_message("two")
        assert queue.read() == []

        await manager.on_online()

        stored = await api.get_session(manager.current_session_id)
        expected = ["one", "Echo: one", "two", "Echo: two"]
        assert [m.text for m in stored.messages] == expected
        assert [m.text for m in manager.messages] == expected

    async def test_deleted_session_is_not_recreated_by_replay(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
    ) -> None:
        await manager.send_message("one")
        session_id = manager.current_session_id
        failing = _go_offline(api)
        await manager.send_message("two")
        _go_online(api, failing)
        assert len(queue.read()) == 1

        assert await manager.delete_session(session_id) is True
        await manager.on_online()

        assert queue.read() == []
        assert await api.list_sessions() == []
        with pytest.raises(APIError) as exc_info:
            await api.get_session(session_id)
        assert exc_info.value.status_code == 404

    async def test_delete_of_never_synced_session(
        self,
        manager: ChatSessionManager,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
    ) -> None:
        """A session that only exists in the queue can still be deleted."""
        failing = _go_offline(api)
        await manager.send_message("one")
        session_id = manager.current_session_id
        _go_online(api, failing)

        assert await manager.delete_session(session_id) is True
        await manager.on_online()

        assert queue.read() == []
        assert manager.current_session_id is None
        assert await api.list_sessions() == []
