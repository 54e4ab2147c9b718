"""Unit tests for the file-backed offline write queue.

Covers the pending -> retrying -> committed | dropped lifecycle, ordering,
the retry ceiling and per-user filtering.
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_check as check

from src.client import OfflineWriteQueue, QueuedWrite, RetryPolicy, WriteState
from src.models.schemas import ChatMessage, ChatRole


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _messages(*texts: str) -> list[ChatMessage]:
    return [ChatMessage(role=ChatRole.USER, text=t) for t in texts]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue(tmp_path: Path, clock: FakeClock) -> OfflineWriteQueue:
    return OfflineWriteQueue(tmp_path / "queue.json", client_id="client-a", clock=clock)


class TestEnqueue:
    def test_enqueue_persists_pending_item(self, queue: OfflineWriteQueue) -> None:
        item = queue.enqueue("u1", "s1", _messages("hi", "there"), name="Algebra")

        stored = queue.read()

        assert len(stored) == 1
        check.equal(stored[0].id, item.id)
        check.equal(stored[0].state, WriteState.PENDING)
        check.equal(stored[0].attempts, 0)
        check.equal(stored[0].client_id, "client-a")
        check.equal(stored[0].name, "Algebra")
        check.equal([m.text for m in stored[0].messages], ["hi", "there"])

    def test_queue_survives_new_instance(self, tmp_path: Path) -> None:
        """The queue lives in the file, not in memory."""
        OfflineWriteQueue(tmp_path / "q.json").enqueue("u1", "s1", _messages("a"))

        assert len(OfflineWriteQueue(tmp_path / "q.json")) == 1

    def test_corrupt_file_reads_as_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "q.json"
        path.write_text("{not json")

        queue = OfflineWriteQueue(path)

        assert queue.read() == []
        queue.enqueue("u1", "s1", _messages("a"))
        assert len(queue) == 1


class TestFlush:
    async def test_successful_replay_commits_and_removes(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("u1", "s1", _messages("a"))
        writer = AsyncMock()

        report = await queue.flush(writer)

        assert [i.session_id for i in report.committed] == ["s1"]
        assert report.committed[0].state is WriteState.COMMITTED
        assert report.remaining == 0
        assert queue.read() == []
        writer.assert_awaited_once()

    async def test_replays_in_insertion_order(self, queue: OfflineWriteQueue) -> None:
        for sid in ("s1", "s2", "s3"):
            queue.enqueue("u1", sid, _messages(sid))
        seen: list[str] = []

        async def writer(item: QueuedWrite) -> None:
            seen.append(item.session_id)

        await queue.flush(writer)

        assert seen == ["s1", "s2", "s3"]

    async def test_failure_moves_to_retrying(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("u1", "s1", _messages("a"))

        report = await queue.flush(AsyncMock(side_effect=OSError("down")))

        (item,) = queue.read()
        check.equal(item.state, WriteState.RETRYING)
        check.equal(item.attempts, 1)
        check.equal(report.remaining, 1)
        check.equal(report.dropped, [])

    async def test_backoff_skips_item_until_ready(
        self, queue: OfflineWriteQueue, clock: FakeClock
    ) -> None:
        queue.enqueue("u1", "s1", _messages("a"))
        await queue.flush(AsyncMock(side_effect=OSError("down")))
        writer = AsyncMock()

        await queue.flush(writer)
        writer.assert_not_awaited()

        clock.now += queue.policy.delay_for(1)
        await queue.flush(writer)
        writer.assert_awaited_once()

    async def test_dropped_after_max_attempts(self, queue: OfflineWriteQueue) -> None:
        """An item is dropped after five failed retries and never retried again."""
        queue.enqueue("u1", "s1", _messages("a"))
        writer = AsyncMock(side_effect=OSError("down"))

        reports = [await queue.flush(writer, force=True) for _ in range(5)]

        assert writer.await_count == 5
        assert [len(r.dropped) for r in reports] == [0, 0, 0, 0, 1]
        assert reports[-1].dropped[0].state is WriteState.DROPPED
        assert reports[-1].dropped[0].attempts == 5
        assert queue.read() == []

        await queue.flush(writer, force=True)
        assert writer.await_count == 5

    async def test_custom_ceiling(self, tmp_path: Path) -> None:
        queue = OfflineWriteQueue(tmp_path / "q.json", policy=RetryPolicy(max_attempts=1))
        queue.enqueue("u1", "s1", _messages("a"))

        report = await queue.flush(AsyncMock(side_effect=OSError("down")))

        assert len(report.dropped) == 1

    async def test_user_filter_leaves_other_users_items(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("u1", "s1", _messages("a"))
        queue.enqueue("u2", "s2", _messages("b"))
        writer = AsyncMock()

        report = await queue.flush(writer, user_id="u1")

        assert [i.session_id for i in report.committed] == ["s1"]
        assert [i.user_id for i in queue.read()] == ["u2"]

    async def test_item_without_owner_is_discarded(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("", "s1", _messages("a"))
        writer = AsyncMock()

        await queue.flush(writer)

        writer.assert_not_awaited()
        assert queue.read() == []


class TestDiscard:
    def test_discard_removes_only_that_session(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("u1", "s1", _messages("a"))
        queue.enqueue("u1", "s2", _messages("b"))
        queue.enqueue("u1", "s1", _messages("a", "c"))
        queue.enqueue("u2", "s1", _messages("d"))

        removed = queue.discard("u1", "s1")

        assert removed == 2
        assert [(i.user_id, i.session_id) for i in queue.read()] == [("u1", "s2"), ("u2", "s1")]

    def test_discard_without_match(self, queue: OfflineWriteQueue) -> None:
        queue.enqueue("u1", "s1", _messages("a"))

        assert queue.discard("u1", "other") == 0
        assert len(queue) == 1

    async def test_item_discarded_during_flush_is_not_replayed(
        self, queue: OfflineWriteQueue
    ) -> None:
        queue.enqueue("u1", "s1", _messages("a"))
        queue.enqueue("u1", "s2", _messages("b"))
        seen: list[str] = []

        async def writer(item: QueuedWrite) -> None:
            seen.append(item.session_id)
            queue.discard("u1", "s2")

        await queue.flush(writer)

        assert seen == ["s1"]
        assert queue.read() == []
