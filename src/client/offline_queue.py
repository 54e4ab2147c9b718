"""Offline write queue for chat session saves.

When a session save cannot reach the API, the payload is kept in a local
JSON file and replayed later (at client start and whenever connectivity
comes back). Each item moves through::

    pending -> retrying -> committed | dropped

`committed` and `dropped` are terminal; terminal items are removed from the
file. Items are replayed in insertion order. Every item carries the session
id chosen by the client, and replays go through the idempotent session
upsert, so a save replayed twice (for example by two client instances
sharing the file) converges to last-write-wins.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from src.client.retry import RetryPolicy
from src.models.schemas import ChatMessage

logger = logging.getLogger(__name__)


class WriteState(str, Enum):
    """Lifecycle state of a queued write."""

    PENDING = "pending"
    RETRYING = "retrying"
    COMMITTED = "committed"
    DROPPED = "dropped"


class QueuedWrite(BaseModel):
    """A session save waiting to be written to the API.

    Attributes:
        id: Queue item id.
        client_id: Id of the client instance that enqueued the item.
        user_id: Owner of the session.
        session_id: Client-chosen session id the save targets.
        name: Optional session name.
        messages: Full message list at the time of the failed save.
        created_at: Enqueue time (epoch seconds).
        attempts: Failed replay attempts so far.
        last_attempt_at: Time of the last replay attempt.
        state: Current lifecycle state.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    client_id: str
    user_id: str
    session_id: str
    name: str | None = None
    messages: list[ChatMessage]
    created_at: float
    attempts: int = 0
    last_attempt_at: float | None = None
    state: WriteState = WriteState.PENDING


class FlushReport(BaseModel):
    """Outcome of one flush pass."""

    committed: list[QueuedWrite] = Field(default_factory=list)
    dropped: list[QueuedWrite] = Field(default_factory=list)
    remaining: int = 0


Writer = Callable[[QueuedWrite], Awaitable[object]]

_items_adapter = TypeAdapter(list[QueuedWrite])


class OfflineWriteQueue:
    """File-backed queue of failed session saves.

    Args:
        path: JSON file holding the queue.
        policy: Retry ceiling and backoff applied to every item.
        client_id: Identifier stamped on items enqueued by this instance.
        clock: Time source (epoch seconds).
    """

    def __init__(
        self,
        path: str | Path,
        policy: RetryPolicy | None = None,
        client_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.policy = policy or RetryPolicy()
        self.client_id = client_id or uuid.uuid4().hex[:8]
        self._clock = clock
        self._lock = asyncio.Lock()

    def read(self) -> list[QueuedWrite]:
        """Load queued items. An unreadable file counts as an empty queue."""
        if not self.path.exists():
            return []
        try:
            return _items_adapter.validate_json(self.path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable offline queue {self.path}: {e}")
            return []

    def _write(self, items: list[QueuedWrite]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_bytes(_items_adapter.dump_json(items, indent=2))
        tmp.replace(self.path)

    def __len__(self) -> int:
        return len(self.read())

    def enqueue(
        self,
        user_id: str,
        session_id: str,
        messages: list[ChatMessage],
        name: str | None = None,
    ) -> QueuedWrite:
        """Append a failed save to the queue in the pending state."""
        item = QueuedWrite(
            client_id=self.client_id,
            user_id=user_id,
            session_id=session_id,
            name=name,
            messages=list(messages),
            created_at=self._clock(),
        )
        items = self.read()
        items.append(item)
        self._write(items)
        logger.info(f"Queued save of session {session_id} ({len(messages)} messages)")
        return item

    def discard(self, user_id: str, session_id: str) -> int:
        """Remove queued saves of one session. Returns how many were removed."""
        items = self.read()
        kept = [
            it for it in items if not (it.user_id == user_id and it.session_id == session_id)
        ]
        removed = len(items) - len(kept)
        if removed:
            self._write(kept)
            logger.info(f"Discarded {removed} queued save(s) of session {session_id}")
        return removed

    async def flush(
        self,
        writer: Writer,
        force: bool = False,
        user_id: str | None = None,
    ) -> FlushReport:
        """Replay queued writes in insertion order.

        Args:
            writer: Performs one write; raising means the attempt failed.
            force: Ignore backoff windows (used on start and reconnect).
            user_id: Only replay items owned by this user.

        Returns:
            Which items were committed or dropped, and how many remain.
        """
        async with self._lock:
            report = FlushReport()
            for item in self.read():
                if not self._contains(item.id):
                    continue
                if not item.user_id:
                    self._remove(item.id)
                    continue
                if user_id is not None and item.user_id != user_id:
                    continue
                if not force and not self.policy.is_ready(
                    item.attempts, item.last_attempt_at, self._clock()
                ):
                    continue

                try:
                    await writer(item)
                except Exception as e:
                    logger.warning(f"Retry failed for queued item {item.id}: {e}")
                    item = self._record_failure(item)
                    if item.state is WriteState.DROPPED:
                        report.dropped.append(item)
                    continue

                item.state = WriteState.COMMITTED
                self._remove(item.id)
                report.committed.append(item)
                logger.info(f"Queued save {item.id} committed")

            report.remaining = len(self.read())
            return report

    def _contains(self, item_id: str) -> bool:
        return any(it.id == item_id for it in self.read())

    def _remove(self, item_id: str) -> None:
        self._write([it for it in self.read() if it.id != item_id])

    def _record_failure(self, item: QueuedWrite) -> QueuedWrite:
        item.attempts += 1
        item.last_attempt_at = self._clock()
        if self.policy.should_drop(item.attempts):
            item.state = WriteState.DROPPED
            self._remove(item.id)
            logger.warning(
                f"Dropped queued save {item.id} after {item.attempts} failed attempts"
            )
            return item

        item.state = WriteState.RETRYING
        self._write([item if it.id == item.id else it for it in self.read()])
        return item
