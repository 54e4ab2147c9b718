"""Client-side chat session manager.

Holds the state behind the chat page: the current message list, the selected
session and the user's session list. Sending a message updates the local list
optimistically, asks the tutor, then saves the whole list. A save that fails
is handed to the offline write queue, which is replayed on start and when
connectivity returns.
"""

import logging
import uuid
from collections.abc import Callable

from src.client.api_client import APIError, LmsApiClient
from src.client.offline_queue import FlushReport, OfflineWriteQueue, QueuedWrite
from src.models.schemas import ChatMessage, ChatRole, ChatSession

logger = logging.getLogger(__name__)

DEFAULT_TUTOR_CONTEXT = "You are an AI tutor helping the student learn clearly and concisely."
EMPTY_REPLY_TEXT = "No response from AI."
CHAT_ERROR_TEXT = "An error occurred while contacting the AI service."

# message, kind ("positive", "negative", "warning", "info")
Notify = Callable[[str, str], object]


def _ignore(message: str, kind: str) -> None:
    pass


def new_session_id() -> str:
    return uuid.uuid4().hex[:20]


class ChatSessionManager:
    """State and actions of one user's chat page.

    Args:
        api: Authenticated API client.
        queue: Offline write queue for failed saves.
        user_id: Uid of the signed-in user.
        notify: Toast callback, called with (message, kind).
        context: System message sent with every prompt.
    """

    def __init__(
        self,
        api: LmsApiClient,
        queue: OfflineWriteQueue,
        user_id: str,
        notify: Notify | None = None,
        context: str = DEFAULT_TUTOR_CONTEXT,
    ) -> None:
        self.api = api
        self.queue = queue
        self.user_id = user_id
        self.context = context
        self._notify = notify if notify is not None else _ignore

        self.messages: list[ChatMessage] = []
        self.current_session_id: str | None = None
        self.sessions: list[ChatSession] = []
        self.loading: bool = False

    @property
    def current_session(self) -> ChatSession | None:
        for session in self.sessions:
            if session.id == self.current_session_id:
                return session
        return None

    async def start(self) -> None:
        """Replay queued saves, then load the session list."""
        await self.flush_queue()
        await self.refresh_sessions()

    async def on_online(self) -> None:
        """Connectivity came back: replay queued saves."""
        report = await self.flush_queue()
        if report.committed:
            await self.refresh_sessions()

    async def flush_queue(self) -> FlushReport:
        report = await self.queue.flush(self._replay, force=True, user_id=self.user_id)
        for _ in report.committed:
            self._notify("Queued session saved", "positive")
        for _ in report.dropped:
            self._notify("Dropped a queued save after several failed attempts", "negative")
        return report

    async def _replay(self, item: QueuedWrite) -> None:
        await self.api.save_session(item.session_id, item.messages, item.name)

    async def refresh_sessions(self) -> list[ChatSession]:
        try:
            self.sessions = await self.api.list_sessions()
        except APIError as e:
            logger.error(f"Failed to fetch sessions: {e}")
            self._notify("Failed to load sessions.", "negative")
        return self.sessions

    async def send_message(self, text: str) -> ChatMessage | None:
        """Send a prompt and append the reply.

        Ignored while a previous message is in flight or when blank.

        Returns:
            The assistant message appended, or None if nothing was sent.
        """
        text = text.strip()
        if not text or self.loading:
            return None

        self.messages.append(ChatMessage(role=ChatRole.USER, text=text))
        self.loading = True
        try:
            try:
                reply = await self.api.ai_chat(text, self.context)
            except APIError as e:
                logger.error(f"AI Chat Error: {e}")
                error_message = ChatMessage(role=ChatRole.ASSISTANT, text=CHAT_ERROR_TEXT)
                self.messages.append(error_message)
                self._notify("AI service error", "negative")
                return error_message

            ai_message = ChatMessage(role=ChatRole.ASSISTANT, text=reply or EMPTY_REPLY_TEXT)
            self.messages.append(ai_message)
            await self.save()
            return ai_message
        finally:
            self.loading = False

    async def save(self) -> str | None:
        """Save the current message list to the current session.

        A session id is chosen here on the first save. If the write fails the
        save is queued once for a later retry.

        Returns:
            The session id on success, None when the save was queued.
        """
        created = self.current_session_id is None
        if created:
            self.current_session_id = new_session_id()
        session_id = self.current_session_id
        snapshot = list(self.messages)
        name = self.current_session.name if self.current_session else None

        try:
            saved = await self.api.save_session(session_id, snapshot, name)
        except APIError as e:
            logger.error(f"Session save failed: {e}")
            self.queue.enqueue(self.user_id, session_id, snapshot, name)
            self._notify("Saved to offline queue - will retry when online", "warning")
            return None

        # queued snapshots of this session are now stale
        self.queue.discard(self.user_id, session_id)
        self._upsert_local(saved)
        if created:
            self._notify("Session created", "positive")
        return session_id

    def _upsert_local(self, session: ChatSession) -> None:
        for i, existing in enumerate(self.sessions):
            if existing.id == session.id:
                self.sessions[i] = session
                return
        self.sessions.insert(0, session)

    async def new_session(self) -> str | None:
        """Start an empty session and select it."""
        self.messages = []
        self.loading = False
        session_id = new_session_id()
        self.current_session_id = session_id
        try:
            session = await self.api.save_session(session_id, [])
        except APIError as e:
            logger.error(f"Failed to start new session: {e}")
            self._notify("Could not start new session.", "negative")
            return None
        self._upsert_local(session)
        self._notify("New session started", "positive")
        return session_id

    async def load_session(self, session_id: str) -> ChatSession | None:
        """Select a session and show its messages."""
        session = next((s for s in self.sessions if s.id == session_id), None)
        if session is None:
            try:
                session = await self.api.get_session(session_id)
            except APIError as e:
                logger.error(f"Failed to load session {session_id}: {e}")
                self._notify("Could not load session.", "negative")
                return None
            self._upsert_local(session)
        self.messages = list(session.messages)
        self.current_session_id = session.id
        self._notify("Session loaded", "info")
        return session

    async def rename_session(self, session_id: str, name: str) -> bool:
        name = name.strip()
        if not name:
            return False
        try:
            session = await self.api.rename_session(session_id, name)
        except APIError as e:
            logger.error(f"Error renaming session: {e}")
            self._notify("Could not rename session.", "negative")
            return False
        self._upsert_local(session)
        self._notify("Session renamed", "positive")
        return True

    async def delete_session(self, session_id: str) -> bool:
        try:
            await self.api.delete_session(session_id)
        except APIError as e:
            # 404: the session only ever existed locally or in the queue
            if e.status_code != 404:
                logger.error(f"Error deleting session: {e}")
                self._notify("Could not delete session.", "negative")
                return False
        self.queue.discard(self.user_id, session_id)
        self.sessions = [s for s in self.sessions if s.id != session_id]
        if self.current_session_id == session_id:
            self.messages = []
            self.current_session_id = None
        self._notify("Session deleted", "positive")
        return True
