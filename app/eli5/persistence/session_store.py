"""
Purpose: Chat sessions of the logged-in user, kept in memory and written
through to the remote store.
Why: The sidebar and the conversation view both render from this one list,
so local and remote state must never diverge.

What is inside:
SessionStore with load / create_session / delete_session / rename_session /
append_messages, plus select/reset for the UI.

Rules:
- Remote first, local second: local state changes only after the remote
  write succeeded. A failed write is logged and leaves local state as it was.
- append_messages takes the complete new message list (whole-list replace),
  derives the title from the first message while the title is still the
  default, touches last_updated and re-sorts newest first (stable).
- Re-entrant append_messages for a session whose write has not returned
  yet is rejected. Writes are synchronous, so this is not a thread lock.

Testing:
In-memory SQLite remote store plus a fake clock; failing fakes for the
error paths.
"""

from __future__ import annotations

from typing import Optional, Sequence

from eli5.config.logging import get_logger
from eli5.interfaces import RemoteStore
from eli5.models import (
    DEFAULT_TITLE,
    TITLE_CLIP_CHARS,
    TITLE_MAX_CHARS,
    ChatSession,
    Message,
)
from eli5.utils.clock import Clock, TimeIds, now_ms

logger = get_logger(__name__)


def derive_title(current: str, messages: Sequence[Message]) -> str:
    """Title after an update: first message text while the title is still the default."""
    if current != DEFAULT_TITLE or not messages:
        return current
    first = messages[0].content
    if len(first) > TITLE_MAX_CHARS:
        return first[:TITLE_CLIP_CHARS] + "..."
    return first


class SessionStore:
    def __init__(self, remote: RemoteStore, *, clock: Clock = now_ms) -> None:
        self.remote = remote
        self.clock = clock
        self.ids = TimeIds(clock)
        self.sessions: list[ChatSession] = []
        self.active_session_id: Optional[str] = None
        self._in_flight: set[str] = set()

    # Lookups
    def get(self, session_id: str) -> Optional[ChatSession]:
        return next((s for s in self.sessions if s.id == session_id), None)

    @property
    def active_session(self) -> Optional[ChatSession]:
        if self.active_session_id is None:
            return None
        return self.get(self.active_session_id)

    def select(self, session_id: Optional[str]) -> None:
        if session_id is None or self.get(session_id) is not None:
            self.active_session_id = session_id

    def reset(self) -> None:
        """Drop all local state (logout)."""
        self.sessions = []
        self.active_session_id = None
        self._in_flight.clear()

    # Operations
    def load(self, user_id: str) -> list[ChatSession]:
        self.reset()
        try:
            sessions = self.remote.list_chats(user_id)
        except Exception as e:
            logger.error("sessions_load_failed", user_id=user_id, error=str(e))
            return []

        self.sessions = list(sessions)
        if self.sessions:
            self.active_session_id = self.sessions[0].id
        logger.info("sessions_loaded", user_id=user_id, count=len(self.sessions))
        return self.sessions

    def create_session(self, user_id: str) -> Optional[ChatSession]:
        session = ChatSession(
            id=self.ids.next({s.id for s in self.sessions}),
            title=DEFAULT_TITLE,
            messages=[],
            last_updated=self.clock(),
        )
        try:
            self.remote.insert_chat(user_id, session)
        except Exception as e:
            logger.error("session_create_failed", user_id=user_id, error=str(e))
            return None

        self.sessions = [session, *self.sessions]
        self.active_session_id = session.id
        logger.info("session_created", session_id=session.id, user_id=user_id)
        return session

    def delete_session(self, session_id: str) -> bool:
        try:
            self.remote.delete_chat(session_id)
        except Exception as e:
            logger.error("session_delete_failed", session_id=session_id, error=str(e))
            return False

        self.sessions = [s for s in self.sessions if s.id != session_id]
        if self.active_session_id == session_id:
            self.active_session_id = None
        logger.info("session_deleted", session_id=session_id)
        return True

    def rename_session(self, session_id: str, new_title: str) -> bool:
        title = (new_title or "").strip()
        if not title:
            return False
        try:
            self.remote.update_chat(session_id, title=title)
        except Exception as e:
            logger.error("session_rename_failed", session_id=session_id, error=str(e))
            return False

        session = self.get(session_id)
        if session is not None:
            session.title = title
        return True

    def append_messages(self, session_id: str, messages: Sequence[Message]) -> bool:
        """
        Replace the session's whole message list.
        Callers pass the previous messages plus the additions.
        """
        current = self.get(session_id)
        if current is None:
            return False
        if session_id in self._in_flight:
            logger.warning("session_sync_rejected_in_flight", session_id=session_id)
            return False

        new_messages = list(messages)
        title = derive_title(current.title, new_messages)
        last_updated = self.clock()

        self._in_flight.add(session_id)
        try:
            self.remote.update_chat(
                session_id,
                messages=new_messages,
                title=title,
                last_updated=last_updated,
            )
        except Exception as e:
            logger.error(
                "session_sync_failed",
                session_id=session_id,
                message_count=len(new_messages),
                error=str(e),
            )
            return False
        finally:
            self._in_flight.discard(session_id)

        current.messages = new_messages
        current.title = title
        current.last_updated = last_updated
        self.sessions = sorted(self.sessions, key=lambda s: s.last_updated, reverse=True)
        return True
