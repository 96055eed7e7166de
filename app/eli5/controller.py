"""
Purpose: The single orchestration point for one conversation turn.
Prevents the UI from knowing how the session store and reply backends work.

Key responsibilities:
- Build the user message (fresh id, timestamp, reading level).
- Hand whole message lists to SessionStore.append_messages: user message,
  then an empty model placeholder (typing state), then the filled-in reply.
- Call the reply generator with the prompt and the prior history.
- Turn reply failures into a substitute assistant message.
- Allow exactly one send in flight.

Every list passed to append_messages is the messages the session had when
the send started plus this turn's additions, so no write drops an earlier one.

Testing: Pure unit tests with a fake ReplyGenerator and an in-memory store.
"""

from __future__ import annotations
from typing import Optional

from .config.logging import get_logger
from .errors import reply_for_failure
from .interfaces import ReplyGenerator
from .models import ChatSession, Message, ReadingLevel
from .persistence.session_store import SessionStore
from .services.security import DefaultSecurity
from .utils.clock import Clock, TimeIds, now_ms

logger = get_logger(__name__)


class ConversationController:
    def __init__(
        self,
        store: SessionStore,
        replies: ReplyGenerator,
        *,
        clock: Clock = now_ms,
    ):
        self.store = store
        self.replies = replies
        self.security = DefaultSecurity()
        self.clock = clock
        self.ids = TimeIds(clock)
        self._pending = False

    @property
    def is_pending(self) -> bool:
        """True while a send is waiting for its reply; the send control is disabled."""
        return self._pending

    def _new_message(
        self,
        session: ChatSession,
        *,
        role: str,
        content: str,
        level: Optional[ReadingLevel] = None,
    ) -> Message:
        return Message(
            id=self.ids.next({m.id for m in session.messages}),
            role=role,
            content=content,
            timestamp=self.clock(),
            level=level,
        )

    def send_message(
        self, session_id: str, level: ReadingLevel, text: str
    ) -> Optional[Message]:
        """
        One user turn. Returns the final model message, or None when the
        input is blank, a send is already pending, or the session is unknown.
        """
        if not (text or "").strip() or self._pending:
            return None
        session = self.store.get(session_id)
        if session is None:
            return None

        self._pending = True
        try:
            base = list(session.messages)
            user_msg = self._new_message(session, role="user", content=text, level=level)
            self.store.append_messages(session_id, [*base, user_msg])

            placeholder = self._new_message(session, role="model", content="")
            self.store.append_messages(session_id, [*base, user_msg, placeholder])

            try:
                reply = self.replies.generate(
                    self.security.sanitize_for_prompt(text), base
                )
            except Exception as e:
                logger.error(
                    "reply_generation_failed",
                    session_id=session_id,
                    error=str(e),
                    exc_info=True,
                )
                reply = reply_for_failure(e)

            final = placeholder.with_content(reply)
            self.store.append_messages(session_id, [*base, user_msg, final])
            return final
        finally:
            self._pending = False

    def start_example(
        self, user_id: str, level: ReadingLevel, prompt: str
    ) -> Optional[Message]:
        """New conversation seeded with one of the example starter prompts."""
        session = self.store.create_session(user_id)
        if session is None:
            return None
        return self.send_message(session.id, level, prompt)
