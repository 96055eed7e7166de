"""
Purpose: Everything the UI needs, built once at startup and passed down
explicitly (no module-level globals reached from widgets).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .config import Settings
from .config.logging import bind_context, clear_context, get_logger
from .controller import ConversationController
from .interfaces import IdentityStore, RemoteStore, ReplyGenerator
from .models import User
from .persistence.identity import LocalIdentityStore
from .persistence.remote_store import create_store
from .persistence.session_store import SessionStore
from .services.auth import AuthService
from .services.reply import select_reply_generator

logger = get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    identity: IdentityStore
    remote: RemoteStore
    replies: ReplyGenerator
    auth: AuthService = field(init=False)
    sessions: SessionStore = field(init=False)
    conversation: ConversationController = field(init=False)
    user: Optional[User] = None

    def __post_init__(self) -> None:
        self.auth = AuthService(self.remote)
        self.sessions = SessionStore(self.remote)
        self.conversation = ConversationController(self.sessions, self.replies)

    def restore(self) -> Optional[User]:
        """Startup: a persisted identity means logged in, no network round trip."""
        self.user = self.identity.read()
        if self.user is not None:
            bind_context(user_id=self.user.id)
            self.sessions.load(self.user.id)
        return self.user

    def use_browser(self, token: str) -> None:
        """File the identity under a new browser token (fresh token at each sign in)."""
        self.identity = LocalIdentityStore(self.settings.IDENTITY_PATH, token)

    def login(self, user: User) -> None:
        self.identity.write(user)
        self.user = user
        bind_context(user_id=user.id)
        self.sessions.load(user.id)

    def logout(self) -> None:
        self.identity.clear()
        self.user = None
        self.sessions.reset()
        clear_context()


def build_context(settings: Settings, browser_token: str) -> AppContext:
    return AppContext(
        settings=settings,
        identity=LocalIdentityStore(settings.IDENTITY_PATH, browser_token),
        remote=create_store(settings.DATABASE_URL),
        replies=select_reply_generator(settings),
    )
