"""
Abstractions for pluggable services. Inversion of control: core depends
on interfaces, not concrete services. Enables fakes/mocks and future swaps.
Protocols define what services or components can do,
without saying how they do it.

Common protocols:
- RemoteStore: account lookup/creation and chat CRUD keyed by id/user_id.
- ReplyGenerator.generate(prompt, history) -> str
- IdentityStore.read() / write(user) / clear()
- LLMClient.chat(messages, settings, system) -> (reply, meta)

Testing: Use simple fake implementations to test the session store and the
conversation controller without a database or network calls.
"""

from __future__ import annotations
from typing import Any, Optional, Protocol, Sequence
from .models import ChatSession, LLMSettings, Message, User


class RemoteStore(Protocol):
    # Accounts
    def find_account(self, email: str) -> Optional[dict[str, Any]]: ...

    def create_account(
        self, *, email: str, name: str, password_hash: str
    ) -> dict[str, Any]: ...

    # Chats
    def list_chats(self, user_id: str) -> list[ChatSession]: ...

    def insert_chat(self, user_id: str, session: ChatSession) -> None: ...

    def update_chat(
        self,
        chat_id: str,
        *,
        title: Optional[str] = None,
        messages: Optional[Sequence[Message]] = None,
        last_updated: Optional[int] = None,
    ) -> None: ...

    def delete_chat(self, chat_id: str) -> None: ...


class ReplyGenerator(Protocol):
    def generate(self, prompt: str, history: Sequence[Message]) -> str: ...


class IdentityStore(Protocol):
    def read(self) -> Optional[User]: ...

    def write(self, user: User) -> None: ...

    def clear(self) -> None: ...


class LLMClient(Protocol):
    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]: ...
