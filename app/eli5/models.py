"""
Canonical data shapes, shared truth for typing/validation between layers.

Typical contents:
- User (id, email, name).
- Message (role, content, timestamp, optional reading level).
- ChatSession (title, ordered messages, last_updated in epoch ms).
- LLMSettings for the generative backend.

Row mapping helpers live next to the shapes so the store and the UI agree on
one record format.

Testing: Trivial; mostly types. Record round-trips are covered by store tests.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Literal, Any
from enum import Enum


DEFAULT_TITLE = "New Explanation"
TITLE_MAX_CHARS = 30
TITLE_CLIP_CHARS = 27

Role = Literal["user", "model"]


class ReadingLevel(str, Enum):
    TODDLER = "Toddler (Age 3-5)"
    CHILD = "Child (Age 6-10)"
    TEEN = "Teenager (Age 13-17)"
    NON_EXPERT = "Non-Expert Adult"
    SKEPTIC = "Cynical Skeptic"


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str

    @property
    def first_name(self) -> str:
        parts = (self.name or "").split()
        return parts[0] if parts else ""

    def to_record(self) -> dict[str, str]:
        return {"id": self.id, "email": self.email, "name": self.name}

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "User":
        return cls(id=str(row["id"]), email=row["email"], name=row["name"])


@dataclass(frozen=True)
class Message:
    id: str
    role: Role
    content: str
    timestamp: int
    level: Optional[ReadingLevel] = None

    def with_content(self, content: str) -> "Message":
        """Messages are immutable; a filled-in reply is a new value."""
        return Message(
            id=self.id,
            role=self.role,
            content=content,
            timestamp=self.timestamp,
            level=self.level,
        )

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp,
        }
        if self.level is not None:
            record["level"] = self.level.value
        return record

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Message":
        level = data.get("level")
        return cls(
            id=str(data["id"]),
            role=data.get("role", "user"),
            content=data.get("content") or "",
            timestamp=int(data.get("timestamp") or 0),
            level=ReadingLevel(level) if level else None,
        )


@dataclass
class ChatSession:
    id: str
    title: str = DEFAULT_TITLE
    messages: list[Message] = field(default_factory=list)
    last_updated: int = 0

    def to_record(self, user_id: str) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": user_id,
            "title": self.title,
            "messages": [m.to_record() for m in self.messages],
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "ChatSession":
        return cls(
            id=str(row["id"]),
            title=row.get("title") or DEFAULT_TITLE,
            messages=[Message.from_record(m) for m in (row.get("messages") or [])],
            last_updated=int(row.get("last_updated") or 0),
        )


@dataclass
class LLMSettings:
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024
