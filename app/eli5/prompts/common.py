"""Shared prompt helpers: message-shape conversion for the reply backends."""

from __future__ import annotations
from typing import Sequence

from ..models import Message

# Stored messages use "model" for the assistant; chat-completions APIs use "assistant".
_ROLE_TO_API = {"user": "user", "model": "assistant"}


def history_payload(history: Sequence[Message]) -> list[dict[str, str]]:
    """Wire shape of a history: [{role, content}], empty placeholders dropped."""
    return [
        {"role": m.role, "content": m.content}
        for m in history
        if (m.content or "").strip()
    ]


def assemble(
    *, system: str, history: Sequence[dict[str, str]], user_text: str
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": system},
        *(
            {"role": _ROLE_TO_API.get(m["role"], "user"), "content": m["content"]}
            for m in history
        ),
        {"role": "user", "content": user_text},
    ]
